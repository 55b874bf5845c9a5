"""Database engine construction for the notifier.

This module builds the single SQLAlchemy engine the poll loop uses for
its whole lifetime and probes it once at startup.  The probe is the
only place where a database problem is allowed to stop the process;
after startup, query failures are handled per poll cycle.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Union

import sqlalchemy as sa
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url

from ..config import DEFAULT_CONNECT_TIMEOUT_SECONDS, ENV_DATABASE_URL
from ..errors import StartupError

logger = logging.getLogger(__name__)


POSTGRES_DRIVERNAME = "postgresql+psycopg"

# Schemes that name Postgres without choosing a driver.
_BARE_POSTGRES_SCHEMES = ("postgres", "postgresql")


def normalize_database_url(url: Union[str, URL]) -> URL:
    """Point bare Postgres URLs at the psycopg 3 driver.

    ``postgres://`` (the libpq spelling) is unknown to SQLAlchemy and a
    plain ``postgresql://`` would load psycopg2, which is not installed.
    URLs naming a driver explicitly are returned untouched.
    """
    parsed = make_url(url)
    if parsed.drivername in _BARE_POSTGRES_SCHEMES:
        parsed = parsed.set(drivername=POSTGRES_DRIVERNAME)
    return parsed


def get_engine(url: Optional[str] = None, **kwargs) -> Engine:
    """Build an engine for the contacts database.

    Falls back to ``DATABASE_URL`` and accepts the ``postgres://`` form
    the website's configuration uses.  Nothing is connected here; see
    :func:`open_engine` for the startup check.
    """
    url = url or os.getenv(ENV_DATABASE_URL)
    if not url:
        raise StartupError(f"{ENV_DATABASE_URL} environment variable is not set")
    return create_engine(normalize_database_url(url), **kwargs)


def connect_args_for(url: Union[str, URL], timeout: int) -> Dict[str, Any]:
    """Return DBAPI connect arguments that bound connection time.

    PostgreSQL drivers take ``connect_timeout``; the SQLite driver only
    knows a lock ``timeout``.  Other backends get no extra arguments.
    """
    backend = normalize_database_url(url).get_backend_name()
    if backend == "postgresql":
        return {"connect_timeout": timeout}
    if backend == "sqlite":
        return {"timeout": timeout}
    return {}


def open_engine(url: Optional[str] = None, timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS) -> Engine:
    """Create the notifier's engine and verify the database answers.

    A ``SELECT 1`` is issued over a fresh connection.  Any failure,
    including a missing URL or a connect timeout, is raised as
    :class:`StartupError`.

    Args:
        url: Database URL; defaults to ``DATABASE_URL``.
        timeout: Seconds allowed for establishing the connection.

    Returns:
        A probed :class:`Engine`.
    """
    url = url or os.getenv(ENV_DATABASE_URL)
    if not url:
        raise StartupError(f"{ENV_DATABASE_URL} environment variable is not set")
    try:
        engine = get_engine(
            url,
            pool_pre_ping=True,
            connect_args=connect_args_for(url, timeout),
        )
        with engine.connect() as conn:
            conn.execute(sa.text("SELECT 1"))
    except StartupError:
        raise
    except Exception as exc:
        raise StartupError(f"Failed to set up database connection: {exc}") from exc
    logger.debug("Connected to database backend %s", engine.dialect.name)
    return engine
