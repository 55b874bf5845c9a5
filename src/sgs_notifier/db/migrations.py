"""Programmatic Alembic upgrades for development databases.

In production the ``contacts`` table belongs to the website's contact
form handler.  Local and smoke-test databases have no such owner, so
``sgs-notifier db-init`` creates the table through the migration kept in
``alembic/versions``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config

from ..config import ENV_DATABASE_URL
from .session import normalize_database_url


def _project_root() -> Path:
    # <repo>/src/sgs_notifier/db/migrations.py
    return Path(__file__).resolve().parents[3]


def build_alembic_config(database_url: Optional[str] = None) -> Config:
    """Return an Alembic config with absolute script locations.

    Raises:
        FileNotFoundError: ``alembic.ini`` is not at the repository root.
    """
    project_root = _project_root()
    alembic_ini_path = project_root / "alembic.ini"
    if not alembic_ini_path.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini_path}")
    cfg = Config(str(alembic_ini_path))
    script_location = project_root / "alembic"
    cfg.set_main_option("script_location", str(script_location))
    cfg.set_main_option("version_locations", str(script_location / "versions"))
    db_url = database_url or os.getenv(ENV_DATABASE_URL)
    if db_url:
        # ConfigParser interpolation: escape percent-encoded characters.
        rendered = normalize_database_url(db_url).render_as_string(hide_password=False)
        cfg.set_main_option("sqlalchemy.url", rendered.replace("%", "%%"))
    return cfg


def upgrade_head(database_url: Optional[str] = None) -> None:
    """Upgrade the database schema to the latest revision."""
    command.upgrade(build_alembic_config(database_url), "head")
