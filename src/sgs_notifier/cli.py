"""Command-line interface for the SGS contact notifier.

This module uses the :mod:`click` library to expose the notifier's
commands.  ``run`` is what the service manager starts; the others are
for operators.  None of the commands take option flags: everything is
configured through the environment (see :mod:`sgs_notifier.config`).
"""

from __future__ import annotations

import functools
import logging
import signal
import threading
from types import FrameType
from typing import Optional

import click
from sqlalchemy.engine import Engine

from .config import NotifierSettings, load_environment, missing_required_env
from .db.session import open_engine
from .errors import ConfigurationError, StartupError
from .logging_setup import configure_logging
from .orchestration.gate import should_run
from .orchestration.poll_loop import CycleResult, run_cycle, run_forever

logger = logging.getLogger(__name__)


def _load_settings() -> NotifierSettings:
    load_environment()
    try:
        settings = NotifierSettings.from_env()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    configure_logging(settings.dev, settings.log_file)
    return settings


def _build_engine(settings: NotifierSettings) -> Engine:
    """Open the database or fail the command.

    Factored out so tests can monkeypatch it.
    """
    try:
        return open_engine(settings.database_url, timeout=settings.connect_timeout)
    except StartupError as exc:
        logger.critical("Failed to set up database connection: %s", exc)
        raise click.ClickException(str(exc))


def _cycle_for(settings: NotifierSettings):
    gate = functools.partial(
        should_run,
        tz_name=settings.timezone,
        start_hour=settings.start_hour,
        end_hour=settings.end_hour,
    )
    return functools.partial(run_cycle, gate=gate, send_delay=settings.send_delay)


@click.group()
def cli() -> None:
    """SGS contact notifier."""
    pass


@cli.command(name="run")
def run_cmd() -> None:
    """Poll for unacknowledged contacts and text staff until stopped.

    The database is probed once at startup; if that fails the command
    exits with status 1.  SIGTERM and SIGINT stop the loop between
    cycles.
    """
    settings = _load_settings()
    engine = _build_engine(settings)
    stop_event = threading.Event()

    def _handle_signal(signum: int, frame: Optional[FrameType]) -> None:
        logger.info("Received signal %s, stopping poll loop", signum)
        stop_event.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    logger.info(
        "Starting notifier: polling every %ds, weekdays %02d:00-%02d:00 %s",
        settings.poll_interval,
        settings.start_hour,
        settings.end_hour,
        settings.timezone,
    )
    try:
        run_forever(
            engine,
            interval=settings.poll_interval,
            stop_event=stop_event,
            cycle=_cycle_for(settings),
        )
    finally:
        engine.dispose()


@cli.command(name="poll-once")
def poll_once() -> None:
    """Run a single gated poll cycle and report what it did."""
    settings = _load_settings()
    engine = _build_engine(settings)
    try:
        result: CycleResult = _cycle_for(settings)(engine)
    finally:
        engine.dispose()
    if result.skipped:
        click.echo("Skipped: outside of work hours")
        return
    if result.error:
        raise click.ClickException(result.error)
    click.echo(
        f"Notified {len(result.sent)} contact(s), {len(result.failed)} failed"
    )


@cli.command(name="config-check")
def config_check() -> None:
    """Validate that required configuration variables are present.

    Missing variables are listed in sorted order on stderr and the
    command exits with status 2.  No network calls are made.
    """
    load_environment()
    missing = missing_required_env()
    if missing:
        click.echo("Missing environment variables: " + ", ".join(missing), err=True)
        ctx = click.get_current_context()
        ctx.exit(2)
    try:
        NotifierSettings.from_env()
    except ConfigurationError as exc:
        click.echo(f"Invalid configuration: {exc}", err=True)
        ctx = click.get_current_context()
        ctx.exit(2)
    click.echo("OK")


@cli.command(name="db-init")
def db_init() -> None:
    """Create the contacts table in a development database.

    Applies the Alembic migrations against ``DATABASE_URL``.
    """
    from .db.migrations import upgrade_head  # imported here to keep alembic off the run path

    load_environment()
    try:
        upgrade_head()
    except Exception as exc:
        raise click.ClickException(f"Database initialization failed: {exc}")
    click.echo("Database initialization complete.")
