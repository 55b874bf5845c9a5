"""Shared fixtures for the notifier tests.

A temporary SQLite database stands in for the website's Postgres
instance.  The Alembic migration cannot be run for every test, so the
``contacts`` table is reproduced here with SQLAlchemy metadata.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator

import pytest
import sqlalchemy as sa

from sgs_notifier.db.session import get_engine

TWILIO_ENV = {
    "TWILIO_ACCOUNT_SID": "AC123",
    "TWILIO_AUTH_TOKEN": "secret-token",
    "TWILIO_FROM_NUMBER": "+15550001111",
    "TWILIO_TO_NUMBER": "+15550002222",
}


def create_contacts_table(engine: sa.engine.Engine) -> sa.Table:
    metadata = sa.MetaData()
    table = sa.Table(
        "contacts",
        metadata,
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("captcha_score", sa.Float(), nullable=True),
        sa.Column("acknowledged", sa.Boolean(), nullable=False),
        sa.Column("created_on", sa.DateTime(), nullable=False),
        sa.Column("updated_on", sa.DateTime(), nullable=False),
    )
    metadata.create_all(engine)
    return table


def contact_row(contact_id: str, **overrides: Any) -> Dict[str, Any]:
    """Return a contacts row with sensible defaults."""
    row: Dict[str, Any] = {
        "id": contact_id,
        "name": f"Customer {contact_id}",
        "email": f"{contact_id}@example.com",
        "phone": "555-0100",
        "message": "Gutters overflowing",
        "captcha_score": 0.9,
        "acknowledged": False,
        "created_on": datetime(2026, 3, 2, 8, 0),
        "updated_on": datetime(2026, 3, 2, 8, 0),
    }
    row.update(overrides)
    return row


@pytest.fixture
def contacts_engine(tmp_path: Path) -> Iterator[sa.engine.Engine]:
    engine = get_engine(f"sqlite:///{tmp_path / 'contacts.db'}")
    create_contacts_table(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def insert_contacts(contacts_engine: sa.engine.Engine) -> Callable[..., None]:
    table = sa.Table("contacts", sa.MetaData(), autoload_with=contacts_engine)

    def _insert(*rows: Dict[str, Any]) -> None:
        with contacts_engine.begin() as conn:
            conn.execute(table.insert(), list(rows))

    return _insert


@pytest.fixture
def twilio_env(monkeypatch: pytest.MonkeyPatch) -> Dict[str, str]:
    for name, value in TWILIO_ENV.items():
        monkeypatch.setenv(name, value)
    return dict(TWILIO_ENV)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Put the root logger back the way it was after a test configures it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
