"""Tests for environment-driven settings."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from sgs_notifier.config import (
    DEFAULT_LOG_FILE,
    NotifierSettings,
    REQUIRED_ENV_VARS,
    load_environment,
    missing_required_env,
)
from sgs_notifier.errors import ConfigurationError


def test_defaults() -> None:
    settings = NotifierSettings.from_env({"DATABASE_URL": "sqlite://"})
    assert settings.database_url == "sqlite://"
    assert settings.dev is False
    assert settings.log_file == DEFAULT_LOG_FILE
    assert settings.timezone == "America/New_York"
    assert (settings.start_hour, settings.end_hour) == (9, 15)
    assert settings.poll_interval == 3 * 60 * 60
    assert settings.send_delay == 15
    assert settings.connect_timeout == 5


def test_dev_flag_only_needs_presence() -> None:
    assert NotifierSettings.from_env({"DEV": ""}).dev is True


def test_overrides() -> None:
    settings = NotifierSettings.from_env(
        {
            "SGS_NOTIFIER_TZ": "America/Chicago",
            "SGS_NOTIFIER_START_HOUR": "8",
            "SGS_NOTIFIER_END_HOUR": "17",
            "SGS_NOTIFIER_POLL_INTERVAL_SECONDS": "600",
            "SGS_NOTIFIER_SEND_DELAY_SECONDS": "0",
            "SGS_NOTIFIER_LOG_FILE": "/tmp/notifier.log",
        }
    )
    assert settings.timezone == "America/Chicago"
    assert (settings.start_hour, settings.end_hour) == (8, 17)
    assert settings.poll_interval == 600
    assert settings.send_delay == 0
    assert settings.log_file == "/tmp/notifier.log"


@pytest.mark.parametrize(
    "env",
    [
        {"SGS_NOTIFIER_POLL_INTERVAL_SECONDS": "soon"},
        {"SGS_NOTIFIER_POLL_INTERVAL_SECONDS": "0"},
        {"SGS_NOTIFIER_START_HOUR": "16"},
        {"SGS_NOTIFIER_END_HOUR": "24"},
        {"SGS_NOTIFIER_SEND_DELAY_SECONDS": "-1"},
    ],
)
def test_invalid_values_raise(env: dict) -> None:
    with pytest.raises(ConfigurationError):
        NotifierSettings.from_env(env)


def test_missing_required_env_is_sorted() -> None:
    assert missing_required_env({}) == sorted(REQUIRED_ENV_VARS)
    env = {name: "x" for name in REQUIRED_ENV_VARS}
    assert missing_required_env(env) == []
    del env["TWILIO_TO_NUMBER"]
    env["DATABASE_URL"] = ""
    assert missing_required_env(env) == ["DATABASE_URL", "TWILIO_TO_NUMBER"]


def _unset(monkeypatch: pytest.MonkeyPatch, name: str) -> None:
    # setenv first so the value load_dotenv writes is undone at teardown
    monkeypatch.setenv(name, "")
    monkeypatch.delenv(name)


def test_load_environment_fills_gaps_from_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "SGS_NOTIFIER_TZ=America/Chicago\n"
        "DATABASE_URL=postgres://from-file@h/db\n"
    )
    monkeypatch.chdir(tmp_path)
    _unset(monkeypatch, "SGS_NOTIFIER_TZ")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///real.db")

    load_environment()

    assert os.environ["SGS_NOTIFIER_TZ"] == "America/Chicago"
    assert os.environ["DATABASE_URL"] == "sqlite:///real.db"
    settings = NotifierSettings.from_env()
    assert settings.timezone == "America/Chicago"
    assert settings.database_url == "sqlite:///real.db"


def test_load_environment_searches_parent_directories(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("SGS_NOTIFIER_SEND_DELAY_SECONDS=3\n")
    nested = tmp_path / "deploy"
    nested.mkdir()
    monkeypatch.chdir(nested)
    _unset(monkeypatch, "SGS_NOTIFIER_SEND_DELAY_SECONDS")

    load_environment()

    assert os.environ["SGS_NOTIFIER_SEND_DELAY_SECONDS"] == "3"
