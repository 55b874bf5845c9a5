"""
Configuration for the SGS contact notifier.

This module centralises the constants used across the notifier and the
``NotifierSettings`` container that reads them from the process
environment.  Every value has an environment override so the same build
can run in production and in a development shell.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final, Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

PROJECT_NAME: Final[str] = "SGS Notifier"

# Business hours in the local zone of the gutter-service office.
DEFAULT_TIMEZONE: Final[str] = "America/New_York"
DEFAULT_START_HOUR: Final[int] = 9
DEFAULT_END_HOUR: Final[int] = 15

# Poll every three hours and leave fifteen seconds between texts so the
# messaging provider never sees a burst from us.
DEFAULT_POLL_INTERVAL_SECONDS: Final[int] = 3 * 60 * 60
DEFAULT_SEND_DELAY_SECONDS: Final[int] = 15

# Initial database probe must succeed within this many seconds.
DEFAULT_CONNECT_TIMEOUT_SECONDS: Final[int] = 5

DEFAULT_LOG_FILE: Final[str] = "/var/log/sgs/notifier.log"

# Environment variable names.  Kept together so config-check and the
# runtime agree on spelling.
ENV_DATABASE_URL: Final[str] = "DATABASE_URL"
ENV_DEV: Final[str] = "DEV"
ENV_LOG_FILE: Final[str] = "SGS_NOTIFIER_LOG_FILE"
ENV_TIMEZONE: Final[str] = "SGS_NOTIFIER_TZ"
ENV_START_HOUR: Final[str] = "SGS_NOTIFIER_START_HOUR"
ENV_END_HOUR: Final[str] = "SGS_NOTIFIER_END_HOUR"
ENV_POLL_INTERVAL: Final[str] = "SGS_NOTIFIER_POLL_INTERVAL_SECONDS"
ENV_SEND_DELAY: Final[str] = "SGS_NOTIFIER_SEND_DELAY_SECONDS"
ENV_CONNECT_TIMEOUT: Final[str] = "SGS_NOTIFIER_CONNECT_TIMEOUT"

ENV_TWILIO_ACCOUNT_SID: Final[str] = "TWILIO_ACCOUNT_SID"
ENV_TWILIO_AUTH_TOKEN: Final[str] = "TWILIO_AUTH_TOKEN"
ENV_TWILIO_FROM_NUMBER: Final[str] = "TWILIO_FROM_NUMBER"
ENV_TWILIO_TO_NUMBER: Final[str] = "TWILIO_TO_NUMBER"
ENV_TWILIO_API_BASE: Final[str] = "TWILIO_API_BASE"

# Variables that must be present for the notifier to do useful work.
REQUIRED_ENV_VARS: Final[list[str]] = [
    ENV_DATABASE_URL,
    ENV_TWILIO_ACCOUNT_SID,
    ENV_TWILIO_AUTH_TOKEN,
    ENV_TWILIO_FROM_NUMBER,
    ENV_TWILIO_TO_NUMBER,
]


def load_environment() -> None:
    """Load a ``.env`` file from the working directory, if any.

    Values already present in the real environment win over the file.
    """
    load_dotenv(find_dotenv(usecwd=True), override=False)


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class NotifierSettings:
    """Runtime settings resolved from the environment.

    Attributes:
        database_url: SQLAlchemy URL of the contacts database.
        dev: True when the ``DEV`` variable is present at all.
        log_file: Production log destination.
        timezone: IANA zone used by the business-hours gate.
        start_hour: First hour (inclusive) of the notification window.
        end_hour: Last hour (inclusive, on the hour) of the window.
        poll_interval: Seconds between poll ticks.
        send_delay: Seconds to pause between consecutive texts.
        connect_timeout: Seconds allowed for the initial database probe.
    """

    database_url: Optional[str]
    dev: bool = False
    log_file: str = DEFAULT_LOG_FILE
    timezone: str = DEFAULT_TIMEZONE
    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR
    poll_interval: int = DEFAULT_POLL_INTERVAL_SECONDS
    send_delay: int = DEFAULT_SEND_DELAY_SECONDS
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "NotifierSettings":
        """Build settings from ``env`` (defaults to ``os.environ``)."""
        env = os.environ if env is None else env
        settings = cls(
            database_url=env.get(ENV_DATABASE_URL) or None,
            dev=ENV_DEV in env,
            log_file=env.get(ENV_LOG_FILE) or DEFAULT_LOG_FILE,
            timezone=env.get(ENV_TIMEZONE) or DEFAULT_TIMEZONE,
            start_hour=_int_from_env(env, ENV_START_HOUR, DEFAULT_START_HOUR),
            end_hour=_int_from_env(env, ENV_END_HOUR, DEFAULT_END_HOUR),
            poll_interval=_int_from_env(env, ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL_SECONDS),
            send_delay=_int_from_env(env, ENV_SEND_DELAY, DEFAULT_SEND_DELAY_SECONDS),
            connect_timeout=_int_from_env(env, ENV_CONNECT_TIMEOUT, DEFAULT_CONNECT_TIMEOUT_SECONDS),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if not (0 <= self.start_hour <= 23 and 0 <= self.end_hour <= 23):
            raise ConfigurationError("Business hours must be between 0 and 23")
        if self.start_hour > self.end_hour:
            raise ConfigurationError(
                f"Start hour {self.start_hour} is after end hour {self.end_hour}"
            )
        if self.poll_interval <= 0:
            raise ConfigurationError(f"{ENV_POLL_INTERVAL} must be positive")
        if self.send_delay < 0:
            raise ConfigurationError(f"{ENV_SEND_DELAY} must not be negative")
        if self.connect_timeout <= 0:
            raise ConfigurationError(f"{ENV_CONNECT_TIMEOUT} must be positive")


def missing_required_env(env: Optional[Mapping[str, str]] = None) -> list[str]:
    """Return the sorted names of required variables that are unset or empty."""
    env = os.environ if env is None else env
    return sorted(name for name in REQUIRED_ENV_VARS if not env.get(name))


__all__ = [
    "PROJECT_NAME",
    "NotifierSettings",
    "REQUIRED_ENV_VARS",
    "load_environment",
    "missing_required_env",
]
