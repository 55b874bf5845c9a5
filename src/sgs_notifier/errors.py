"""Exception types raised by the notifier.

The hierarchy mirrors how far an error is allowed to propagate:

* :class:`StartupError` stops the process.
* :class:`ContactStoreError` and :class:`MissingCredentialsError` abort
  the current poll cycle only.
* :class:`NotificationError` skips a single contact.
"""

from __future__ import annotations

from typing import Iterable, Optional


class NotifierError(Exception):
    """Base class for every notifier error."""


class ConfigurationError(NotifierError):
    """An environment value is present but unusable."""


class StartupError(NotifierError):
    """The process cannot start (initial database probe failed)."""


class ContactStoreError(NotifierError):
    """Reading unacknowledged contacts failed."""


class MissingCredentialsError(NotifierError):
    """One or more messaging settings are absent."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = sorted(missing)
        super().__init__(
            "Missing messaging configuration: " + ", ".join(self.missing)
        )


class NotificationError(NotifierError):
    """A single text message could not be delivered to the provider."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
