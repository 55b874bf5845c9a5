"""Twilio SMS delivery for contact notifications.

Each unacknowledged contact becomes one text to the office phone.  The
message is posted to Twilio's Messages resource as a form-encoded body
with HTTP basic authentication.

The expected environment variables are:

* ``TWILIO_ACCOUNT_SID`` – account identifier, also the basic-auth user.
* ``TWILIO_AUTH_TOKEN`` – basic-auth password.
* ``TWILIO_FROM_NUMBER`` – the Twilio number texts are sent from.
* ``TWILIO_TO_NUMBER`` – the staff phone that receives them.
* ``TWILIO_API_BASE`` – optional API root, ``https://api.twilio.com``
  by default.

Any 2xx response counts as delivered.  The JSON body is only logged.
Everything else raises :class:`NotificationError`; nothing is retried
here because the contact stays unacknowledged and is picked up again on
the next poll.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import requests

from ..config import (
    ENV_TWILIO_ACCOUNT_SID,
    ENV_TWILIO_API_BASE,
    ENV_TWILIO_AUTH_TOKEN,
    ENV_TWILIO_FROM_NUMBER,
    ENV_TWILIO_TO_NUMBER,
)
from ..errors import MissingCredentialsError, NotificationError
from ..models import Contact

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.twilio.com"
API_VERSION = "2010-04-01"

MESSAGE_TEMPLATE = (
    "We are being contacted by '{name}' with email: '{email}' and phone number '{phone}' "
    "for the following reason: '{message}'.\n"
    "Please acknowledge receipt of this contact by replying '{id}' to this message."
)


@dataclass(frozen=True)
class MessagingCredentials:
    """Twilio account secrets and the phone numbers to use."""

    account_sid: str
    auth_token: str
    from_number: str
    to_number: str

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "MessagingCredentials":
        """Read credentials, failing when any of the four values is empty.

        Raises:
            MissingCredentialsError: Lists every missing variable.
        """
        env = os.environ if env is None else env
        values = {
            name: (env.get(name) or "").strip()
            for name in (
                ENV_TWILIO_ACCOUNT_SID,
                ENV_TWILIO_AUTH_TOKEN,
                ENV_TWILIO_FROM_NUMBER,
                ENV_TWILIO_TO_NUMBER,
            )
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise MissingCredentialsError(missing)
        return cls(
            account_sid=values[ENV_TWILIO_ACCOUNT_SID],
            auth_token=values[ENV_TWILIO_AUTH_TOKEN],
            from_number=values[ENV_TWILIO_FROM_NUMBER],
            to_number=values[ENV_TWILIO_TO_NUMBER],
        )

    def __repr__(self) -> str:
        return (
            f"MessagingCredentials(account_sid={self.account_sid!r}, auth_token='***', "
            f"from_number={self.from_number!r}, to_number={self.to_number!r})"
        )


def format_message(contact: Contact) -> str:
    """Render the text sent to staff for ``contact``."""
    return MESSAGE_TEMPLATE.format(
        name=contact.name,
        email=contact.email,
        phone=contact.phone,
        message=contact.message,
        id=contact.id,
    )


def build_payload(contact: Contact, credentials: MessagingCredentials) -> Dict[str, str]:
    """Return the form fields for the Messages resource."""
    return {
        "To": credentials.to_number,
        "From": credentials.from_number,
        "Body": format_message(contact),
        "ProvideFeedback": "true",
    }


def messages_url(account_sid: str, base_url: str = DEFAULT_API_BASE) -> str:
    return f"{base_url.rstrip('/')}/{API_VERSION}/Accounts/{account_sid}/Messages.json"


class TwilioSender:
    """Posts contact notifications to Twilio.

    Args:
        credentials: Account secrets and phone numbers.
        base_url: API root.  Falls back to ``TWILIO_API_BASE`` and then
            to ``https://api.twilio.com``.
        timeout: Per-request timeout in seconds.
        session: Optional :class:`requests.Session`; tests pass a stub.
    """

    def __init__(
        self,
        credentials: MessagingCredentials,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = (base_url or os.getenv(ENV_TWILIO_API_BASE) or DEFAULT_API_BASE).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return messages_url(self.credentials.account_sid, self.base_url)

    def notify(self, contact: Contact) -> None:
        """Send one text describing ``contact``.

        Raises:
            NotificationError: Transport failure or a non-2xx status.
        """
        try:
            resp = self.session.post(
                self.url,
                data=build_payload(contact, self.credentials),
                auth=(self.credentials.account_sid, self.credentials.auth_token),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise NotificationError(f"Failed to reach messaging provider: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise NotificationError(
                f"Failed to send message to contact. Issue: {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            logger.debug("Failed to parse response after sending message: %s", exc)
            return
        logger.debug("Response from sent message: %s", data)

    def close(self) -> None:
        self.session.close()
