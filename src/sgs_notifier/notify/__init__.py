"""Outbound notification channels.

Only Twilio SMS is implemented.  Callers go through :mod:`.twilio` so
tests can replace the HTTP session without touching the network.
"""

from .twilio import MessagingCredentials, TwilioSender, format_message  # noqa: F401

__all__ = ["MessagingCredentials", "TwilioSender", "format_message"]
