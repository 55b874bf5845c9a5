"""Contact store access."""

from .contacts import fetch_unacknowledged  # noqa: F401

__all__ = ["fetch_unacknowledged"]
