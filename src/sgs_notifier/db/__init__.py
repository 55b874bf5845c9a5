"""Database helpers: engine setup and development migrations."""

from .session import get_engine, open_engine  # noqa: F401

__all__ = ["get_engine", "open_engine"]
