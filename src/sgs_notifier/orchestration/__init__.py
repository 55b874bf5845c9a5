"""Scheduling: the business-hours gate and the poll loop."""

from .gate import should_run  # noqa: F401
from .poll_loop import CycleResult, run_cycle, run_forever  # noqa: F401

__all__ = ["should_run", "CycleResult", "run_cycle", "run_forever"]
