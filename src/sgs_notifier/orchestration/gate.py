"""DST-safe business-hours gate.

Staff only want texts during office hours: Monday to Friday between
09:00 and 15:00 local time in the office's zone.  The local wall clock
is resolved through :mod:`zoneinfo` so the window follows daylight
saving changes instead of a fixed UTC offset.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import DEFAULT_END_HOUR, DEFAULT_START_HOUR, DEFAULT_TIMEZONE, ENV_TIMEZONE

logger = logging.getLogger(__name__)


def _as_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        # Assume naive datetimes are UTC
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def should_run(
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
) -> bool:
    """Return True when notifications may go out at ``now``.

    The window is inclusive at both ends: 09:00:00 and 15:00:00 local
    time are inside it, 15:00:01 is not.  Saturdays and Sundays are
    always outside, judged by the local date rather than the UTC one.

    Parameters
    ----------
    now : datetime, optional
        The instant to evaluate.  Naive values are taken as UTC.  When
        omitted the current time is used.
    tz_name : str, optional
        IANA zone name.  Defaults to ``SGS_NOTIFIER_TZ`` or
        ``"America/New_York"``.
    start_hour, end_hour : int
        Local hours bounding the window.

    Returns
    -------
    bool
        False outside the window, at weekends, or when the zone name
        cannot be resolved.
    """
    tz_str = tz_name or os.environ.get(ENV_TIMEZONE, DEFAULT_TIMEZONE)
    try:
        tz = ZoneInfo(tz_str)
    except (ZoneInfoNotFoundError, ValueError):
        logger.error(
            "Failed to load time zone %r for business hours, skipping notifications", tz_str
        )
        return False

    now_local = _as_utc(now).astimezone(tz)
    if now_local.weekday() >= 5:
        return False
    start = now_local.replace(hour=start_hour, minute=0, second=0, microsecond=0)
    end = now_local.replace(hour=end_hour, minute=0, second=0, microsecond=0)
    return start <= now_local <= end
