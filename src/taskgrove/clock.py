from __future__ import annotations

import os
from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo


def local_timezone() -> tzinfo:
    """The viewer's timezone, taken from TASKGROVE_TIMEZONE (IANA name)."""
    name = os.getenv("TASKGROVE_TIMEZONE", "UTC").strip() or "UTC"
    return ZoneInfo(name)


def to_local(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Express ``dt`` in local time. Naive values are taken as already local."""
    tz = tz or local_timezone()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def local_day(dt: datetime, tz: Optional[tzinfo] = None) -> date:
    return to_local(dt, tz).date()


def days_since_sunday(dt: datetime) -> int:
    # datetime.weekday(): Monday=0 .. Sunday=6
    return (dt.weekday() + 1) % 7


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
