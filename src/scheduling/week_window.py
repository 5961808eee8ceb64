from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, List, Optional, Union

from taskgrove.clock import days_since_sunday, local_day, to_local
from taskgrove.models import Task, WeekSummary

ANCHOR_OFFSETS = {"last": -1, "current": 0, "next": 1}


@dataclass(frozen=True)
class WeekWindow:
    anchor: str
    start: datetime
    end: datetime

    def contains(self, dt: datetime) -> bool:
        return self.start <= dt <= self.end

    def days(self) -> List[date]:
        first = self.start.date()
        return [first + timedelta(days=i) for i in range(7)]


def week_window(anchor: str, now: datetime, tz: Optional[tzinfo] = None) -> WeekWindow:
    """Sunday 00:00 through Saturday 23:59:59.999999 (local) around ``now``."""
    if anchor not in ANCHOR_OFFSETS:
        raise ValueError(f"week anchor must be one of {sorted(ANCHOR_OFFSETS)}, got {anchor!r}")

    local_now = to_local(now, tz)
    sunday = local_now.date() - timedelta(days=days_since_sunday(local_now))
    sunday += timedelta(weeks=ANCHOR_OFFSETS[anchor])
    saturday = sunday + timedelta(days=6)

    zone = local_now.tzinfo
    return WeekWindow(
        anchor=anchor,
        start=datetime.combine(sunday, time.min, tzinfo=zone),
        end=datetime.combine(saturday, time.max, tzinfo=zone),
    )


def tasks_in_window(tasks: Iterable[Task], window: WeekWindow, now: datetime) -> List[Task]:
    """Tasks due inside the window.

    Undated pending tasks belong to the current week only; they come back as
    copies carrying the window's closing instant as a display deadline. The
    originals are left untouched.
    """
    is_current = window.contains(to_local(now, window.start.tzinfo))
    out = []
    for task in tasks:
        if task.due_date is not None:
            if window.contains(task.due_date):
                out.append(task)
        elif is_current and task.status == "pending":
            out.append(task.model_copy(update={"due_date": window.end}))
    return out


def tasks_by_day(
    tasks: Iterable[Task],
    day: Union[date, datetime],
    tz: Optional[tzinfo] = None,
) -> List[Task]:
    """Tasks whose due date falls on ``day`` in the viewer's local calendar."""
    if isinstance(day, datetime):
        day = local_day(day, tz)
    return [t for t in tasks if t.due_date is not None and local_day(t.due_date, tz) == day]


def bucket_by_day(tasks: Iterable[Task], window: WeekWindow) -> List[List[Task]]:
    tasks = list(tasks)
    zone = window.start.tzinfo
    return [tasks_by_day(tasks, day, zone) for day in window.days()]


def summarize_week(tasks: Iterable[Task], now: datetime) -> WeekSummary:
    tasks = list(tasks)
    completed = sum(1 for t in tasks if t.status == "completed")
    overdue = sum(
        1 for t in tasks
        if t.status == "pending" and t.due_date is not None and t.due_date < now
    )
    return WeekSummary(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        overdue=overdue,
    )
