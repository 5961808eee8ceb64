"""
Progress statistics.

Everything here is derived from the task list and the current instant on
every call; nothing is cached or stored as a counter.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Iterable, Optional

from scheduling.week_window import week_window
from taskgrove.clock import local_day, to_local
from taskgrove.models import Task, UserStatsSnapshot

TASKS_PER_LEVEL_STEP = 10


def level_threshold(level: int) -> int:
    """Cumulative completions needed to reach ``level`` (0, 10, 30, 60, ...)."""
    return TASKS_PER_LEVEL_STEP * level * (level - 1) // 2


def tree_level(total_completed: int) -> int:
    level = 1
    while level_threshold(level + 1) <= total_completed:
        level += 1
    return level


def current_streak(tasks: Iterable[Task], now: datetime, tz: Optional[tzinfo] = None) -> int:
    """Consecutive days with at least one completion, ending today or yesterday.

    An empty today does not break the streak; the count then starts at
    yesterday.
    """
    days = {
        local_day(t.completed_at, tz)
        for t in tasks
        if t.status == "completed" and t.completed_at is not None
    }
    cursor = local_day(now, tz)
    if cursor not in days:
        cursor -= timedelta(days=1)

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def compute_stats(tasks: Iterable[Task], now: datetime, tz: Optional[tzinfo] = None) -> UserStatsSnapshot:
    tasks = list(tasks)
    now = to_local(now, tz)
    week_start = week_window("current", now, tz).start

    completed = [t for t in tasks if t.status == "completed"]
    this_week = sum(
        1 for t in completed if t.completed_at is not None and t.completed_at >= week_start
    )
    overdue = sum(
        1 for t in tasks
        if t.status == "pending" and t.due_date is not None and t.due_date < now
    )

    return UserStatsSnapshot(
        total_completed=len(completed),
        completed_this_week=this_week,
        overdue_tasks=overdue,
        current_streak=current_streak(completed, now, tz),
        tree_level=tree_level(len(completed)),
    )
