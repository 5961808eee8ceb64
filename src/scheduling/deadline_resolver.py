"""
Deadline phrase resolution.

A fixed, ordered keyword table rather than a date parser: the first rule
whose keyword occurs in the lower-cased phrase decides, regardless of where
in the phrase the keyword sits. Anything unmatched falls back to one week out.
Weeks start on Sunday.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Callable, List, Optional, Tuple

from taskgrove.clock import days_since_sunday, to_local

Rule = Tuple[Callable[[str], bool], Callable[[datetime], datetime]]

MONDAY = 0


def _contains(keyword: str) -> Callable[[str], bool]:
    return lambda phrase: keyword in phrase


def _tomorrow(now: datetime) -> datetime:
    return now + timedelta(days=1)


def _end_of_this_week(now: datetime) -> datetime:
    return now + timedelta(days=7 - days_since_sunday(now))


def _next_week(now: datetime) -> datetime:
    return now + timedelta(days=7)


def _next_monday(now: datetime) -> datetime:
    # strictly after today: on a Monday this is the following Monday
    days_ahead = (MONDAY - now.weekday()) % 7 or 7
    return now + timedelta(days=days_ahead)


RULES: List[Rule] = [
    (_contains("tomorrow"), _tomorrow),
    (_contains("this week"), _end_of_this_week),
    (_contains("next week"), _next_week),
    (_contains("monday"), _next_monday),
]

FALLBACK = _next_week


def resolve_deadline(
    phrase: Optional[str],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """Map a free-text deadline phrase to a concrete instant. Never fails."""
    local_now = to_local(now, tz)
    text = (phrase or "").lower()
    if text:
        for matches, resolve in RULES:
            if matches(text):
                return resolve(local_now)
    return FALLBACK(local_now)
