"""Calendar-day metrics: daily session counts, streaks and display helpers.

Everything here is a pure function of its arguments. Day comparisons use the
local calendar: aware datetimes are converted to local time first, naive
datetimes are taken as already local.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from pokipomo.focus.models import FocusSession


@dataclass(frozen=True)
class Streak:
    """Consecutive-day completion streak and the day it was last anchored to."""

    count: int = 0
    anchor: datetime | None = None


def local_day(moment: datetime) -> date:
    """Calendar day of a moment in local time."""
    if moment.tzinfo is not None:
        return moment.astimezone().date()
    return moment.date()


def is_same_day(a: datetime, b: datetime) -> bool:
    return local_day(a) == local_day(b)


def is_next_day(later: datetime, earlier: datetime) -> bool:
    """True when `later` falls on the calendar day right after `earlier`."""
    return local_day(later) == local_day(earlier) + timedelta(days=1)


def count_sessions_on_day(sessions: Iterable[FocusSession], reference: datetime) -> int:
    """Count sessions whose end falls on the reference calendar day."""
    return sum(1 for s in sessions if is_same_day(s.ended_at, reference))


def advance_streak(previous: Streak, completed_at: datetime) -> Streak:
    """Fold one completion into the streak.

    Same-day completions keep the streak (at least 1), a completion on the
    following day extends it, anything else starts over at 1. The anchor
    always moves to `completed_at`.
    """
    if previous.anchor is None:
        return Streak(count=1, anchor=completed_at)

    if is_same_day(completed_at, previous.anchor):
        count = max(previous.count, 1)
    elif is_next_day(completed_at, previous.anchor):
        count = previous.count + 1
    else:
        count = 1

    return Streak(count=count, anchor=completed_at)


def format_clock(seconds: int | float) -> str:
    """Format a countdown as MM:SS."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_minutes(seconds: int | float) -> str:
    """Format a duration as whole minutes."""
    return f"{int(seconds) // 60} min"


def describe_daily_progress(count: int) -> str:
    return f"{count} session{'' if count == 1 else 's'} today"
