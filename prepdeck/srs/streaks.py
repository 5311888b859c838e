"""
Study streaks over session history.

A streak is a run of consecutive calendar days with at least one study
session. The current streak survives one missed day: a run that ended
yesterday still counts until the end of today.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from .schedule import utc_now


@dataclass(frozen=True)
class StreakSummary:
    """Current and longest streak in whole days."""

    current: int = 0
    longest: int = 0


def resolve_timezone(name: str) -> tzinfo:
    """Timezone for an IANA name. UTC does not need the system tz database."""
    if name.upper() in ("UTC", "Z"):
        return UTC
    return ZoneInfo(name)


def study_days(
    timestamps: Iterable[datetime | date],
    tz: tzinfo | None = None,
) -> list[date]:
    """
    Reduce timestamps to sorted distinct calendar dates.

    Aware datetimes are converted to tz first when one is given, so a
    session at 23:30 local time lands on the local day.
    """
    days: set[date] = set()
    for stamp in timestamps:
        if isinstance(stamp, datetime):
            if tz is not None and stamp.tzinfo is not None:
                stamp = stamp.astimezone(tz)
            days.add(stamp.date())
        else:
            days.add(stamp)
    return sorted(days)


def calculate_streak(
    timestamps: Iterable[datetime | date],
    today: date | None = None,
    tz: tzinfo | None = None,
) -> StreakSummary:
    """
    Compute current and longest streaks.

    Args:
        timestamps: Session start times, any order, duplicates allowed
        today: Reference day (defaults to today in tz, or UTC)
        tz: Timezone used to turn aware datetimes into calendar dates

    Returns:
        StreakSummary
    """
    days = study_days(timestamps, tz)
    if not days:
        return StreakSummary()

    if today is None:
        now = utc_now()
        today = (now.astimezone(tz) if tz is not None else now).date()

    longest = 1
    run = 1
    for previous, current in zip(days, days[1:]):
        if current - previous == timedelta(days=1):
            run += 1
            longest = max(longest, run)
        else:
            run = 1

    studied = set(days)
    yesterday = today - timedelta(days=1)
    if today in studied:
        anchor = today
    elif yesterday in studied:
        anchor = yesterday
    else:
        return StreakSummary(current=0, longest=longest)

    current = 0
    day = anchor
    while day in studied:
        current += 1
        day -= timedelta(days=1)

    return StreakSummary(current=current, longest=longest)
