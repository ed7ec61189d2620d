"""
Reflection streak — consecutive days with at least one parent-win or
reflection note.

The walk starts at today when today already has a note, otherwise at
yesterday: an evening without a note yet does not break the streak, it
just isn't counted until a note is saved.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tinywins.core.errors import UnknownTimezoneError
from tinywins.domain import ParentNote


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise UnknownTimezoneError(name)


def _local_day(ts: datetime, tz: Optional[tzinfo]) -> date:
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone(tz).date()


def local_today(tz: Optional[tzinfo]) -> date:
    return datetime.now(tz=tz).date()


def reflection_days(notes: Iterable[ParentNote], tz: Optional[tzinfo] = None) -> set[date]:
    """Calendar days with at least one streak-qualifying note."""
    return {_local_day(n.date, tz) for n in notes if n.counts_toward_streak}


def calculate_reflection_streak(
    notes: Iterable[ParentNote],
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> int:
    days = reflection_days(notes, tz)
    if not days:
        return 0

    cursor = today or local_today(tz)
    if cursor not in days:
        cursor -= timedelta(days=1)

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
