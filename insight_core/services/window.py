"""
Time window selection over timestamped log entries.

All filters are pure and order preserving: the output keeps the relative
order of the input and the input is never modified.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo
from enum import IntEnum
from typing import Protocol, TypeVar

from insight_core.domain.models import LogRepository, ensure_aware


class Timestamped(Protocol):
    @property
    def timestamp(self) -> datetime: ...


EntryT = TypeVar("EntryT", bound=Timestamped)


class ReportPeriod(IntEnum):
    """Analysis windows offered to the user, in days."""

    WEEK = 7
    FORTNIGHT = 14
    MONTH = 30
    QUARTER = 90


def filter_window(entries: Iterable[EntryT], period_days: int, now: datetime) -> list[EntryT]:
    """Entries with ``now - period_days <= timestamp <= now``."""
    if period_days <= 0:
        raise ValueError(f"period_days must be positive, got {period_days}")
    now = ensure_aware(now)
    start = now - timedelta(days=period_days)
    return [entry for entry in entries if start <= entry.timestamp <= now]


def window_between(entries: Iterable[EntryT], start: datetime, end: datetime) -> list[EntryT]:
    """Entries in the half-open range ``[start, end)``."""
    start, end = ensure_aware(start), ensure_aware(end)
    return [entry for entry in entries if start <= entry.timestamp < end]


def filter_repository(repository: LogRepository, period_days: int, now: datetime) -> LogRepository:
    """Apply :func:`filter_window` to every stream of a repository."""
    return LogRepository(
        glucose=tuple(filter_window(repository.glucose, period_days, now)),
        carbs=tuple(filter_window(repository.carbs, period_days, now)),
        insulin=tuple(filter_window(repository.insulin, period_days, now)),
        medications=tuple(filter_window(repository.medications, period_days, now)),
        activities=tuple(filter_window(repository.activities, period_days, now)),
        moods=tuple(filter_window(repository.moods, period_days, now)),
    )


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    return ensure_aware(moment).astimezone(tz)


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of ``moment`` in the user's timezone; naive values are UTC."""
    return to_local(moment, tz).date()
