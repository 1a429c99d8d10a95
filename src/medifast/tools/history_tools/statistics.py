"""
History statistics shared by the meditation and fasting features.

All functions take a list of records (newest first) exposing ``duration``,
``completed_at`` and ``reference_date``. None of them mutates its input.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Sequence

from medifast.core.models import StreakState
from medifast.utils.time_conversions import calendar_day, is_next_day

MONDAY = 0
SUNDAY = 6


def _duration(record) -> float:
    return record.duration or 0


def _completion_days(records) -> List[date]:
    """Distinct completion days, newest first."""
    days = {calendar_day(r.completed_at) for r in records if r.completed_at is not None}
    return sorted(days, reverse=True)


def longest(records: Sequence):
    """Record with the largest duration; the first one wins a tie."""
    if not records:
        return None
    return max(records, key=_duration)


def total_duration(records: Sequence) -> float:
    return sum(_duration(r) for r in records)


def average(records: Sequence, since: Optional[datetime] = None) -> Optional[float]:
    """Mean duration of records completed at or after ``since`` (all records when omitted)."""
    if since is None:
        selected = list(records)
    else:
        selected = [r for r in records if r.completed_at is not None and r.completed_at >= since]
    if not selected:
        return None
    return total_duration(selected) / len(selected)


def current_streak(records: Sequence) -> int:
    """Consecutive days counted back from the most recent completion day."""
    streak = 0
    previous = None
    for day in _completion_days(records):
        if previous is None:
            streak = 1
        elif is_next_day(day, previous):
            streak += 1
        else:
            break
        previous = day
    return streak


def best_streak(records: Sequence) -> int:
    best = 0
    run = 0
    previous = None
    for day in reversed(_completion_days(records)):
        run = run + 1 if previous is not None and is_next_day(previous, day) else 1
        best = max(best, run)
        previous = day
    return best


def streak_state(records: Sequence) -> StreakState:
    """Streak state rebuilt from a whole history, used after records are removed."""
    days = _completion_days(records)
    if not days:
        return StreakState()
    return StreakState(
        last_session_date=days[0],
        current_streak=current_streak(records),
        best_streak=best_streak(records),
    )


def update_streak(state: StreakState, ended_at: datetime) -> StreakState:
    """Streak state after one more completed session ending at ``ended_at``."""
    day = calendar_day(ended_at)
    last = state.last_session_date
    if last is None:
        current = 1
    elif day == last:
        current = state.current_streak
    elif is_next_day(last, day):
        current = state.current_streak + 1
    else:
        current = 1
    return StreakState(
        last_session_date=day,
        current_streak=current,
        best_streak=max(state.best_streak, current),
    )


def filter_by_min_duration(records: Sequence, threshold: Optional[float]) -> list:
    if threshold is None:
        return list(records)
    return [r for r in records if _duration(r) >= threshold]


@dataclass
class WeekBucket:
    start: date
    records: list = field(default_factory=list)

    @property
    def end(self) -> date:
        return self.start + timedelta(days=6)

    @property
    def label(self) -> str:
        if self.start.year == self.end.year:
            return f"{self.start:%b %d} – {self.end:%b %d, %Y}"
        return f"{self.start:%b %d, %Y} – {self.end:%b %d, %Y}"


def week_start_for(day: date, week_start: int = MONDAY) -> date:
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def group_by_calendar_week(records: Sequence, week_start: int = MONDAY) -> List[WeekBucket]:
    """Buckets records by the week holding their reference date, newest week first."""
    buckets = {}
    for record in records:
        start = week_start_for(calendar_day(record.reference_date), week_start)
        buckets.setdefault(start, WeekBucket(start=start)).records.append(record)

    grouped = sorted(buckets.values(), key=lambda b: b.start, reverse=True)
    for bucket in grouped:
        bucket.records.sort(key=lambda r: r.reference_date, reverse=True)
    return grouped


class HistoryFilter(Enum):
    ALL = 0
    HOURS_12 = 12
    HOURS_16 = 16
    HOURS_20 = 20

    @property
    def title(self) -> str:
        return "All fasts" if self is HistoryFilter.ALL else f"{self.value}+ hours"

    @property
    def minimum_duration(self) -> Optional[float]:
        return None if self is HistoryFilter.ALL else self.value * 3600

    @classmethod
    def from_hours(cls, hours: float) -> "HistoryFilter":
        if hours >= 20:
            return cls.HOURS_20
        if hours >= 16:
            return cls.HOURS_16
        if hours >= 12:
            return cls.HOURS_12
        return cls.ALL
