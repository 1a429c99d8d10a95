"""Streaks, averages, filtering and weekly grouping over record histories."""
from datetime import date, datetime, timedelta

from medifast.core.models import Fast, StreakState
from medifast.tools.history_tools import statistics
from medifast.tools.history_tools.statistics import HistoryFilter, SUNDAY


def fast_ending(end, hours):
    return Fast(start_at=end - timedelta(hours=hours), end_at=end, duration=hours * 3600.0)


def newest_first(*records):
    return sorted(records, key=lambda r: r.reference_date, reverse=True)


def test_streak_counts_consecutive_days():
    day = datetime(2024, 3, 10, 8, 0)
    history = newest_first(*(fast_ending(day - timedelta(days=i), 16) for i in range(3)))
    assert statistics.current_streak(history) == 3


def test_same_day_duplicate_does_not_extend_streak():
    day = datetime(2024, 3, 10, 8, 0)
    history = newest_first(
        fast_ending(day, 16),
        fast_ending(day + timedelta(hours=6), 12),
        fast_ending(day - timedelta(days=1), 16),
    )
    assert statistics.current_streak(history) == 2


def test_gap_breaks_current_streak_but_not_best():
    day = datetime(2024, 3, 10, 8, 0)
    history = newest_first(
        fast_ending(day, 16),
        fast_ending(day - timedelta(days=3), 16),
        fast_ending(day - timedelta(days=4), 16),
        fast_ending(day - timedelta(days=5), 16),
    )
    assert statistics.current_streak(history) == 1
    assert statistics.best_streak(history) == 3


def test_streaks_of_empty_history_are_zero():
    assert statistics.current_streak([]) == 0
    assert statistics.best_streak([]) == 0


def test_streak_state_rebuilt_from_history():
    assert statistics.streak_state([]) == StreakState()

    day = datetime(2024, 3, 10, 8, 0)
    history = newest_first(*(fast_ending(day - timedelta(days=i), 16) for i in range(3)))
    assert statistics.streak_state(history) == StreakState(
        last_session_date=date(2024, 3, 10), current_streak=3, best_streak=3
    )


def test_update_streak_transitions():
    first = statistics.update_streak(StreakState(), datetime(2024, 1, 1, 7))
    assert first == StreakState(date(2024, 1, 1), 1, 1)

    same_day = statistics.update_streak(first, datetime(2024, 1, 1, 22))
    assert same_day == first

    next_day = statistics.update_streak(same_day, datetime(2024, 1, 2, 6))
    assert (next_day.current_streak, next_day.best_streak) == (2, 2)

    after_gap = statistics.update_streak(next_day, datetime(2024, 1, 5, 6))
    assert (after_gap.current_streak, after_gap.best_streak) == (1, 2)
    assert after_gap.last_session_date == date(2024, 1, 5)


def test_longest_prefers_first_on_tie():
    day = datetime(2024, 3, 10, 8, 0)
    a = fast_ending(day, 16)
    b = fast_ending(day - timedelta(days=1), 16)
    assert statistics.longest([a, b]) is a
    assert statistics.longest([]) is None


def test_average_over_window():
    now = datetime(2024, 3, 10, 12, 0)
    history = [
        fast_ending(now - timedelta(days=1), 16),
        fast_ending(now - timedelta(days=2), 12),
        fast_ending(now - timedelta(days=9), 20),
    ]
    assert statistics.average(history, since=now - timedelta(days=7)) == 14 * 3600
    assert statistics.average(history) == 16 * 3600
    assert statistics.average(history, since=now) is None


def test_filter_by_min_duration():
    now = datetime(2024, 3, 10, 12, 0)
    history = [fast_ending(now, 11), fast_ending(now, 12), fast_ending(now, 17)]
    kept = statistics.filter_by_min_duration(history, HistoryFilter.HOURS_12.minimum_duration)
    assert [f.duration / 3600 for f in kept] == [12, 17]
    assert statistics.filter_by_min_duration(history, HistoryFilter.ALL.minimum_duration) == history


def test_history_filter_from_hours():
    assert HistoryFilter.from_hours(8) is HistoryFilter.ALL
    assert HistoryFilter.from_hours(16) is HistoryFilter.HOURS_16
    assert HistoryFilter.from_hours(30) is HistoryFilter.HOURS_20
    assert HistoryFilter.HOURS_16.title == "16+ hours"


def test_group_by_calendar_week_newest_week_first():
    # 2024-03-04 is a Monday.
    history = newest_first(
        fast_ending(datetime(2024, 3, 11, 9), 16),
        fast_ending(datetime(2024, 3, 10, 9), 16),
        fast_ending(datetime(2024, 3, 4, 9), 16),
    )
    weeks = statistics.group_by_calendar_week(history)
    assert [w.start for w in weeks] == [date(2024, 3, 11), date(2024, 3, 4)]
    assert len(weeks[1].records) == 2
    assert weeks[1].end == date(2024, 3, 10)


def test_group_by_calendar_week_respects_week_start():
    history = [fast_ending(datetime(2024, 3, 10, 9), 16)]  # a Sunday
    assert statistics.group_by_calendar_week(history, week_start=SUNDAY)[0].start == date(2024, 3, 10)


def test_week_label_spanning_new_year():
    bucket = statistics.WeekBucket(start=date(2024, 12, 30))
    assert "2024" in bucket.label and "2025" in bucket.label
