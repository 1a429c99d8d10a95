"""Duration formatting and time parsing helpers."""
from datetime import date, datetime, timedelta, timezone

import pytest

from medifast.utils.time_conversions import (
    calendar_day,
    convert_to_seconds,
    countdown,
    hms,
    is_next_day,
    ms,
    parse_iso,
    parse_time_string,
)


def test_hms_does_not_wrap_hours():
    assert hms(95 * 3600 + 59 * 60 + 7) == "95:59:07"


def test_ms_formats_under_an_hour():
    assert ms(3599) == "59:59"
    assert ms(0) == "00:00"


def test_ms_keeps_counting_minutes():
    assert ms(3725) == "62:05"


def test_negative_durations_display_as_zero():
    assert hms(-5) == "00:00:00"
    assert ms(-1) == "00:00"


def test_fractions_round_to_nearest_second():
    assert ms(59.4) == "00:59"
    assert ms(59.5) == "01:00"


def test_countdown_switches_format_at_one_hour():
    assert countdown(3599) == "59:59"
    assert countdown(3600) == "01:00:00"


def test_convert_to_seconds_rejects_negative():
    assert convert_to_seconds(1, 2, 3) == 3723
    with pytest.raises(ValueError):
        convert_to_seconds(minutes=-1)


@pytest.mark.parametrize("text, expected", [
    ("45", 45),
    ("45s", 45),
    ("20m", 1200),
    ("1h 30m", 5400),
    ("1m30s", 90),
    ("", 0),
])
def test_parse_time_string(text, expected):
    assert parse_time_string(text) == expected


def test_calendar_day_uses_timestamp_timezone():
    late = datetime(2024, 1, 1, 23, 30, tzinfo=timezone.utc)
    assert calendar_day(late) == date(2024, 1, 1)
    assert calendar_day(late.astimezone(timezone(timedelta(hours=2)))) == date(2024, 1, 2)


def test_is_next_day():
    assert is_next_day(date(2024, 2, 28), date(2024, 2, 29))
    assert not is_next_day(date(2024, 2, 28), date(2024, 3, 1))
    assert not is_next_day(date(2024, 2, 28), date(2024, 2, 28))


def test_parse_iso_accepts_z_suffix():
    assert parse_iso("2024-01-01T23:30:00Z") == datetime(2024, 1, 1, 23, 30, tzinfo=timezone.utc)
