import math
import re
from datetime import date, datetime, timedelta


def convert_to_seconds(hours=0, minutes=0, seconds=0):
    """
    Converts hours, minutes, and seconds into a total duration in seconds.

    Raises:
        ValueError: If any input is negative.
    """
    if any(val < 0 for val in [hours, minutes, seconds]):
        raise ValueError("Time components cannot be negative.")
    return (hours * 3600) + (minutes * 60) + seconds


def _whole_seconds(total_seconds) -> int:
    # Negative durations display as zero; fractions round to the nearest second.
    return max(0, int(math.floor(total_seconds + 0.5)))


def hms(total_seconds) -> str:
    """Formats a duration as HH:MM:SS. Hours are not wrapped at 24 (95:59:07 is valid)."""
    total = _whole_seconds(total_seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def ms(total_seconds) -> str:
    """Formats a duration as MM:SS. Minutes keep counting past 59."""
    total = _whole_seconds(total_seconds)
    return f"{total // 60:02}:{total % 60:02}"


def countdown(total_seconds) -> str:
    """MM:SS below an hour, HH:MM:SS from an hour up."""
    total = _whole_seconds(total_seconds)
    return hms(total) if total >= 3600 else ms(total)


def parse_time_string(time_str: str) -> int:
    """
    Parses a string representing time (e.g., '1h 30m', '20m', '45s') into seconds.
    A bare number is read as seconds.
    """
    if not time_str:
        return 0

    time_str = time_str.lower().replace(" ", "")
    if time_str.isdigit():
        return int(time_str)

    parts = {}
    for unit in ("h", "m", "s"):
        match = re.search(rf"(\d+){unit}", time_str)
        parts[unit] = int(match.group(1)) if match else 0

    return convert_to_seconds(parts["h"], parts["m"], parts["s"])


def calendar_day(moment: datetime) -> date:
    """The calendar day a timestamp falls on, in the timestamp's own timezone."""
    return moment.date()


def is_next_day(previous: date, current: date) -> bool:
    return current - previous == timedelta(days=1)


def parse_iso(value: str) -> datetime:
    """Parses an ISO-8601 timestamp, accepting a trailing 'Z' for UTC."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
