"""Cross-feature activity summary read straight from the record store."""
from dataclasses import dataclass
from typing import Optional

from medifast.core import keys
from medifast.core.models import (
    BreathingRoundResult,
    CompletedMeditationSession,
    Fast,
    StreakState,
    decode_list,
)
from medifast.core.ports.store_port import StorePort
from medifast.tools.history_tools import statistics
from medifast.utils.custom_exception import StorageError
from medifast.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class ActivityStats:
    meditation_streak: int = 0
    meditation_total_sessions: int = 0
    meditation_total_minutes: float = 0.0
    breathing_latest_best_retention: Optional[int] = None
    breathing_latest_rounds: int = 0
    fasting_streak: int = 0
    fasting_total_fasts: int = 0
    fasting_longest_hours: Optional[float] = None


def _read(store: StorePort, key: str, decode, default):
    try:
        raw = store.load(key)
        return decode(raw) if raw is not None else default
    except StorageError as e:
        logger.warning(f"Skipping unreadable '{key}' in activity summary: {e}")
        return default


def get_activity_stats(store: StorePort) -> ActivityStats:
    sessions = _read(store, keys.MEDITATION_SESSIONS, lambda r: decode_list(CompletedMeditationSession, r), [])
    streaks = _read(store, keys.MEDITATION_STREAKS, StreakState.from_dict, StreakState())
    rounds = _read(store, keys.BREATHING_HISTORY, lambda r: decode_list(BreathingRoundResult, r), [])
    fasts = _read(store, keys.FASTING_HISTORY, lambda r: decode_list(Fast, r), [])

    longest_fast = statistics.longest(fasts)
    return ActivityStats(
        meditation_streak=streaks.current_streak,
        meditation_total_sessions=len(sessions),
        meditation_total_minutes=statistics.total_duration(sessions) / 60.0,
        breathing_latest_best_retention=max((r.retention_seconds for r in rounds), default=None),
        breathing_latest_rounds=len(rounds),
        fasting_streak=statistics.current_streak(fasts),
        fasting_total_fasts=len(fasts),
        fasting_longest_hours=(
            longest_fast.duration / 3600.0
            if longest_fast is not None and longest_fast.duration is not None else None
        ),
    )
