from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import List, Optional

from medifast.config import settings
from medifast.core import keys
from medifast.core.models import Fast, StreakState, decode_list, encode_list
from medifast.core.status import ImpactStrength, NotifyKind
from medifast.tools.history_tools import statistics
from medifast.tools.history_tools.statistics import HistoryFilter, WeekBucket
from medifast.tools.time_tools.base_tool import SessionTool
from medifast.utils.custom_exception import ValidationError
from medifast.utils.logging_handler import setup_logger
from medifast.utils.time_conversions import hms

logger = setup_logger(__name__)


@dataclass(frozen=True)
class FastingSnapshot:
    is_active: bool
    active: Optional[Fast]
    elapsed_seconds: float

    @property
    def elapsed_formatted(self) -> str:
        return hms(self.elapsed_seconds)


class FastingTracker(SessionTool):
    """
    Tracks one open-ended fast at a time plus the history of completed fasts.

    There is no ticking here: the elapsed time is always derived from the active
    start timestamp, so the history is unaffected by the app being closed.
    """
    def __init__(self, store, cues, clock=None, loop=None, history_limit: int = settings.HISTORY_LIMIT):
        super().__init__(store, cues, clock=clock, loop=loop)
        self._history_limit = history_limit
        self._active: Optional[Fast] = self._load(keys.FASTING_ACTIVE, Fast.from_dict)
        self._history: List[Fast] = self._load(
            keys.FASTING_HISTORY, lambda raw: decode_list(Fast, raw), []
        )
        self._streaks: StreakState = self._load(keys.FASTING_STREAKS, StreakState.from_dict, StreakState())

    @property
    def is_running(self) -> bool:
        return self._active is not None

    @property
    def active(self) -> Optional[Fast]:
        return self._active

    @property
    def history(self) -> List[Fast]:
        """Completed fasts, newest first."""
        return list(self._history)

    @property
    def streaks(self) -> StreakState:
        """Stored streak state; rebuilt from history whenever fasts are deleted."""
        return self._streaks

    def live_elapsed(self, now: Optional[datetime] = None) -> float:
        """Seconds since the active fast started; 0 when not fasting."""
        if self._active is None:
            return 0.0
        return max(0.0, (self._now(now) - self._active.start_at).total_seconds())

    def get_status(self, now: Optional[datetime] = None) -> FastingSnapshot:
        return FastingSnapshot(
            is_active=self.is_running,
            active=self._active,
            elapsed_seconds=self.live_elapsed(now),
        )

    # --- Intents ---
    def start(self, now: Optional[datetime] = None) -> bool:
        """Starts a fast. Returns False (and changes nothing) when one is already active."""
        if self._active is not None:
            logger.warning("A fast is already active.")
            return False
        self._active = Fast(start_at=self._now(now))
        self._save(keys.FASTING_ACTIVE, self._active.to_dict())
        self._cue("impact", ImpactStrength.MEDIUM)
        logger.info(f"Fast started at {self._active.start_at.isoformat()}.")
        self.on_start.emit(self.get_status(now))
        return True

    def stop(self, now: Optional[datetime] = None) -> Optional[Fast]:
        """Ends the active fast and moves it to the head of the history."""
        if self._active is None:
            logger.warning("No active fast to stop.")
            return None
        end = self._now(now)
        completed = replace(
            self._active,
            end_at=end,
            duration=max(0.0, (end - self._active.start_at).total_seconds()),
        )
        self._active = None
        self._history.insert(0, completed)
        if len(self._history) > self._history_limit:
            del self._history[self._history_limit:]
        self._save(keys.FASTING_HISTORY, encode_list(self._history))
        self._remove(keys.FASTING_ACTIVE)

        self._streaks = statistics.update_streak(self._streaks, end)
        self._save(keys.FASTING_STREAKS, self._streaks.to_dict())

        self._cue("notify", NotifyKind.SUCCESS)
        logger.info(f"Fast ended after {hms(completed.duration)}.")
        self.on_stop.emit(completed)
        return completed

    def update_active_start_time(self, by_hours: int = 0, by_minutes: int = 0,
                                 now: Optional[datetime] = None) -> bool:
        """
        Shifts the active fast's start by a signed offset (negative moves it earlier).

        Returns:
            bool: False when no fast is active or the new start would be in the future.
        """
        if self._active is None:
            logger.warning("Cannot adjust the start time: no active fast.")
            return False
        try:
            new_start = self._validated_start(timedelta(hours=by_hours, minutes=by_minutes), self._now(now))
        except ValidationError as e:
            logger.warning(f"Start time not changed: {e.message}")
            return False

        self._active = replace(self._active, start_at=new_start)
        self._save(keys.FASTING_ACTIVE, self._active.to_dict())
        logger.info(f"Fast start moved to {new_start.isoformat()}.")
        return True

    def delete_fast(self, fast_id: str) -> bool:
        remaining = [f for f in self._history if f.id != fast_id]
        if len(remaining) == len(self._history):
            return False
        self._history = remaining
        self._save(keys.FASTING_HISTORY, encode_list(self._history))
        self._rebuild_streaks()
        logger.info(f"Fast {fast_id} deleted.")
        return True

    def clear_history(self) -> None:
        self._history = []
        self._save(keys.FASTING_HISTORY, [])
        self._rebuild_streaks()
        logger.info("Fasting history cleared.")

    # --- History views ---
    @property
    def last_fast(self) -> Optional[Fast]:
        return self._history[0] if self._history else None

    @property
    def longest_fast(self) -> Optional[Fast]:
        return statistics.longest(self._history)

    def seven_day_average(self, now: Optional[datetime] = None) -> Optional[float]:
        return statistics.average(self._history, since=self._now(now) - timedelta(days=7))

    @property
    def current_streak(self) -> int:
        """Recomputed from history; matches ``streaks`` once deletions have been applied."""
        return statistics.current_streak(self._history)

    @property
    def best_streak(self) -> int:
        return statistics.best_streak(self._history)

    def filtered_history(self, history_filter: HistoryFilter = HistoryFilter.ALL) -> List[Fast]:
        return statistics.filter_by_min_duration(self._history, history_filter.minimum_duration)

    def weekly_history(self, history_filter: HistoryFilter = HistoryFilter.ALL) -> List[WeekBucket]:
        return statistics.group_by_calendar_week(self.filtered_history(history_filter))

    def _rebuild_streaks(self) -> None:
        self._streaks = statistics.streak_state(self._history)
        self._save(keys.FASTING_STREAKS, self._streaks.to_dict())

    def _validated_start(self, offset: timedelta, now: datetime) -> datetime:
        new_start = self._active.start_at + offset
        if new_start > now:
            raise ValidationError("start_at", "The fast cannot start in the future.")
        return new_start
