from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from medifast.config import settings
from medifast.core import keys
from medifast.core.models import (
    CompletedMeditationSession,
    MeditationPlan,
    StreakState,
    decode_list,
    encode_list,
)
from medifast.core.status import CueSound, ImpactStrength, MeditationPhase, NotifyKind
from medifast.tools.history_tools import statistics
from medifast.tools.time_tools.base_tool import SessionTool
from medifast.utils import Event
from medifast.utils.logging_handler import setup_logger
from medifast.utils.time_conversions import countdown

logger = setup_logger(__name__)


@dataclass(frozen=True)
class MeditationSnapshot:
    phase: MeditationPhase
    session_index: int
    total_sessions: int
    elapsed_seconds: int  # within the current warm-up or session
    phase_duration_seconds: int
    remaining_seconds: int
    total_remaining_seconds: int
    progress: float  # 0..1 over warm-up plus every session
    foreground_suspended: bool

    @property
    def session_number(self) -> int:
        return self.session_index + 1

    @property
    def remaining_formatted(self) -> str:
        return countdown(self.remaining_seconds)


@dataclass(frozen=True)
class MeditationStats:
    session_count: int
    total_minutes: float
    longest: Optional[CompletedMeditationSession]
    seven_day_average: Optional[float]
    current_streak: int
    best_streak: int


class MeditationSession(SessionTool):
    """
    Runs a meditation plan: an optional warm-up followed by up to nine chained sessions.

    The machine only advances on foreground ticks. Each tick is converted into
    whole elapsed seconds that are replayed one at a time, so a late or bursty
    tick still fires every midpoint bell it passed. Going to the background
    freezes the timer and the time spent away is never added back.
    """
    def __init__(self, store, cues, clock=None, loop=None, test_mode: Optional[bool] = None,
                 history_limit: int = settings.HISTORY_LIMIT):
        super().__init__(store, cues, clock=clock, loop=loop)
        test_mode = settings.TEST_MODE if test_mode is None else test_mode
        self._seconds_per_minute = 1 if test_mode else 60
        self._history_limit = history_limit

        self._plan: Optional[MeditationPlan] = None
        self._phase = MeditationPhase.IDLE
        self._session_index = 0
        self._elapsed = 0
        self._session_started_at: Optional[datetime] = None
        self._anchor: Optional[datetime] = None  # timestamp of the last counted second
        self._suspended = False
        self._fired_midpoints = set()

        self._history: List[CompletedMeditationSession] = self._load(
            keys.MEDITATION_SESSIONS, lambda raw: decode_list(CompletedMeditationSession, raw), []
        )
        self._streaks: StreakState = self._load(keys.MEDITATION_STREAKS, StreakState.from_dict, StreakState())

        self.on_session_complete = Event("session_complete", loop)
        self.on_cancel = Event("cancel", loop)

    # --- Read-only state ---
    @property
    def is_running(self) -> bool:
        return self._phase in (MeditationPhase.WARMUP, MeditationPhase.RUNNING)

    @property
    def phase(self) -> MeditationPhase:
        return self._phase

    @property
    def plan(self) -> Optional[MeditationPlan]:
        return self._plan

    @property
    def history(self) -> List[CompletedMeditationSession]:
        """Completed sessions, oldest first."""
        return list(self._history)

    @property
    def streaks(self) -> StreakState:
        return self._streaks

    def saved_plan(self) -> Optional[MeditationPlan]:
        """The last plan that was started, as persisted."""
        return self._load(keys.MEDITATION_PLAN, MeditationPlan.from_dict)

    # --- Intents ---
    def start(self, plan: Optional[MeditationPlan] = None, now: Optional[datetime] = None):
        return self.start_plan(plan, now=now)

    def start_plan(self, plan: Optional[MeditationPlan] = None, now: Optional[datetime] = None) -> MeditationSnapshot:
        """
        Starts a plan, replacing whatever was running.

        Args:
            plan: The plan to run. None runs a single 10-minute session.
            now: Start timestamp; defaults to the injected clock.
        """
        if self.is_running:
            logger.info("Replacing the running meditation plan.")
        self._plan = plan or MeditationPlan()
        self._save(keys.MEDITATION_PLAN, self._plan.to_dict())

        now = self._now(now)
        self._elapsed = 0
        self._anchor = now
        self._suspended = False
        self._fired_midpoints.clear()

        if self._plan.warmup_seconds:
            self._phase = MeditationPhase.WARMUP
            self._session_index = 0
            self._session_started_at = None
            logger.info(f"Meditation warm-up started for {self._plan.warmup_seconds}s.")
        else:
            self._begin_session(0, now, with_cue=True)

        snapshot = self.get_status()
        self.on_start.emit(snapshot)
        return snapshot

    def cancel(self) -> MeditationSnapshot:
        """Abandons the plan. Sessions already completed stay in history."""
        was_running = self.is_running
        self._phase = MeditationPhase.IDLE
        self._session_index = 0
        self._elapsed = 0
        self._session_started_at = None
        self._anchor = None
        self._suspended = False
        self._fired_midpoints.clear()
        snapshot = self.get_status()
        if was_running:
            logger.info("Meditation cancelled.")
            self.on_cancel.emit(snapshot)
        return snapshot

    def tick(self, now: Optional[datetime] = None, is_foreground: bool = True) -> MeditationSnapshot:
        """Advance by the whole seconds elapsed since the last counted tick."""
        if not self.is_running:
            return self.get_status()

        now = self._now(now)
        if not is_foreground:
            if not self._suspended:
                logger.info("Meditation paused: app left the foreground.")
            self._suspended = True
            self._anchor = None
            return self.get_status()

        if self._suspended or self._anchor is None:
            # Resume from here; the time spent away is dropped.
            self._suspended = False
            self._anchor = now
            logger.info("Meditation resumed.")
            return self.get_status()

        steps = int((now - self._anchor).total_seconds())
        if steps < 0:
            self._anchor = now
            steps = 0
        if steps == 0:
            return self.get_status()

        base = self._anchor
        self._anchor = base + timedelta(seconds=steps)
        for i in range(1, steps + 1):
            self._step(base + timedelta(seconds=i))
            if not self.is_running:
                break

        snapshot = self.get_status()
        self.on_tick.emit(snapshot)
        return snapshot

    def delete_session(self, session_id: str) -> bool:
        remaining = [s for s in self._history if s.id != session_id]
        if len(remaining) == len(self._history):
            return False
        self._history = remaining
        self._save(keys.MEDITATION_SESSIONS, encode_list(self._history))
        self._streaks = statistics.streak_state(self._history)
        self._save(keys.MEDITATION_STREAKS, self._streaks.to_dict())
        return True

    # --- Status ---
    def get_status(self) -> MeditationSnapshot:
        if self._plan is None or self._phase is MeditationPhase.IDLE:
            return MeditationSnapshot(
                phase=self._phase, session_index=0,
                total_sessions=len(self._plan.session_minutes) if self._plan else 0,
                elapsed_seconds=0, phase_duration_seconds=0, remaining_seconds=0,
                total_remaining_seconds=0, progress=0.0, foreground_suspended=False,
            )

        durations = self._session_durations()
        warmup = self._plan.warmup_seconds or 0
        total = warmup + sum(durations)

        if self._phase is MeditationPhase.WARMUP:
            phase_duration = warmup
            remaining = max(0, warmup - self._elapsed)
            total_remaining = remaining + sum(durations)
        elif self._phase is MeditationPhase.RUNNING:
            phase_duration = durations[self._session_index]
            remaining = max(0, phase_duration - self._elapsed)
            total_remaining = remaining + sum(durations[self._session_index + 1:])
        else:
            phase_duration = durations[-1]
            remaining = 0
            total_remaining = 0

        return MeditationSnapshot(
            phase=self._phase,
            session_index=self._session_index,
            total_sessions=len(durations),
            elapsed_seconds=self._elapsed,
            phase_duration_seconds=phase_duration,
            remaining_seconds=remaining,
            total_remaining_seconds=total_remaining,
            progress=min(1.0, (total - total_remaining) / total) if total > 0 else 0.0,
            foreground_suspended=self._suspended,
        )

    def stats(self, now: Optional[datetime] = None) -> MeditationStats:
        now = self._now(now)
        return MeditationStats(
            session_count=len(self._history),
            total_minutes=statistics.total_duration(self._history) / 60.0,
            longest=statistics.longest(self._history),
            seven_day_average=statistics.average(self._history, since=now - timedelta(days=7)),
            current_streak=self._streaks.current_streak,
            best_streak=self._streaks.best_streak,
        )

    # --- Internals ---
    def _session_durations(self) -> List[int]:
        return [m * self._seconds_per_minute for m in self._plan.session_minutes]

    def _midpoint_seconds(self) -> Optional[int]:
        interval = self._plan.midpoint_interval_minutes
        return interval * self._seconds_per_minute if interval else None

    def _begin_session(self, index: int, moment: datetime, with_cue: bool) -> None:
        self._phase = MeditationPhase.RUNNING
        self._session_index = index
        self._elapsed = 0
        self._session_started_at = moment
        self._fired_midpoints.clear()
        if with_cue:
            self._cue("impact", ImpactStrength.LIGHT)
            self._cue("play_sound", CueSound.SESSION_START)
        logger.info(
            f"Meditation session {index + 1}/{len(self._plan.session_minutes)} started "
            f"for {countdown(self._session_durations()[index])}."
        )

    def _step(self, moment: datetime) -> None:
        """Advance exactly one simulated second ending at ``moment``."""
        self._elapsed += 1

        if self._phase is MeditationPhase.WARMUP:
            if self._elapsed >= (self._plan.warmup_seconds or 0):
                self._begin_session(0, moment, with_cue=True)
            return

        duration = self._session_durations()[self._session_index]
        interval = self._midpoint_seconds()
        if interval and self._elapsed % interval == 0 and self._elapsed not in self._fired_midpoints:
            self._fired_midpoints.add(self._elapsed)
            self._cue("impact", ImpactStrength.SOFT)
            self._cue("play_sound", CueSound.SESSION_MID)

        if self._elapsed >= duration:
            self._finish_session(moment, duration)

    def _finish_session(self, moment: datetime, planned: int) -> None:
        started = self._session_started_at or moment
        actual = max(0.0, (moment - started).total_seconds())
        record = CompletedMeditationSession(started_at=started, ended_at=moment, duration=float(min(planned, actual)))
        self._persist(record)
        self._streaks = statistics.update_streak(self._streaks, moment)
        self._save(keys.MEDITATION_STREAKS, self._streaks.to_dict())
        logger.info(f"Meditation session {self._session_index + 1} finished ({countdown(record.duration)}).")

        if self._plan.vibrate_after_session:
            self._cue("pulse", 2.0, 0.25, ImpactStrength.MEDIUM)
        if self._plan.ding_after_session:
            self._cue("play_sound", CueSound.SESSION_MID)
        self.on_session_complete.emit(record)

        next_index = self._session_index + 1
        if next_index < len(self._plan.session_minutes):
            self._begin_session(next_index, moment, with_cue=False)
            return

        self._phase = MeditationPhase.COMPLETED
        self._anchor = None
        self._cue("notify", NotifyKind.SUCCESS)
        self._cue("play_sound", CueSound.SESSION_END)
        logger.info("Meditation plan completed.")
        self.on_stop.emit(self.get_status())

    def _persist(self, record: CompletedMeditationSession) -> None:
        self._history.append(record)
        if len(self._history) > self._history_limit:
            del self._history[: len(self._history) - self._history_limit]
        self._save(keys.MEDITATION_SESSIONS, encode_list(self._history))
