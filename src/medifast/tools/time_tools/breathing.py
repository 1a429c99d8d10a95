from dataclasses import dataclass, replace
from typing import List, Optional

from medifast.core import keys
from medifast.core.models import BreathingRoundResult, BreathingSettings, decode_list, encode_list
from medifast.core.status import BreathingPhase, BreathSubPhase, CueSound, ImpactStrength, NotifyKind
from medifast.tools.time_tools.base_tool import SessionTool
from medifast.utils import Event
from medifast.utils.logging_handler import setup_logger
from medifast.utils.time_conversions import ms

logger = setup_logger(__name__)


@dataclass(frozen=True)
class BreathingSnapshot:
    phase: BreathingPhase
    current_round: int
    total_rounds: int
    breath_count: int
    breaths_per_round: int
    retention_seconds: int
    recovery_remaining: int
    breath_phase: BreathSubPhase
    breath_progress: float
    results: tuple

    @property
    def display_value(self) -> str:
        if self.phase is BreathingPhase.RETENTION:
            return ms(self.retention_seconds)
        if self.phase is BreathingPhase.RECOVERY:
            return ms(self.recovery_remaining)
        if self.phase is BreathingPhase.COMPLETED:
            return "Done"
        return str(self.breath_count)

    @property
    def best_retention(self) -> Optional[int]:
        return max((r.retention_seconds for r in self.results), default=None)


class BreathingSession(SessionTool):
    """
    Guided breathing (Wim Hof style): paced breaths, a retention hold, a recovery
    countdown, repeated for the configured number of rounds.

    A single tap counts a breath; a double tap moves to the next phase. Ticks
    only matter in the foreground and there is no background pause state.
    """
    def __init__(self, store, cues, clock=None, loop=None):
        super().__init__(store, cues, clock=clock, loop=loop)
        self._settings = self.saved_settings() or BreathingSettings()
        self._phase = BreathingPhase.IDLE
        self._current_round = 1
        self._breath_count = 0
        self._retention_elapsed = 0
        self._recovery_remaining = 0
        self._breath_tick_counter = 0
        self._results: List[BreathingRoundResult] = []

        self.on_round_complete = Event("round_complete", loop)

    @property
    def is_running(self) -> bool:
        return self._phase not in (BreathingPhase.IDLE, BreathingPhase.COMPLETED)

    @property
    def phase(self) -> BreathingPhase:
        return self._phase

    @property
    def settings(self) -> BreathingSettings:
        return replace(self._settings)

    @property
    def results(self) -> List[BreathingRoundResult]:
        return list(self._results)

    @property
    def breath_phase(self) -> BreathSubPhase:
        """Inhale for the first half of each pace window (rounded up), exhale for the rest."""
        if self._phase is not BreathingPhase.BREATHING:
            return BreathSubPhase.EXHALE
        pivot = (self._settings.pace_seconds + 1) // 2
        return BreathSubPhase.INHALE if self._breath_tick_counter < pivot else BreathSubPhase.EXHALE

    @property
    def breath_progress(self) -> float:
        return min(1.0, self._breath_tick_counter / self._settings.pace_seconds)

    def saved_settings(self) -> Optional[BreathingSettings]:
        return self._load(keys.BREATHING_SETTINGS, BreathingSettings.from_dict)

    def latest_history(self) -> List[BreathingRoundResult]:
        """Round results of the last completed session, as persisted."""
        return self._load(keys.BREATHING_HISTORY, lambda raw: decode_list(BreathingRoundResult, raw), [])

    # --- Intents ---
    def start(self, settings: Optional[BreathingSettings] = None):
        return self.start_settings(settings)

    def start_settings(self, settings: Optional[BreathingSettings] = None) -> BreathingSnapshot:
        """Starts a new session. The settings are copied, so later edits do not leak in."""
        self._settings = replace(settings) if settings is not None else replace(self._settings)
        self._save(keys.BREATHING_SETTINGS, self._settings.to_dict())

        self._phase = BreathingPhase.BREATHING
        self._current_round = 1
        self._reset_round_counters()
        self._results = []
        logger.info(
            f"Breathing started: {self._settings.rounds} rounds of "
            f"{self._settings.breaths_per_round} breaths at {self._settings.pace_seconds}s pace."
        )
        snapshot = self.get_status()
        self.on_start.emit(snapshot)
        return snapshot

    def single_tap(self) -> BreathingSnapshot:
        if self._phase is BreathingPhase.BREATHING:
            self._add_breath()
        return self.get_status()

    def double_tap(self) -> BreathingSnapshot:
        if self._phase is BreathingPhase.BREATHING:
            self._start_retention()
        elif self._phase is BreathingPhase.RETENTION:
            self._start_recovery()
        elif self._phase is BreathingPhase.RECOVERY:
            self._advance_after_recovery()
        return self.get_status()

    def finish_early(self) -> BreathingSnapshot:
        """Ends the session now, keeping the rounds recorded so far."""
        if self.is_running:
            logger.info(f"Breathing finished early after {len(self._results)} round(s).")
            self._complete()
        return self.get_status()

    def tick(self, is_foreground: bool = True) -> BreathingSnapshot:
        if not is_foreground or not self.is_running:
            return self.get_status()

        if self._phase is BreathingPhase.BREATHING:
            self._breath_tick_counter += 1
            if self._breath_tick_counter >= self._settings.pace_seconds:
                self._breath_tick_counter = 0
                self._add_breath()
        elif self._phase is BreathingPhase.RETENTION:
            self._retention_elapsed += 1
        elif self._phase is BreathingPhase.RECOVERY:
            if self._recovery_remaining > 0:
                self._recovery_remaining -= 1
            if self._recovery_remaining <= 0:
                self._advance_after_recovery()

        snapshot = self.get_status()
        self.on_tick.emit(snapshot)
        return snapshot

    def get_status(self) -> BreathingSnapshot:
        return BreathingSnapshot(
            phase=self._phase,
            current_round=self._current_round,
            total_rounds=self._settings.rounds,
            breath_count=self._breath_count,
            breaths_per_round=self._settings.breaths_per_round,
            retention_seconds=self._retention_elapsed,
            recovery_remaining=self._recovery_remaining,
            breath_phase=self.breath_phase,
            breath_progress=self.breath_progress,
            results=tuple(self._results),
        )

    # --- Phase transitions ---
    def _reset_round_counters(self) -> None:
        self._breath_count = 0
        self._retention_elapsed = 0
        self._recovery_remaining = 0
        self._breath_tick_counter = 0

    def _add_breath(self) -> None:
        # Taps and auto-pace both stop at the round target so history stays accurate.
        if self._breath_count >= self._settings.breaths_per_round:
            return
        self._breath_count += 1
        if self._breath_count == self._settings.breaths_per_round:
            self._cue("impact", ImpactStrength.SOFT)

    def _start_retention(self) -> None:
        self._phase = BreathingPhase.RETENTION
        self._retention_elapsed = 0
        self._breath_tick_counter = 0
        self._cue("impact", ImpactStrength.MEDIUM)
        logger.info(f"Round {self._current_round}: retention after {self._breath_count} breaths.")

    def _start_recovery(self) -> None:
        result = BreathingRoundResult(
            round_number=self._current_round,
            breaths_completed=self._breath_count,
            retention_seconds=self._retention_elapsed,
        )
        self._results.append(result)
        self._phase = BreathingPhase.RECOVERY
        self._recovery_remaining = self._settings.recovery_hold_seconds
        self._breath_tick_counter = 0
        if self._settings.vibrate_after_round:
            self._cue("pulse", 1.0, 0.25, ImpactStrength.MEDIUM)
        if self._settings.ding_after_round:
            self._cue("play_sound", CueSound.SESSION_MID)
        logger.info(f"Round {self._current_round}: held {ms(result.retention_seconds)}.")
        self.on_round_complete.emit(result)

    def _advance_after_recovery(self) -> None:
        if self._current_round < self._settings.rounds:
            self._current_round += 1
            self._reset_round_counters()
            self._phase = BreathingPhase.BREATHING
            self._cue("notify", NotifyKind.SUCCESS)
            return
        self._complete()

    def _complete(self) -> None:
        self._phase = BreathingPhase.COMPLETED
        self._recovery_remaining = 0
        self._breath_tick_counter = 0
        # The stored history is always just the latest session.
        self._save(keys.BREATHING_HISTORY, encode_list(self._results))
        self._cue("notify", NotifyKind.SUCCESS)
        self._cue("play_sound", CueSound.SESSION_END)
        logger.info(f"Breathing completed with {len(self._results)} round(s).")
        self.on_stop.emit(self.get_status())
