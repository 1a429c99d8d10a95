"""Breathing rounds: paced breaths, retention, recovery and completion."""
from dataclasses import FrozenInstanceError

import pytest

from medifast.core import keys
from medifast.core.models import BreathingSettings
from medifast.core.status import BreathingPhase, BreathSubPhase, CueSound, ImpactStrength, NotifyKind
from medifast.tools.time_tools.breathing import BreathingSession


@pytest.fixture
def session(store, cues):
    return BreathingSession(store, cues)


def small_settings(**overrides):
    values = dict(rounds=2, breaths_per_round=3, recovery_hold_seconds=2, pace_seconds=3)
    values.update(overrides)
    return BreathingSettings(**values)


def ticks(session, count, **kwargs):
    snapshot = None
    for _ in range(count):
        snapshot = session.tick(**kwargs)
    return snapshot


def test_defaults():
    settings = BreathingSettings()
    assert (settings.rounds, settings.breaths_per_round) == (5, 30)
    assert (settings.recovery_hold_seconds, settings.pace_seconds) == (15, 3)


def test_legacy_settings_without_pace_decode_with_default():
    legacy = {"rounds": 4, "breaths_per_round": 20, "recovery_hold_seconds": 10}
    assert BreathingSettings.from_dict(legacy).pace_seconds == 3


def test_start_enters_breathing(session):
    snapshot = session.start_settings(small_settings())
    assert snapshot.phase is BreathingPhase.BREATHING
    assert snapshot.current_round == 1
    assert snapshot.display_value == "0"


def test_pace_splits_inhale_and_exhale(session):
    session.start_settings(small_settings())
    assert session.breath_phase is BreathSubPhase.INHALE
    assert ticks(session, 1).breath_phase is BreathSubPhase.INHALE
    assert ticks(session, 1).breath_phase is BreathSubPhase.EXHALE
    snapshot = ticks(session, 1)
    assert snapshot.breath_count == 1
    assert snapshot.breath_phase is BreathSubPhase.INHALE


def test_taps_stop_at_round_target(session, cues):
    session.start_settings(small_settings())
    for _ in range(5):
        session.single_tap()
    assert session.get_status().breath_count == 3
    assert cues.named("impact") == [ImpactStrength.SOFT]


def test_round_flow_records_retention(session, cues):
    rounds = []
    session.on_round_complete.add_listener(rounds.append)
    session.start_settings(small_settings())

    assert session.double_tap().phase is BreathingPhase.RETENTION
    held = ticks(session, 5)
    assert held.retention_seconds == 5
    assert held.display_value == "00:05"

    recovery = session.double_tap()
    assert recovery.phase is BreathingPhase.RECOVERY
    assert recovery.recovery_remaining == 2
    assert rounds[0].retention_seconds == 5

    ticks(session, 2)
    snapshot = session.get_status()
    assert snapshot.phase is BreathingPhase.BREATHING
    assert snapshot.current_round == 2
    assert NotifyKind.SUCCESS in cues.named("notify")


def test_recorded_retention_never_changes(session):
    session.start_settings(small_settings())
    session.double_tap()
    ticks(session, 7)
    session.double_tap()
    result = session.results[0]

    session.double_tap()
    session.double_tap()
    ticks(session, 30)
    assert session.results[0].retention_seconds == 7
    with pytest.raises(FrozenInstanceError):
        result.retention_seconds = 99


def test_double_tap_in_recovery_skips_countdown(session):
    session.start_settings(small_settings())
    session.double_tap()
    session.double_tap()
    assert session.double_tap().current_round == 2


def test_last_round_completes_and_saves_history(session, store, cues):
    stopped = []
    session.on_stop.add_listener(stopped.append)
    session.start_settings(small_settings(rounds=1, recovery_hold_seconds=0))
    session.double_tap()
    ticks(session, 4)
    session.double_tap()
    snapshot = session.tick()

    assert snapshot.phase is BreathingPhase.COMPLETED
    assert snapshot.display_value == "Done"
    assert snapshot.best_retention == 4
    assert store.load(keys.BREATHING_HISTORY)[0]["retention_seconds"] == 4
    assert [r.retention_seconds for r in session.latest_history()] == [4]
    assert cues.named("play_sound")[-1] is CueSound.SESSION_END
    assert stopped[0].phase is BreathingPhase.COMPLETED


def test_finish_early_keeps_recorded_rounds(session):
    session.start_settings(small_settings(rounds=3))
    session.double_tap()
    ticks(session, 3)
    session.double_tap()
    session.double_tap()

    snapshot = session.finish_early()
    assert snapshot.phase is BreathingPhase.COMPLETED
    assert len(snapshot.results) == 1
    assert not session.is_running


def test_background_ticks_are_ignored(session):
    session.start_settings(small_settings())
    session.double_tap()
    assert ticks(session, 5, is_foreground=False).retention_seconds == 0


def test_after_round_cues(session, cues):
    session.start_settings(small_settings(vibrate_after_round=True, ding_after_round=True))
    session.double_tap()
    session.double_tap()
    assert cues.named("pulse") == [(1.0, 0.25, ImpactStrength.MEDIUM)]
    assert cues.named("play_sound") == [CueSound.SESSION_MID]


def test_settings_are_copied_and_persisted(session, store, cues):
    chosen = small_settings(pace_seconds=5)
    session.start_settings(chosen)
    chosen.pace_seconds = 1
    assert session.settings.pace_seconds == 5

    restored = BreathingSession(store, cues)
    assert restored.settings.pace_seconds == 5
    assert restored.saved_settings() == small_settings(pace_seconds=5)


def test_inputs_before_start_do_nothing(session):
    assert session.single_tap().phase is BreathingPhase.IDLE
    assert session.double_tap().phase is BreathingPhase.IDLE
    assert session.finish_early().phase is BreathingPhase.IDLE
