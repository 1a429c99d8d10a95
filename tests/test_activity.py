"""Cross-feature activity summary."""
from datetime import timedelta

from medifast.core import keys
from medifast.core.models import BreathingSettings, MeditationPlan
from medifast.tools import BreathingSession, FastingTracker, MeditationSession
from medifast.tools.history_tools.activity import ActivityStats, get_activity_stats

from conftest import T0


def test_empty_store_gives_zeroes(store):
    assert get_activity_stats(store) == ActivityStats()


def test_summary_reads_every_feature(store, cues):
    meditation = MeditationSession(store, cues, test_mode=False)
    meditation.start_plan(MeditationPlan(session_minutes=[1, 2]), now=T0)
    meditation.tick(T0 + timedelta(minutes=3))

    breathing = BreathingSession(store, cues)
    breathing.start_settings(BreathingSettings(rounds=1, recovery_hold_seconds=0))
    breathing.double_tap()
    for _ in range(42):
        breathing.tick()
    breathing.double_tap()
    breathing.tick()

    fasting = FastingTracker(store, cues)
    fasting.start(now=T0)
    fasting.stop(now=T0 + timedelta(hours=18))

    stats = get_activity_stats(store)
    assert stats.meditation_streak == 1
    assert stats.meditation_total_sessions == 2
    assert stats.meditation_total_minutes == 3
    assert stats.breathing_latest_rounds == 1
    assert stats.breathing_latest_best_retention == 42
    assert stats.fasting_total_fasts == 1
    assert stats.fasting_streak == 1
    assert stats.fasting_longest_hours == 18


def test_unreadable_keys_are_skipped(store):
    store.save_raw(keys.FASTING_HISTORY, "[{")
    store.save(keys.MEDITATION_SESSIONS, "not a list")
    assert get_activity_stats(store) == ActivityStats()
