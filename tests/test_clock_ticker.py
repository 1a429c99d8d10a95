"""Tick source driving a machine callback."""
from datetime import timedelta

from medifast.adapters.clock_adapters import ClockTicker
from medifast.core.models import MeditationPlan
from medifast.core.status import MeditationPhase
from medifast.tools import MeditationSession

from conftest import FixedClock, T0


def test_run_stops_after_max_ticks():
    seen = []
    clock = FixedClock()
    ticker = ClockTicker(lambda now, fg: seen.append((now, fg)), clock=clock,
                         sleep=lambda s: clock.advance(seconds=s))
    ticker.run(max_ticks=3)
    assert [now for now, _ in seen] == [T0, T0 + timedelta(seconds=1), T0 + timedelta(seconds=2)]
    assert not ticker.is_running


def test_posted_commands_run_before_the_tick():
    order = []
    ticker = ClockTicker(lambda now, fg: order.append("tick"), sleep=lambda s: None)
    ticker.post(lambda: order.append("command"))
    ticker.run(max_ticks=1)
    assert order == ["command", "tick"]


def test_stop_from_a_command_skips_the_tick():
    calls = []
    ticker = ClockTicker(lambda now, fg: calls.append(now), sleep=lambda s: None)
    ticker.post(ticker.stop)
    ticker.run(max_ticks=5)
    assert calls == []


def test_failing_callback_and_command_keep_running():
    ticks = []

    def callback(now, fg):
        ticks.append(now)
        raise RuntimeError("boom")

    def command():
        raise ValueError("bad command")

    ticker = ClockTicker(callback, sleep=lambda s: None)
    ticker.post(command)
    ticker.run(max_ticks=2)
    assert len(ticks) == 2


def test_drives_meditation_to_completion(store, cues):
    clock = FixedClock()
    foreground = iter([True] * 2 + [False] * 3 + [True] * 10)
    session = MeditationSession(store, cues, clock=clock, test_mode=True)
    ticker = ClockTicker(
        lambda now, fg: session.tick(now, is_foreground=fg),
        foreground=lambda: next(foreground),
        clock=clock,
        sleep=lambda s: clock.advance(seconds=s),
    )
    session.start_plan(MeditationPlan(session_minutes=[3]))
    ticker.run(until=lambda: not session.is_running, max_ticks=20)

    assert session.phase is MeditationPhase.COMPLETED
    # Ticks 3-5 run in the background and tick 6 only re-anchors.
    assert ticker.ticks == 8
