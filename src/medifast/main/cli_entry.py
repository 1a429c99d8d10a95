import argparse
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from medifast.adapters.audio_adapters import LoggingCueAdapter
from medifast.adapters.clock_adapters import ClockTicker
from medifast.adapters.memory_adapters import SqliteStoreAdapter
from medifast.config import settings
from medifast.core.models import BreathingSettings, MeditationPlan
from medifast.core.ports import CuePort, StorePort
from medifast.core.status import BreathingPhase, MeditationPhase, UnitSystem
from medifast.tools import BreathingSession, FastingTracker, MeditationSession, ProfileService
from medifast.tools.history_tools import statistics
from medifast.tools.history_tools.activity import get_activity_stats
from medifast.utils.logging_handler import setup_logger
from medifast.utils.time_conversions import countdown, hms, ms, parse_time_string

logger = setup_logger(__name__)


@dataclass
class Runtime:
    store: StorePort
    cues: CuePort


def build_runtime(db_path=None, audio: Optional[bool] = None) -> Runtime:
    store = SqliteStoreAdapter(db_path or settings.DB_PATH)
    audio = settings.AUDIO_ENABLED if audio is None else audio
    cues = LoggingCueAdapter()
    if audio:
        try:
            from medifast.adapters.audio_adapters.sd_adapter import SoundDeviceCueAdapter
            cues = SoundDeviceCueAdapter()
        except OSError as e:
            # PortAudio is missing on this machine.
            logger.warning(f"Audio output unavailable, cues will only be logged: {e}")
    return Runtime(store=store, cues=cues)


class Foreground:
    """Stands in for the app's foreground state; ``f`` flips it."""

    def __init__(self):
        self.value = True

    def __call__(self) -> bool:
        return self.value

    def toggle(self) -> bool:
        self.value = not self.value
        return self.value


def _status_line(text: str) -> None:
    sys.stdout.write(f"\r{text:<72}")
    sys.stdout.flush()


def _spawn_reader(ticker: ClockTicker, handlers: Dict[str, Callable[[], object]], stream=None):
    """Reads one command per line and posts it to the ticker thread."""
    stream = stream if stream is not None else sys.stdin

    def read():
        for line in stream:
            handler = handlers.get(line.strip().lower())
            if handler is None:
                print(f"\nUnknown command {line.strip()!r}; try: {', '.join(k or 'Enter' for k in handlers)}")
                continue
            ticker.post(handler)

    thread = threading.Thread(target=read)
    thread.daemon = True
    thread.start()
    return thread


# --- meditate ---
def _meditation_line(snapshot) -> str:
    if snapshot.foreground_suspended:
        return "Paused (background). Press f to come back."
    if snapshot.phase is MeditationPhase.WARMUP:
        return f"Warm-up {countdown(snapshot.remaining_seconds)}"
    return (f"Session {snapshot.session_number}/{snapshot.total_sessions} "
            f"{snapshot.remaining_formatted} left  ({snapshot.progress:.0%})")


def run_meditation(args, runtime: Runtime, stream=None) -> int:
    session = MeditationSession(runtime.store, runtime.cues, test_mode=args.test or settings.TEST_MODE)
    plan = MeditationPlan(
        session_minutes=args.sessions,
        warmup_seconds=parse_time_string(args.warmup) if args.warmup else None,
        midpoint_interval_minutes=args.midpoint,
        vibrate_after_session=args.vibrate,
        ding_after_session=args.ding,
    )
    foreground = Foreground()
    ticker = ClockTicker(lambda now, fg: session.tick(now, is_foreground=fg), foreground=foreground)

    session.on_tick.add_listener(lambda snapshot: _status_line(_meditation_line(snapshot)))
    session.on_session_complete.add_listener(
        lambda record: print(f"\nSession done: {countdown(record.duration)}")
    )

    def toggle():
        in_front = foreground.toggle()
        _status_line("Foreground" if in_front else "Background: timer frozen")
        session.tick(is_foreground=in_front)

    print(f"Plan: {' + '.join(str(m) for m in plan.session_minutes)} min. f = background/foreground, q = cancel.")
    session.start_plan(plan)
    _spawn_reader(ticker, {"f": toggle, "q": session.cancel}, stream)
    ticker.run(until=lambda: not session.is_running)

    if session.phase is MeditationPhase.COMPLETED:
        stats = session.stats()
        print(f"\nDone. Streak: {stats.current_streak} day(s), best {stats.best_streak}.")
    else:
        print("\nCancelled.")
    return 0


# --- breathe ---
def _breathing_line(snapshot) -> str:
    head = f"Round {snapshot.current_round}/{snapshot.total_rounds} {snapshot.phase.title}"
    if snapshot.phase is BreathingPhase.BREATHING:
        return f"{head}: {snapshot.breath_count}/{snapshot.breaths_per_round} ({snapshot.breath_phase.value})"
    return f"{head}: {snapshot.display_value}"


def breathing_settings(args, base: BreathingSettings) -> BreathingSettings:
    """Settings for this run: command-line values over the last used ones."""
    return BreathingSettings(
        rounds=args.rounds if args.rounds is not None else base.rounds,
        breaths_per_round=args.breaths if args.breaths is not None else base.breaths_per_round,
        recovery_hold_seconds=args.hold if args.hold is not None else base.recovery_hold_seconds,
        pace_seconds=args.pace if args.pace is not None else base.pace_seconds,
        vibrate_after_round=args.vibrate if args.vibrate is not None else base.vibrate_after_round,
        ding_after_round=args.ding if args.ding is not None else base.ding_after_round,
    )


def run_breathing(args, runtime: Runtime, stream=None) -> int:
    session = BreathingSession(runtime.store, runtime.cues)
    chosen = breathing_settings(args, session.settings)
    ticker = ClockTicker(lambda now, fg: session.tick(is_foreground=fg))
    session.on_tick.add_listener(lambda snapshot: _status_line(_breathing_line(snapshot)))
    session.on_round_complete.add_listener(
        lambda result: print(f"\nRound {result.round_number}: held {ms(result.retention_seconds)}")
    )

    def tap(action):
        def run():
            _status_line(_breathing_line(action()))
        return run

    print("Enter = next phase, t = count a breath, x = finish early.")
    session.start_settings(chosen)
    _spawn_reader(ticker, {"": tap(session.double_tap), "t": tap(session.single_tap),
                           "x": tap(session.finish_early)}, stream)
    ticker.run(until=lambda: not session.is_running)

    best = session.get_status().best_retention
    print(f"\nCompleted {len(session.results)} round(s); best hold {ms(best) if best is not None else '-'}.")
    return 0


# --- fast ---
def run_fasting(args, runtime: Runtime) -> int:
    tracker = FastingTracker(runtime.store, runtime.cues)
    action = args.action

    if action == "start":
        if not tracker.start():
            print("A fast is already running.")
            return 1
        print(f"Fast started at {tracker.active.start_at:%Y-%m-%d %H:%M}.")
    elif action == "stop":
        completed = tracker.stop()
        if completed is None:
            print("No fast is running.")
            return 1
        print(f"Fast ended after {hms(completed.duration)}.")
    elif action == "status":
        status = tracker.get_status()
        if status.is_active:
            print(f"Fasting for {status.elapsed_formatted} (since {status.active.start_at:%Y-%m-%d %H:%M}).")
        else:
            print("Not fasting.")
        average = tracker.seven_day_average()
        print(f"Streak: {tracker.current_streak} day(s), best {tracker.best_streak}.")
        if average is not None:
            print(f"7-day average: {hms(average)}")
    elif action == "adjust":
        if not tracker.update_active_start_time(by_hours=args.hours, by_minutes=args.minutes):
            print("Start time not changed: no active fast, or it would start in the future.")
            return 1
        print(f"Fast now started at {tracker.active.start_at:%Y-%m-%d %H:%M}.")
    elif action == "history":
        threshold = args.min_hours * 3600 if args.min_hours else None
        records = statistics.filter_by_min_duration(tracker.history, threshold)
        if not records:
            print("No fasts recorded.")
        for bucket in statistics.group_by_calendar_week(records):
            print(bucket.label)
            for fast in bucket.records:
                print(f"  {fast.start_at:%a %H:%M}  {hms(fast.duration or 0)}  {fast.id}")
    elif action == "delete":
        if not tracker.delete_fast(args.id):
            print(f"No fast with id {args.id}.")
            return 1
        print("Deleted.")
    elif action == "clear":
        tracker.clear_history()
        print("History cleared.")
    return 0


# --- profile ---
def run_profile(args, runtime: Runtime) -> int:
    service = ProfileService(runtime.store, runtime.cues)
    if args.action == "set":
        form = service.form()
        if args.units:
            form.update_unit_system(UnitSystem(args.units))
        for name in ("given_name", "family_name", "email", "weight", "height"):
            value = getattr(args, name)
            if value is not None:
                setattr(form, name, value)
        ok, message = service.save(form)
        print(message)
        if not ok:
            return 1

    profile = service.profile
    system = profile.unit_system
    weight = profile.weight_in(system)
    height = profile.height_in(system)
    print(f"{profile.full_name or '-'} <{profile.email or '-'}>")
    if weight is not None and height is not None:
        print(f"{weight:.1f} {system.weight_symbol}, {height:.1f} {system.height_symbol}")
    if profile.bmi is not None:
        print(f"BMI {profile.bmi:.1f} ({profile.bmi_category.value})")
    return 0


def run_stats(args, runtime: Runtime) -> int:
    stats = get_activity_stats(runtime.store)
    print(f"Meditation: {stats.meditation_total_sessions} session(s), "
          f"{stats.meditation_total_minutes:.0f} min, streak {stats.meditation_streak}")
    best = stats.breathing_latest_best_retention
    print(f"Breathing:  last session {stats.breathing_latest_rounds} round(s), "
          f"best hold {ms(best) if best is not None else '-'}")
    longest = f"{stats.fasting_longest_hours:.1f} h" if stats.fasting_longest_hours is not None else "-"
    print(f"Fasting:    {stats.fasting_total_fasts} fast(s), longest {longest}, streak {stats.fasting_streak}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="medifast", description="Meditation, breathing and fasting timers.")
    parser.add_argument("--db", default=None, help="SQLite file (default: MEDIFAST_DB_PATH)")
    parser.add_argument("--no-audio", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    meditate = sub.add_parser("meditate", help="run a meditation plan")
    meditate.add_argument("--sessions", type=int, nargs="+", default=[10], metavar="MIN")
    meditate.add_argument("--warmup", type=str, default=None, help="e.g. 10, 30s, 1m")
    meditate.add_argument("--midpoint", type=int, default=None, metavar="MIN")
    meditate.add_argument("--vibrate", action="store_true")
    meditate.add_argument("--ding", action="store_true")
    meditate.add_argument("--test", action="store_true", help="read minutes as seconds")
    meditate.set_defaults(handler=run_meditation)

    breathe = sub.add_parser("breathe", help="guided breathing rounds")
    breathe.add_argument("--rounds", type=int, default=None)
    breathe.add_argument("--breaths", type=int, default=None)
    breathe.add_argument("--hold", type=int, default=None, help="recovery hold in seconds")
    breathe.add_argument("--pace", type=int, default=None, help="seconds per breath")
    breathe.add_argument("--vibrate", action=argparse.BooleanOptionalAction, default=None,
                         help="pulse after each round (default: last used)")
    breathe.add_argument("--ding", action=argparse.BooleanOptionalAction, default=None,
                         help="bell after each round (default: last used)")
    breathe.set_defaults(handler=run_breathing)

    fast = sub.add_parser("fast", help="fasting tracker")
    actions = fast.add_subparsers(dest="action", required=True)
    for name in ("start", "stop", "status", "clear"):
        actions.add_parser(name)
    adjust = actions.add_parser("adjust", help="move the start time (negative = earlier)")
    adjust.add_argument("--hours", type=int, default=0)
    adjust.add_argument("--minutes", type=int, default=0)
    history = actions.add_parser("history")
    history.add_argument("--min-hours", type=float, default=None)
    delete = actions.add_parser("delete")
    delete.add_argument("id")
    fast.set_defaults(handler=run_fasting)

    profile = sub.add_parser("profile", help="show or edit the user profile")
    profile_actions = profile.add_subparsers(dest="action", required=True)
    profile_actions.add_parser("show")
    edit = profile_actions.add_parser("set")
    edit.add_argument("--given-name", dest="given_name")
    edit.add_argument("--family-name", dest="family_name")
    edit.add_argument("--email")
    edit.add_argument("--weight")
    edit.add_argument("--height")
    edit.add_argument("--units", choices=[u.value for u in UnitSystem])
    profile.set_defaults(handler=run_profile)

    stats = sub.add_parser("stats", help="activity summary")
    stats.set_defaults(handler=run_stats)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    runtime = build_runtime(args.db, audio=False if args.no_audio else None)
    logger.info(f"medifast {args.command}")
    try:
        return args.handler(args, runtime)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    finally:
        runtime.store.close()


if __name__ == "__main__":
    logger.info("=" * 50)
    sys.exit(main())
