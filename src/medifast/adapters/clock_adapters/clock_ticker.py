import queue
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from medifast.config import settings
from medifast.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class ClockTicker:
    """
    Drives a machine with ``callback(now, is_foreground)`` about once per interval.

    Other threads never touch the machine directly: they ``post`` commands, which
    the ticker runs on its own thread just before the next tick.
    """
    def __init__(
        self,
        callback: Callable[[datetime, bool], object],
        interval: float = settings.TICK_INTERVAL_SECONDS,
        foreground: Optional[Callable[[], bool]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.callback = callback
        self.interval = interval
        self.foreground = foreground or (lambda: True)
        self.clock = clock or datetime.now
        self.sleep = sleep or time.sleep
        self.ticks = 0

        self._commands = queue.Queue()
        self._is_running = False
        self._thread = None

    @property
    def is_running(self):
        return self._is_running

    def post(self, command: Callable[[], object]) -> None:
        self._commands.put(command)

    def start(self):
        """Runs the loop on a daemon thread."""
        if self._is_running:
            return
        self._is_running = True
        self._thread = threading.Thread(target=self._run)
        self._thread.daemon = True
        self._thread.start()
        logger.info("Ticker started.")

    def run(self, until: Optional[Callable[[], bool]] = None, max_ticks: Optional[int] = None):
        """Runs the loop on the calling thread until stopped or ``until()`` is true."""
        self._is_running = True
        self._run(until, max_ticks)

    def stop(self):
        if not self._is_running:
            return
        self._is_running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval + 0.1)
        self._thread = None
        logger.info("Ticker stopped.")

    def tick_once(self) -> None:
        self._drain()
        if not self._is_running:
            return
        try:
            self.callback(self.clock(), bool(self.foreground()))
        except Exception:
            logger.exception("Tick callback failed")
        self.ticks += 1

    def _drain(self):
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                return
            try:
                command()
            except Exception:
                logger.exception("Posted command failed")

    def _run(self, until=None, max_ticks=None):
        try:
            while self._is_running:
                self.tick_once()
                if until is not None and until():
                    break
                if max_ticks is not None and self.ticks >= max_ticks:
                    break
                if not self._is_running:
                    break
                self.sleep(self.interval)
        finally:
            self._is_running = False
