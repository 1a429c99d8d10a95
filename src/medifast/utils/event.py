import asyncio
import inspect
from medifast.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class Event:
    """
    A named observer hook.

    Session machines emit their snapshots through events so a front end can follow
    along without the machine knowing about it. A failing listener is logged and
    skipped; it never reaches the machine that emitted.
    """

    def __init__(self, name: str = "event", loop: asyncio.AbstractEventLoop | None = None):
        self.name = name
        self.loop = loop
        self._listeners = []

    def __len__(self):
        return len(self._listeners)

    def add_listener(self, listener):
        if not callable(listener):
            raise ValueError("Listener must be callable")
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self):
        self._listeners.clear()

    def emit(self, *args, **kwargs):
        for listener in list(self._listeners):
            try:
                result = listener(*args, **kwargs)
                if inspect.iscoroutine(result):
                    self._schedule(result)
            except Exception:
                logger.exception(f"Error in '{self.name}' listener")

    def _schedule(self, coro):
        if not self.loop:
            coro.close()
            raise RuntimeError(f"Async listener on '{self.name}' requires an event loop")
        self.loop.call_soon_threadsafe(asyncio.ensure_future, self._safe_task(coro))

    async def _safe_task(self, coro):
        try:
            await coro
        except Exception:
            logger.exception(f"Unhandled exception in async '{self.name}' listener")
