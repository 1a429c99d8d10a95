from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Optional
import asyncio

from medifast.core.ports.cue_port import CuePort
from medifast.core.ports.store_port import StorePort
from medifast.utils import Event
from medifast.utils.custom_exception import StorageError
from medifast.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class SessionTool(ABC):
    """
    An abstract base class for the session machines (meditation, breathing, fasting).
    It owns the injected store and cue capabilities, the clock, and the observer events,
    and it keeps persistence and cue failures from ever reaching the caller: the
    in-memory state stays the source of truth and the store is written through
    on a best-effort basis.
    """
    def __init__(
        self,
        store: StorePort,
        cues: CuePort,
        clock: Optional[Callable[[], datetime]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """Initializes the tool with its capabilities and event hooks."""
        self._store = store
        self._cues = cues
        self._clock = clock or datetime.now

        self.on_tick = Event("tick", loop)
        self.on_start = Event("start", loop)
        self.on_stop = Event("stop", loop)

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """True while the tool has an unfinished session."""
        pass

    @abstractmethod
    def start(self, *args, **kwargs):
        """
        Abstract method to start a session.
        Must be implemented by subclasses to define specific start behavior.
        """
        pass

    @abstractmethod
    def get_status(self):
        """
        Abstract method returning an immutable snapshot of the current state.
        """
        pass

    def _now(self, now: Optional[datetime] = None) -> datetime:
        return now if now is not None else self._clock()

    # --- Persistence (best effort) ---
    def _load(self, key: str, decode: Callable[[Any], Any], default=None):
        """Read and decode key; missing or unreadable data yields ``default``."""
        try:
            raw = self._store.load(key)
            if raw is None:
                return default
            return decode(raw)
        except StorageError as e:
            logger.warning(f"{self.__class__.__name__}: ignoring unreadable '{key}': {e}")
            return default

    def _save(self, key: str, value: Any) -> bool:
        try:
            self._store.save(key, value)
            return True
        except StorageError:
            logger.exception(f"{self.__class__.__name__}: could not save '{key}'")
            return False

    def _remove(self, key: str) -> None:
        try:
            self._store.remove(key)
        except StorageError:
            logger.exception(f"{self.__class__.__name__}: could not remove '{key}'")

    # --- Cues (fire and forget) ---
    def _cue(self, method: str, *args, **kwargs) -> None:
        try:
            getattr(self._cues, method)(*args, **kwargs)
        except Exception as e:
            logger.debug(f"{self.__class__.__name__}: cue '{method}' failed: {e}")
