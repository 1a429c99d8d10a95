from abc import ABC, abstractmethod
from typing import Any, Optional


class StorePort(ABC):
    """Port for durable key-keyed JSON persistence. Each feature owns its own keys."""

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the JSON value stored under key, or None when absent.

        Raises DecodeError when the stored bytes are not valid JSON.
        """
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Overwrite the value under key. Raises EncodeError on failure."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Removing a missing key is not an error."""
        pass
