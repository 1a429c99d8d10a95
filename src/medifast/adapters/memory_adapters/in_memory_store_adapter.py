import json
from typing import Any, Dict, Optional

from medifast.core.ports.store_port import StorePort
from medifast.utils import custom_exception as ce


class InMemoryStoreAdapter(StorePort):
    """
    Process-local store. Values are kept as JSON text, so callers get the same
    copies and the same encode/decode failures a durable store would give them.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def keys(self):
        return list(self._data)

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ce.DecodeError(f"Stored value for '{key}' is not valid JSON: {e}") from e

    def save(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise ce.EncodeError(f"Value for '{key}' is not JSON serialisable: {e}") from e

    def save_raw(self, key: str, raw: str) -> None:
        """Stores text as-is; lets callers reproduce corrupted data."""
        self._data[key] = raw

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
