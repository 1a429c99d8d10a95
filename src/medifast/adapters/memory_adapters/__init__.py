from medifast.adapters.memory_adapters.in_memory_store_adapter import InMemoryStoreAdapter
from medifast.adapters.memory_adapters.sqlite_store_adapter import SqliteStoreAdapter

__all__ = ["InMemoryStoreAdapter", "SqliteStoreAdapter"]
