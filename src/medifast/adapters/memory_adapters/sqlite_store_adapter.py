import json
import os
import sqlite3
from datetime import datetime
from typing import Any, Optional

from medifast.core.ports.store_port import StorePort
from medifast.utils import custom_exception as ce
from medifast.utils.logging_handler import setup_logger


class SqliteStoreAdapter(StorePort):
    """Durable key/value store: one row per key, values kept as JSON text."""

    def __init__(self, db_path: str):
        self.logger = setup_logger(__name__)
        db_path = str(db_path)
        if db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.conn = sqlite3.connect(db_path)
        self.cur = self.conn.cursor()
        self._initialize_tables()

    def _initialize_tables(self):
        """Private method to ensure schema exists."""
        self.cur.execute("""
        CREATE TABLE IF NOT EXISTS KeyValues(
            Key TEXT PRIMARY KEY,
            Value TEXT NOT NULL,
            UpdatedOn TEXT
        );""")
        self.conn.commit()

    def close(self):
        self.conn.close()

    def __del__(self):
        try:
            self.conn.close()
        except sqlite3.Error:
            pass

    def load(self, key: str) -> Optional[Any]:
        try:
            self.cur.execute("SELECT Value FROM KeyValues WHERE Key = ?", (key,))
            row = self.cur.fetchone()
        except sqlite3.Error as e:
            self.logger.exception(f"Database error in load: {e}")
            raise ce.DecodeError(f"Could not read '{key}': {e}") from e
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise ce.DecodeError(f"Stored value for '{key}' is not valid JSON: {e}") from e

    def save(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise ce.EncodeError(f"Value for '{key}' is not JSON serialisable: {e}") from e
        try:
            self.cur.execute("""
                INSERT INTO KeyValues (Key, Value, UpdatedOn) VALUES (?, ?, ?)
                ON CONFLICT(Key) DO UPDATE SET Value = excluded.Value, UpdatedOn = excluded.UpdatedOn
            """, (key, payload, datetime.now().isoformat()))
            self.conn.commit()
        except sqlite3.Error as e:
            self.logger.exception(f"Database error in save: {e}")
            raise ce.EncodeError(f"Could not write '{key}': {e}") from e

    def remove(self, key: str) -> None:
        try:
            self.cur.execute("DELETE FROM KeyValues WHERE Key = ?", (key,))
            self.conn.commit()
        except sqlite3.Error as e:
            self.logger.exception(f"Database error in remove: {e}")
            raise ce.StorageError(f"Could not remove '{key}': {e}") from e
