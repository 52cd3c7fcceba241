"""
feedshield/storage/blob_store.py
Generic key-value blob storage used by synchronize().
To add a new backend: subclass BlobStore and implement get/put/delete.

Values are opaque strings (JSON in practice). Keys carry their own
version suffix so layouts can change without migrations.
"""

import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

STATS_KEY          = 'feedshield:stats:v1'
LEARNING_KEY       = 'feedshield:learning:v1'
BLOCKED_EVENTS_KEY = 'feedshield:blocked_events:v1'
CONFIG_KEY         = 'feedshield:config:v1'


class BlobStore(ABC):
    """
    All storage backends implement this interface.
    Failures raise — callers decide whether they are fatal.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class MemoryBlobStore(BlobStore):
    """Dict-backed store. Process lifetime only."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SqliteBlobStore(BlobStore):
    """
    One table, one row per key. A fresh connection per call so the
    store can be used from asyncio.to_thread workers.
    """

    def __init__(self, db_path: Path = Path('feedshield.db')):
        self.db_path = Path(db_path)
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS blobs (
                    key         TEXT PRIMARY KEY,
                    value       TEXT NOT NULL,
                    updated_at  TEXT NOT NULL
                )
            """)
        conn.close()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def get(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row[0] if row else None

    def put(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                "updated_at = excluded.updated_at",
                (key, value, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Blob write failed for {key}: {e}")
            raise
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM blobs WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def keys(self) -> List[str]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT key FROM blobs ORDER BY key").fetchall()
        finally:
            conn.close()
        return [r[0] for r in rows]
