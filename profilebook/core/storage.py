"""
Persistent key-value storage injected into the Profile Store and Connection Ledger.
Values are opaque strings; capacity is enforced before anything is written.
"""

import sqlite3
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .db import get_db, init_db
from .errors import QuotaExceeded
from ..util.logging import logger


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class KeyValueStore(ABC):
    """Abstract interface for persistent key-value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value.

        Raises QuotaExceeded without writing when capacity would be exceeded.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is a no-op."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys."""
        pass

    @abstractmethod
    def usage(self) -> int:
        """Bytes currently used by all stored entries."""
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store, used for tests and the memory backend."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            others = sum(_entry_size(k, v) for k, v in self._data.items() if k != key)
            required = others + _entry_size(key, value)
            if required > self.quota_bytes:
                logger.log_storage_operation("set", key, required, status="rejected",
                                             details={"quota": self.quota_bytes})
                raise QuotaExceeded(key, required, self.quota_bytes)

        self._data[key] = value
        logger.log_storage_operation("set", key, len(value))

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            logger.log_storage_operation("delete", key)

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def usage(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._data.items())

    def clear(self) -> None:
        """Clear all entries from the store."""
        self._data.clear()


class SqliteKeyValueStore(KeyValueStore):
    """SQLite-backed store using the kv table."""

    def __init__(self, db_path: Optional[str] = None, quota_bytes: Optional[int] = None):
        self.db_path = db_path
        self.quota_bytes = quota_bytes
        init_db(db_path)

    def get(self, key: str) -> Optional[str]:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT value FROM kv WHERE key = ?", (key,))
                row = cursor.fetchone()
                return row[0] if row else None
        except sqlite3.Error as e:
            logger.error(f"Failed to get key '{key}': {e}")
            raise

    def set(self, key: str, value: str) -> None:
        required = None
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()

                if self.quota_bytes is not None:
                    cursor.execute(
                        "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0) "
                        "FROM kv WHERE key != ?",
                        (key,)
                    )
                    required = cursor.fetchone()[0] + _entry_size(key, value)
                    if required > self.quota_bytes:
                        logger.log_storage_operation("set", key, required, status="rejected",
                                                     details={"quota": self.quota_bytes})
                        raise QuotaExceeded(key, required, self.quota_bytes)

                cursor.execute(
                    "INSERT INTO kv (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
                    (key, value)
                )
                conn.commit()

        except sqlite3.OperationalError as e:
            # Disk-level capacity errors surface the same way as the quota check
            if "full" in str(e).lower():
                logger.log_storage_operation("set", key, status="failed", details={"error": str(e)})
                raise QuotaExceeded(key, required or _entry_size(key, value), self.quota_bytes or 0) from e
            logger.error(f"Database error during set for key '{key}': {e}")
            raise
        except sqlite3.Error as e:
            logger.error(f"Database error during set for key '{key}': {e}")
            raise

        logger.log_storage_operation("set", key, len(value))

    def delete(self, key: str) -> None:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM kv WHERE key = ?", (key,))
                deleted = cursor.rowcount > 0
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to delete key '{key}': {e}")
            raise

        if deleted:
            logger.log_storage_operation("delete", key)

    def keys(self) -> List[str]:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT key FROM kv ORDER BY key")
            return [row[0] for row in cursor.fetchall()]

    def usage(self) -> int:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0) FROM kv"
            )
            return cursor.fetchone()[0]
