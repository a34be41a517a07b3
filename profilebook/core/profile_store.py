"""
Profile Store - single-slot persistence for the current profile.
"""

import json
from typing import Any, Dict, Optional

from .config import PROFILE_KEY
from .schema import ABSENT
from .storage import KeyValueStore
from ..util.logging import logger


def identity_of(record: Any) -> Optional[str]:
    """Return the record's email identity, or None when it has none."""
    if isinstance(record, dict):
        email = record.get("email")
        if email:
            return str(email)
    return None


class ProfileStore:
    """The persisted "current profile" slot."""

    def __init__(self, store: KeyValueStore, key: str = PROFILE_KEY):
        self.store = store
        self.key = key

    def save(self, record: Dict[str, Any]) -> None:
        """Persist ``record``, replacing any previous one.

        Raises QuotaExceeded (nothing written) when storage is full.
        """
        serialized = json.dumps(record)
        try:
            self.store.set(self.key, serialized)
        except Exception as e:
            logger.log_profile_operation("save", identity_of(record), status="failed",
                                         details={"error": str(e)[:100]})
            raise

        logger.log_profile_operation("save", identity_of(record), details={"size": len(serialized)})

    def load(self):
        """Return the stored record, or ABSENT when the slot is empty."""
        raw = self.store.get(self.key)
        if raw is None:
            return ABSENT

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Stored profile under '{self.key}' is not valid JSON: {e}")
            return ABSENT

    def exists(self) -> bool:
        return self.store.get(self.key) is not None

    def delete(self) -> None:
        """Remove the stored record. Deleting an empty slot is a no-op."""
        self.store.delete(self.key)
        logger.log_profile_operation("delete")
