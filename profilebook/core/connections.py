"""
Connection Ledger - ordered, append-only collection of saved profile
snapshots, deduplicated by identity.

Identity is the ``email`` field when present and non-empty, otherwise the
whole record compared structurally.
"""

import copy
import json
from typing import Any, Dict, List, Optional

from .config import CONNECTIONS_KEY
from .profile_store import identity_of
from .schema import AddResult
from .signals import CONNECTIONS_UPDATED, SignalBus, bus
from .storage import KeyValueStore
from ..util.logging import logger


def same_identity(candidate: Any, record: Any) -> bool:
    """Check whether ``candidate`` has the same identity as ``record``."""
    email = identity_of(record)
    if email is not None:
        return identity_of(candidate) == email
    return candidate == record


class ConnectionLedger:
    """Saved connections persisted as one JSON array."""

    def __init__(self, store: KeyValueStore, key: str = CONNECTIONS_KEY,
                 signals: Optional[SignalBus] = None):
        self.store = store
        self.key = key
        self.signals = signals if signals is not None else bus

    def _read(self) -> List[Dict[str, Any]]:
        raw = self.store.get(self.key)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Stored ledger under '{self.key}' is not valid JSON: {e}")
            return []
        return entries if isinstance(entries, list) else []

    def _write(self, entries: List[Dict[str, Any]]) -> None:
        self.store.set(self.key, json.dumps(entries))

    def list(self) -> List[Dict[str, Any]]:
        """Return snapshots in insertion order."""
        return self._read()

    def __len__(self):
        return len(self._read())

    def contains(self, record: Dict[str, Any]) -> bool:
        return any(same_identity(entry, record) for entry in self._read())

    def add(self, record: Dict[str, Any]) -> AddResult:
        """Append a snapshot of ``record`` unless its identity is already saved."""
        entries = self._read()

        if any(same_identity(entry, record) for entry in entries):
            logger.log_ledger_operation("add", identity_of(record), len(entries), status="already_exists")
            return AddResult.ALREADY_EXISTS

        entries.append(copy.deepcopy(record))
        # QuotaExceeded propagates; the stored array is left untouched
        self._write(entries)

        logger.log_ledger_operation("add", identity_of(record), len(entries))
        self.signals.emit(CONNECTIONS_UPDATED, size=len(entries))
        return AddResult.ADDED

    def remove_matching(self, record: Dict[str, Any]) -> int:
        """Remove every snapshot sharing ``record``'s identity; returns the count."""
        entries = self._read()
        kept = [entry for entry in entries if not same_identity(entry, record)]
        removed = len(entries) - len(kept)

        if removed:
            self._write(kept)
            logger.log_ledger_operation("remove_matching", identity_of(record), len(kept))
        return removed
