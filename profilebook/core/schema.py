"""
Shared record types for the profile core.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class Row:
    """Flattened projection of one leaf field."""

    label: str
    value: Any
    # Exact structural address (str keys, int indices); not part of equality
    path: Tuple[Union[str, int], ...] = field(default=(), compare=False)


class NodeKind(Enum):
    ABSENT = "absent"
    SCALAR = "scalar"
    BINARY_ASSET = "binary_asset"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class AddResult(Enum):
    """Outcome of a Connection Ledger addition."""
    ADDED = "added"
    ALREADY_EXISTS = "already_exists"


class _Absent:
    """Marker returned when a storage slot holds nothing."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "ABSENT"


ABSENT = _Absent()
