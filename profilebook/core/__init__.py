"""
Profile core - flatten/reconstruct profile records and persist them locally.
"""

# Package initialization for core module
from .assets import BinaryAsset, PreviewHandle, PreviewRegistry, decode, encode, encode_batch
from .connections import ConnectionLedger, same_identity
from .errors import ProfileBookError, ProfileNotFound, QuotaExceeded, ReadError, SaveInProgress
from .flatten import flatten, kind_of, visible_rows
from .labels import to_key_path, to_label
from .profile_store import ProfileStore
from .reconstruct import apply_edit, apply_edit_at
from .schema import ABSENT, AddResult, NodeKind, Row
from .signals import CONNECTIONS_UPDATED, SignalBus
from .storage import InMemoryKeyValueStore, KeyValueStore, SqliteKeyValueStore
from .workflow import DraftConfirmation, ProfileEditor, is_previewable, preview_rows

__all__ = [
    'ABSENT',
    'AddResult',
    'BinaryAsset',
    'CONNECTIONS_UPDATED',
    'ConnectionLedger',
    'DraftConfirmation',
    'InMemoryKeyValueStore',
    'KeyValueStore',
    'NodeKind',
    'PreviewHandle',
    'PreviewRegistry',
    'ProfileBookError',
    'ProfileEditor',
    'ProfileNotFound',
    'ProfileStore',
    'QuotaExceeded',
    'ReadError',
    'Row',
    'SaveInProgress',
    'SignalBus',
    'SqliteKeyValueStore',
    'apply_edit',
    'apply_edit_at',
    'decode',
    'encode',
    'encode_batch',
    'flatten',
    'is_previewable',
    'kind_of',
    'preview_rows',
    'same_identity',
    'to_key_path',
    'to_label',
    'visible_rows',
]
