"""
Structural reconstructor - writes a single edited value back into a copy of a
nested profile record.
"""

from collections.abc import Mapping
from typing import Any, Sequence, Union

from .labels import to_key_path
from ..util.logging import logger


def _as_mapping(node: Any) -> dict:
    """Copy a container on the edited path into a fresh mapping.

    Sequences degrade to mappings keyed by 1-based index strings, matching the
    labels the flattener gave their elements. Anything else is replaced.
    """
    if isinstance(node, Mapping):
        return dict(node)
    if isinstance(node, (list, tuple)):
        logger.debug(f"Sequence of {len(node)} items degraded to mapping during edit")
        return {str(index + 1): item for index, item in enumerate(node)}
    return {}


def apply_edit(record: Any, label: str, new_value: Any) -> dict:
    """Return a copy of ``record`` with the leaf addressed by ``label`` set.

    The label is split into lower-cased tokens (``"First Name"`` addresses
    ``record["first"]["name"]``). Missing intermediate segments become empty
    mappings. Mappings along the path are copied and siblings are shared, so
    the input record is never mutated.
    """
    keys = to_key_path(label) if isinstance(label, str) else []
    updated = _as_mapping(record)
    if not keys:
        return updated

    current = updated
    for key in keys[:-1]:
        child = current.get(key)
        # Falsy values are overwritten too, like a missing segment
        current[key] = _as_mapping(child) if child else {}
        current = current[key]

    current[keys[-1]] = new_value
    return updated


def _copy_container(node: Any):
    if isinstance(node, Mapping):
        return dict(node)
    if isinstance(node, (list, tuple)):
        return list(node)
    return None


def apply_edit_at(record: Any, path: Sequence[Union[str, int]], new_value: Any) -> dict:
    """Return a copy of ``record`` with the leaf at the exact structural path set.

    ``path`` is a ``Row.path``: mapping keys keep their original casing and
    integer segments index into sequences, so the record keeps its shape.
    Missing segments are created as mappings, or as lists padded with None
    when the segment is an integer.
    """
    updated = _copy_container(record)
    if not isinstance(updated, dict):
        updated = {}
    if not path:
        return updated

    current = updated
    for position, segment in enumerate(path):
        last = position == len(path) - 1
        if isinstance(current, list) and isinstance(segment, int):
            while len(current) <= segment:
                current.append(None)
            if last:
                current[segment] = new_value
                break
            child = _copy_container(current[segment])
        else:
            if isinstance(current, list):
                # Row paths never address a sequence by key
                raise TypeError(f"Cannot address list with key {segment!r}")
            if last:
                current[segment] = new_value
                break
            child = _copy_container(current.get(segment))

        if child is None:
            child = [] if isinstance(path[position + 1], int) else {}
        current[segment] = child
        current = child

    return updated
