"""
Structural flattener - walks a nested profile record and produces ordered
label/value rows for display or editing.
"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Tuple, Union

from .assets import BinaryAsset
from .labels import to_label
from .schema import NodeKind, Row

SCALAR_TYPES = (str, int, float, bool, bytes)

# Display policies applied by views, never by the flattener
PRESENT = "present"
TRUTHY = "truthy"


def kind_of(value: Any) -> NodeKind:
    """Classify a node of a profile record."""
    if value is None:
        return NodeKind.ABSENT
    if isinstance(value, BinaryAsset):
        return NodeKind.BINARY_ASSET
    if isinstance(value, SCALAR_TYPES):
        return NodeKind.SCALAR
    if isinstance(value, Mapping):
        return NodeKind.MAPPING
    if isinstance(value, (list, tuple)):
        return NodeKind.SEQUENCE
    # Unknown leaf types are rendered as-is
    return NodeKind.SCALAR


def flatten(value: Any, prefix: Union[str, Tuple[Union[str, int], ...]] = ()) -> List[Row]:
    """Flatten a record into rows, in the record's own key/index order.

    ``prefix`` is the structural path of ``value`` inside an enclosing record
    (str keys, int indices). A plain string is taken as one already rendered
    label segment and contributes nothing to the rows' structural paths.
    Rows with a ``None`` value are kept; see ``visible_rows`` for display
    policy.
    """
    rows: List[Row] = []
    if isinstance(prefix, str):
        segments, path = ((prefix,) if prefix else ()), ()
    else:
        segments = tuple(str(p + 1) if isinstance(p, int) else to_label([p]) for p in prefix)
        path = tuple(prefix)
    _walk(value, segments, path, rows)
    return rows


def _walk(value: Any, segments: tuple, path: tuple, rows: List[Row]) -> None:
    kind = kind_of(value)

    if kind in (NodeKind.ABSENT, NodeKind.SCALAR):
        rows.append(Row(to_label(segments), value, path))
    elif kind is NodeKind.BINARY_ASSET:
        rows.append(Row(to_label(segments), value.name, path))
    elif kind is NodeKind.SEQUENCE:
        # Lists of raw uploads are shown as thumbnails elsewhere
        if value and isinstance(value[0], BinaryAsset):
            return
        for index, item in enumerate(value):
            _walk(item, segments + (str(index + 1),), path + (index,), rows)
    elif kind is NodeKind.MAPPING:
        for key, item in value.items():
            _walk(item, segments + (to_label([key]),), path + (key,), rows)
    else:
        raise TypeError(f"Unhandled node kind: {kind}")


def visible_rows(rows: Iterable[Row], policy: str = PRESENT) -> List[Row]:
    """Filter rows for display.

    ``present`` drops rows whose value is None (my-profile view); ``truthy``
    drops every falsy value (preview view).
    """
    if policy == PRESENT:
        return [row for row in rows if row.value is not None]
    if policy == TRUTHY:
        return [row for row in rows if row.value]
    raise ValueError(f"Unknown display policy: {policy}")
