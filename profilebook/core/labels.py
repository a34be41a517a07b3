"""
Label codec - converts field paths to display labels and labels to key paths.
"""

import re
from typing import Iterable, List

# Uppercase letter that is not at the start of a segment and not already spaced
_INTERNAL_UPPER = re.compile(r"(?<=[^\s])([A-Z])")

DOB_TOKEN = "Dob"
DOB_LABEL = "Date of Birth"


def _space_segment(segment: str) -> str:
    return _INTERNAL_UPPER.sub(r" \1", segment)


def to_label(path_segments: Iterable) -> str:
    """Render a field path as a human-readable label.

    ``["firstName"]`` becomes ``"First Name"``, ``["dob"]`` becomes
    ``"Date of Birth"``. The ``Dob`` replacement runs over the whole joined
    string, so it also fires inside longer words (``"dobby"`` -> ``"Date of Birthby"``).
    """
    joined = " ".join(_space_segment(str(segment)) for segment in path_segments)
    if joined:
        joined = joined[0].upper() + joined[1:]
    return joined.replace(DOB_TOKEN, DOB_LABEL)


def to_key_path(label: str) -> List[str]:
    """Split a label into lower-cased key tokens used to address a leaf for editing."""
    return [token.lower() for token in label.split() if token]
