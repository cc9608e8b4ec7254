"""Literal, case-insensitive highlighting of typed text inside suggestion labels."""

import re
from typing import List

from typeahead.domain.value_objects import Segment


def highlight(label: str, needle: str) -> List[Segment]:
    """
    Split ``label`` into segments, marking every case-insensitive occurrence
    of ``needle``.

    The needle is matched literally: regex metacharacters such as ``(`` or
    ``*`` are escaped before compiling, so adversarial input cannot alter the
    pattern. Surrounding whitespace of the needle is ignored.

    Args:
        label: Text shown in the dropdown
        needle: Text typed by the user

    Returns:
        Segments covering the whole label in order. A blank needle, or one
        that does not occur, yields a single unmatched segment.
    """
    needle = needle.strip() if needle else ""
    if not label or not needle:
        return [Segment(text=label or "", matched=False)]

    pattern = re.compile(re.escape(needle), re.IGNORECASE)

    segments: List[Segment] = []
    position = 0
    for match in pattern.finditer(label):
        start, end = match.span()
        if start > position:
            segments.append(Segment(text=label[position:start], matched=False))
        segments.append(Segment(text=match.group(0), matched=True))
        position = end

    if not segments:
        return [Segment(text=label, matched=False)]

    if position < len(label):
        segments.append(Segment(text=label[position:], matched=False))

    return segments
