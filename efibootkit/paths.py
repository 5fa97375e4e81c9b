"""Splitting slash-separated paths into segments."""

from __future__ import annotations

import re


def _span_positions(path: str, reject: str) -> list[tuple[int, int]]:
    """Return (start, length) for each segment of *path*.

    A leading "/" is a segment of its own. After it, runs of characters
    from *reject* separate segments and never belong to one.
    """
    spans: list[tuple[int, int]] = []
    start = 0
    if path.startswith("/"):
        spans.append((0, 1))
        start = 1
    if not reject:
        if path[start:]:
            spans.append((start, len(path) - start))
        return spans
    pattern = re.compile(f"[^{re.escape(reject)}]+")
    spans.extend(
        (match.start(), match.end() - match.start())
        for match in pattern.finditer(path, start)
    )
    return spans


def count_spans(path: str, reject: str) -> tuple[int, int]:
    """Count the segments of *path*.

    Returns ``(segments, chars)``, where *chars* is the storage the
    segments need with one terminator each.
    """
    spans = _span_positions(path, reject)
    chars = sum(length + 1 for _, length in spans)
    if path.startswith("/"):
        # The root segment is counted as two characters.
        chars += 1
    return len(spans), chars


def split_spans(path: str, reject: str) -> list[str]:
    """Return the segments of *path* as strings."""
    return [path[start:start + length] for start, length in _span_positions(path, reject)]


def find_path_segment(path: str, segment: int) -> tuple[int, int] | None:
    """Locate a segment of *path* by index; negative indices count from the end.

    Returns ``(offset, length)``, or ``None`` when *path* has no segments
    at all. Raises IndexError when the index is out of range.
    """
    spans = _span_positions(path, "/")
    if not spans:
        return None
    index = segment + len(spans) if segment < 0 else segment
    if index < 0 or index >= len(spans):
        raise IndexError(f"path {path!r} has no segment {segment}")
    return spans[index]


def pathseg(path: str, segment: int) -> str | None:
    """Return one segment of *path*, or None if it does not exist."""
    try:
        found = find_path_segment(path, segment)
    except IndexError:
        return None
    if found is None:
        return None
    start, length = found
    return path[start:start + length]