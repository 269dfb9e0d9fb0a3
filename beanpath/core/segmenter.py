# beanpath/core/segmenter.py
"""
Path segmenter

Grammar
    path    := segment ("." segment)*
    segment := name ("[" index "]")*

Behavior
- Segment boundaries are dots outside brackets; "a[x.y].b" has two segments.
- Terminality is discovered while scanning: a segment is last when no further
  boundary follows it.
- "a[1][k]" expands into two steps: ("a", "1") and a chained ("", "k") step that
  indexes the value produced by the first one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from beanpath.core.errors import InvalidIndexError

_REFERENCE_CHARS = ".["


@dataclass(frozen=True)
class Step:
    """One resolution step: bare name plus at most one index."""
    name: str
    index: Optional[str]
    chained: bool
    last: bool


def index_of_dot(path: str, start: int = 0) -> int:
    """Index of the first '.' at or after `start` that is not inside brackets, or -1."""
    inside = False
    for i in range(start, len(path)):
        c = path[i]
        if c == "[":
            inside = True
        elif c == "]":
            inside = False
        elif c == "." and not inside:
            return i
    return -1


def iter_segments(path: str) -> Iterator[Tuple[str, bool]]:
    """Yield (segment_text, is_last) left to right."""
    pos = 0
    while True:
        dot = index_of_dot(path, pos)
        if dot == -1:
            yield path[pos:], True
            return
        yield path[pos:dot], False
        pos = dot + 1


def split_indices(segment: str, *, path: Optional[str] = None) -> Tuple[str, List[str]]:
    """
    Split "name[i][j]" into ("name", ["i", "j"]).

    Raises InvalidIndexError on an unclosed bracket or text after a closing bracket.
    """
    open_ndx = segment.find("[")
    if open_ndx == -1:
        return segment, []

    name = segment[:open_ndx]
    indices: List[str] = []
    pos = open_ndx
    while pos < len(segment):
        if segment[pos] != "[":
            raise InvalidIndexError(f"Unexpected text after index: {segment[pos:]!r}", path=path, segment=segment)
        close = segment.find("]", pos + 1)
        if close == -1:
            raise InvalidIndexError(f"Unbalanced bracket in segment: {segment!r}", path=path, segment=segment)
        indices.append(segment[pos + 1 : close])
        pos = close + 1
    return name, indices


def iter_steps(path: str) -> Iterator[Step]:
    """Flatten a path into resolution steps; exactly one step has last=True."""
    for text, seg_last in iter_segments(path):
        name, indices = split_indices(text, path=path)
        if not indices:
            yield Step(name=name, index=None, chained=False, last=seg_last)
            continue
        for n, idx in enumerate(indices):
            yield Step(
                name=name if n == 0 else "",
                index=idx,
                chained=n > 0,
                last=seg_last and n == len(indices) - 1,
            )


def extract_this_reference(path: str) -> str:
    """Leading reference name: the text before the first '.' or '['."""
    for i, c in enumerate(path):
        if c in _REFERENCE_CHARS:
            return path[:i]
    return path


__all__ = ["Step", "index_of_dot", "iter_segments", "split_indices", "iter_steps", "extract_this_reference"]
