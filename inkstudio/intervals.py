# inkstudio/intervals.py
"""Minute-based interval arithmetic for open hours.

Times of day are integer minutes since midnight. An ``IntervalSet`` holds
sorted, disjoint, half-open ``[start, end)`` ranges; every operation returns
a new normalized set.
"""

from datetime import time
from typing import Iterable, Iterator, List, Tuple, Union

Range = Tuple[int, int]


def to_minutes(value: Union[time, str]) -> int:
    """Accepts a ``time`` or an ``"HH:MM"`` string."""
    if isinstance(value, str):
        hours, _, minutes = value.partition(":")
        if not hours.isdigit() or not minutes[:2].isdigit():
            raise ValueError(f"Unrecognised time: {value!r}")
        value = time(int(hours), int(minutes[:2]))
    return value.hour * 60 + value.minute


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_time(minutes: int) -> time:
    # open hours end at 23:59 at the latest, so slot ends stay within the day
    return time(minutes // 60, minutes % 60)


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # touching ranges (a_end == b_start) do not overlap
    return a_start < b_end and b_start < a_end


def _merge(ranges: Iterable[Range]) -> List[Range]:
    ordered = sorted((s, e) for s, e in ranges if e > s)
    if not ordered:
        return []
    merged = []
    cs, ce = ordered[0]
    for s, e in ordered[1:]:
        if s <= ce:
            ce = max(ce, e)
        else:
            merged.append((cs, ce))
            cs, ce = s, e
    merged.append((cs, ce))
    return merged


class IntervalSet:
    __slots__ = ("_ranges",)

    def __init__(self, ranges: Iterable[Range] = ()):
        self._ranges: Tuple[Range, ...] = tuple(_merge(ranges))

    @classmethod
    def from_ranges(cls, ranges: Iterable[Range]) -> "IntervalSet":
        return cls(ranges)

    @classmethod
    def empty(cls) -> "IntervalSet":
        return cls()

    def merge(self) -> "IntervalSet":
        # construction already normalizes; kept for callers that build sets by hand
        return IntervalSet(self._ranges)

    def union(self, other: Union["IntervalSet", Iterable[Range]]) -> "IntervalSet":
        return IntervalSet(list(self._ranges) + list(other))

    def subtract(self, other: Union["IntervalSet", Iterable[Range]]) -> "IntervalSet":
        cuts = _merge(other)
        if not cuts:
            return self
        out = []
        for bs, be in self._ranges:
            segs = [(bs, be)]
            for cs, ce in cuts:
                pieces = []
                for s, e in segs:
                    if e <= cs or s >= ce:
                        pieces.append((s, e))
                        continue
                    if s < cs:
                        pieces.append((s, cs))
                    if e > ce:
                        pieces.append((ce, e))
                segs = pieces
                if not segs:
                    break
            out.extend(segs)
        return IntervalSet(out)

    def covers(self, start: int, end: int) -> bool:
        """True when ``[start, end)`` lies inside a single range."""
        return any(s <= start and end <= e for s, e in self._ranges)

    def as_strings(self) -> List[Tuple[str, str]]:
        return [(format_minutes(s), format_minutes(e)) for s, e in self._ranges]

    def __iter__(self) -> Iterator[Range]:
        return iter(self._ranges)

    def __len__(self) -> int:
        return len(self._ranges)

    def __bool__(self) -> bool:
        return bool(self._ranges)

    def __eq__(self, other) -> bool:
        if isinstance(other, IntervalSet):
            return self._ranges == other._ranges
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._ranges)

    def __repr__(self) -> str:
        inner = ", ".join(f"{a}-{b}" for a, b in self.as_strings())
        return f"IntervalSet([{inner}])"
