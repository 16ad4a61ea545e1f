# inkstudio/core.py
"""Slot computation over one artist's records.

Pipeline for a single date: resolve open intervals from the weekly rules and
the date overrides, enumerate fixed-duration candidates on a fixed step grid,
then drop candidates that overlap a live appointment. The date disabler is a
separate, coarser check used by the date picker.

Everything here is pure: callers pass in the records they fetched.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Sequence

from inkstudio.errors import BookingConflictError, InvalidOverrideError, OffGridSlotError
from inkstudio.intervals import IntervalSet, format_minutes, overlaps, to_minutes

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"


@dataclass(frozen=True, order=True)
class Slot:
    start: int
    end: int

    @property
    def start_time(self) -> str:
        return format_minutes(self.start)

    @property
    def end_time(self) -> str:
        return format_minutes(self.end)

    def as_dict(self) -> dict:
        return {"start_time": self.start_time, "end_time": self.end_time}


def weekday_index(day: date) -> int:
    # 0=Sunday .. 6=Saturday (date.weekday() is 0=Monday)
    return (day.weekday() + 1) % 7


def check_override(row) -> None:
    """Rejects override rows whose times do not match their kind."""
    has_start = row.start_time is not None
    has_end = row.end_time is not None
    if has_start != has_end:
        raise InvalidOverrideError("start_time and end_time must be set together")
    if not row.is_blocked and not has_start:
        raise InvalidOverrideError("an extended date needs start_time and end_time")
    if has_start and to_minutes(row.start_time) >= to_minutes(row.end_time):
        raise InvalidOverrideError("start_time must be before end_time")


def _range(row):
    return to_minutes(row.start_time), to_minutes(row.end_time)


def resolve_open_intervals(
    day: date,
    weekly: Iterable,
    overrides: Iterable,
    extensions_win: bool = True,
) -> IntervalSet:
    """Open intervals for ``day``.

    ``weekly`` rows not on the date's weekday and ``overrides`` for other
    dates are ignored, so callers may pass a whole range of records.
    """
    weekday = weekday_index(day)
    baseline = IntervalSet(_range(w) for w in weekly if w.weekday == weekday)

    full_day_block = False
    blocks = []
    extensions = []
    for row in overrides:
        if row.date != day:
            continue
        check_override(row)
        if not row.is_blocked:
            extensions.append(_range(row))
        elif row.start_time is None:
            full_day_block = True
        else:
            blocks.append(_range(row))

    if extensions_win:
        open_set = IntervalSet.empty() if full_day_block else baseline
        open_set = open_set.subtract(blocks)
        open_set = open_set.union(extensions)
    else:
        open_set = baseline.union(extensions)
        open_set = IntervalSet.empty() if full_day_block else open_set.subtract(blocks)
    return open_set.merge()


def enumerate_slots(
    intervals: Iterable, duration_minutes: int, step_minutes: int
) -> List[Slot]:
    """Every ``duration_minutes`` slot on a ``step_minutes`` grid anchored at each interval start."""
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")

    slots = []
    for start, end in intervals:
        cursor = start
        while cursor + duration_minutes <= end:
            slots.append(Slot(cursor, cursor + duration_minutes))
            cursor += step_minutes
    return slots


def drop_overlapping(slots: Sequence[Slot]) -> List[Slot]:
    kept: List[Slot] = []
    for slot in slots:
        if kept and slot.start < kept[-1].end:
            continue
        kept.append(slot)
    return kept


def _busy_ranges(appointments: Iterable):
    return [
        _range(a) for a in appointments
        if a.status != CANCELLED
    ]


def filter_conflicts(candidates: Iterable[Slot], appointments: Iterable) -> List[Slot]:
    busy = _busy_ranges(appointments)
    return [
        slot for slot in candidates
        if not any(overlaps(slot.start, slot.end, bs, be) for bs, be in busy)
    ]


def compute_slots(
    day: date,
    weekly: Iterable,
    overrides: Iterable,
    appointments: Iterable,
    duration_minutes: int,
    step_minutes: int,
    overlap_policy: str = "all",
    extensions_win: bool = True,
) -> List[Slot]:
    open_set = resolve_open_intervals(day, weekly, overrides, extensions_win)
    candidates = enumerate_slots(open_set, duration_minutes, step_minutes)
    logger.debug("%s: open %r, %d candidates", day, open_set, len(candidates))
    if overlap_policy == "distinct":
        # prune against bookings first so a taken slot does not shadow a free neighbour
        return drop_overlapping(filter_conflicts(candidates, appointments))
    return filter_conflicts(candidates, appointments)


def check_booking(
    day: date,
    weekly: Iterable,
    overrides: Iterable,
    appointments: Iterable,
    start: int,
    duration_minutes: int,
    step_minutes: int,
    overlap_policy: str = "all",
    extensions_win: bool = True,
) -> Slot:
    """Returns the requested slot if the day currently offers it.

    A start that is not on the day's slot grid raises ``OffGridSlotError``;
    a grid slot that is already taken raises ``BookingConflictError``.
    """
    wanted = Slot(start, start + duration_minutes)
    weekly = list(weekly)
    overrides = list(overrides)

    open_set = resolve_open_intervals(day, weekly, overrides, extensions_win)
    if wanted not in enumerate_slots(open_set, duration_minutes, step_minutes):
        raise OffGridSlotError(
            f"{wanted.start_time} is not a bookable start for a {duration_minutes} minute session"
        )

    offered = compute_slots(
        day, weekly, overrides, appointments, duration_minutes, step_minutes,
        overlap_policy=overlap_policy, extensions_win=extensions_win,
    )
    if wanted not in offered:
        raise BookingConflictError("That time is not available, please pick another slot")
    return wanted


def is_date_disabled(day: date, weekly: Iterable, overrides: Iterable) -> bool:
    """Coarse date-picker check: full-day block, or no weekly hours on that weekday.

    Partial blocks, extensions and appointments are not considered.
    """
    for row in overrides:
        if row.date == day and row.is_full_day_block:
            return True
    weekday = weekday_index(day)
    return not any(w.weekday == weekday for w in weekly)


def disabled_dates(start: date, days: int, weekly: Iterable, overrides: Iterable) -> List[date]:
    weekly = list(weekly)
    overrides = list(overrides)
    result = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        if is_date_disabled(day, weekly, overrides):
            result.append(day)
    return result
