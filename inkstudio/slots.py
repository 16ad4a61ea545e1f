# inkstudio/slots.py
"""Availability operations for one artist, reading through a RecordStore."""

import logging
from datetime import date, timedelta
from typing import List, Optional

from inkstudio import core
from inkstudio.config import settings
from inkstudio.intervals import IntervalSet
from inkstudio.store import RecordStore, Snapshot, load_snapshot

logger = logging.getLogger(__name__)


async def _snapshot(store: RecordStore, artist_id: int, start: date, end: Optional[date] = None) -> Snapshot:
    return await load_snapshot(
        store,
        artist_id,
        start,
        end,
        timeout=settings.FETCH_TIMEOUT_SECONDS,
        retries=settings.FETCH_RETRY_ATTEMPTS,
    )


async def resolve_open_intervals(store: RecordStore, artist_id: int, day: date) -> IntervalSet:
    snap = await _snapshot(store, artist_id, day)
    return core.resolve_open_intervals(
        day, snap.weekly, snap.overrides, settings.EXTENSIONS_OVERRIDE_BLOCKS
    )


async def compute_available_slots(
    store: RecordStore,
    artist_id: int,
    day: date,
    duration_minutes: int,
    step_minutes: Optional[int] = None,
) -> List[core.Slot]:
    snap = await _snapshot(store, artist_id, day)
    slots = core.compute_slots(
        day,
        snap.weekly,
        snap.overrides,
        snap.appointments,
        duration_minutes,
        step_minutes or settings.SLOT_STEP_MINUTES,
        overlap_policy=settings.SLOT_OVERLAP_POLICY,
        extensions_win=settings.EXTENSIONS_OVERRIDE_BLOCKS,
    )
    logger.debug(f"Artist {artist_id} on {day}: {len(slots)} slots of {duration_minutes} min")
    return slots


async def compute_daily_slot_counts(
    store: RecordStore,
    artist_id: int,
    start_date: date,
    end_date: date,
    duration_minutes: int,
    step_minutes: Optional[int] = None,
) -> List[dict]:
    if end_date < start_date:
        raise ValueError("end_date must not be before start_date")

    snap = await _snapshot(store, artist_id, start_date, end_date)
    counts = []
    day = start_date
    while day <= end_date:
        slots = core.compute_slots(
            day,
            snap.weekly,
            snap.overrides,
            [a for a in snap.appointments if a.date == day],
            duration_minutes,
            step_minutes or settings.SLOT_STEP_MINUTES,
            overlap_policy=settings.SLOT_OVERLAP_POLICY,
            extensions_win=settings.EXTENSIONS_OVERRIDE_BLOCKS,
        )
        counts.append({"date": day, "slot_count": len(slots)})
        day += timedelta(days=1)
    return counts


async def compute_disabled_dates(
    store: RecordStore, artist_id: int, start: date, days: Optional[int] = None
) -> List[date]:
    if days is None:
        days = settings.BOOKING_HORIZON_DAYS
    if days < 1:
        raise ValueError("days must be at least 1")
    end = start + timedelta(days=days - 1)
    snap = await _snapshot(store, artist_id, start, end)
    return core.disabled_dates(start, days, snap.weekly, snap.overrides)


async def check_booking(
    store: RecordStore,
    artist_id: int,
    day: date,
    start_minutes: int,
    duration_minutes: int,
    step_minutes: Optional[int] = None,
) -> core.Slot:
    snap = await _snapshot(store, artist_id, day)
    return core.check_booking(
        day,
        snap.weekly,
        snap.overrides,
        snap.appointments,
        start_minutes,
        duration_minutes,
        step_minutes or settings.SLOT_STEP_MINUTES,
        overlap_policy=settings.SLOT_OVERLAP_POLICY,
        extensions_win=settings.EXTENSIONS_OVERRIDE_BLOCKS,
    )
