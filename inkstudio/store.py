# inkstudio/store.py

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import DBAPIError
from sqlmodel import Session, select
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from inkstudio.errors import AvailabilityUnavailableError, TransientFetchError
from inkstudio.models import Appointment, BlockedOrExtendedDate, WeeklyAvailability

logger = logging.getLogger(__name__)


class RecordStore(ABC):

    @abstractmethod
    async def list_weekly_availability(self, artist_id: int) -> List[WeeklyAvailability]:
        pass

    @abstractmethod
    async def list_blocked_or_extended_dates(
        self, artist_id: int, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[BlockedOrExtendedDate]:
        pass

    @abstractmethod
    async def list_appointments(
        self, artist_id: int, start: date, end: Optional[date] = None
    ) -> List[Appointment]:
        """Non-cancelled appointments from ``start`` to ``end`` (inclusive, defaults to ``start``)."""
        pass


class SqlRecordStore(RecordStore):
    """Reads through the SQL engine; each read gets its own thread and session."""

    def __init__(self, engine):
        self.engine = engine

    async def _run(self, query):
        try:
            return await asyncio.to_thread(self._fetch, query)
        except DBAPIError as e:
            raise TransientFetchError(str(e)) from e

    def _fetch(self, query):
        with Session(self.engine) as session:
            return list(session.exec(query).all())

    async def list_weekly_availability(self, artist_id):
        return await self._run(
            select(WeeklyAvailability)
            .where(WeeklyAvailability.artist_id == artist_id)
            .order_by(WeeklyAvailability.weekday, WeeklyAvailability.start_time)
        )

    async def list_blocked_or_extended_dates(self, artist_id, start=None, end=None):
        stmt = select(BlockedOrExtendedDate).where(BlockedOrExtendedDate.artist_id == artist_id)
        if start is not None:
            stmt = stmt.where(BlockedOrExtendedDate.date >= start)
        if end is not None:
            stmt = stmt.where(BlockedOrExtendedDate.date <= end)
        return await self._run(stmt.order_by(BlockedOrExtendedDate.date))

    async def list_appointments(self, artist_id, start, end=None):
        return await self._run(
            select(Appointment)
            .where(Appointment.artist_id == artist_id)
            .where(Appointment.date >= start)
            .where(Appointment.date <= (end or start))
            .where(Appointment.status != "cancelled")
            .order_by(Appointment.date, Appointment.start_time)
        )


@dataclass
class Snapshot:
    weekly: List[WeeklyAvailability] = field(default_factory=list)
    overrides: List[BlockedOrExtendedDate] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)


def _short_exc(exc: BaseException) -> str:
    msg = str(exc).strip()
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


def _log_before_retry(retry_state: RetryCallState) -> None:
    reason = _short_exc(retry_state.outcome.exception())
    logger.warning(f"Record fetch attempt {retry_state.attempt_number} failed, retrying ({reason})")


async def load_snapshot(
    store: RecordStore,
    artist_id: int,
    start: date,
    end: Optional[date] = None,
    *,
    timeout: float,
    retries: int = 1,
) -> Snapshot:
    """Reads weekly hours, date overrides and live appointments in parallel.

    A timeout or transient read failure is retried ``retries`` times; after that
    the whole load fails with ``AvailabilityUnavailableError``.
    """
    end = end or start

    async def _gather() -> Snapshot:
        weekly, overrides, appointments = await asyncio.wait_for(
            asyncio.gather(
                store.list_weekly_availability(artist_id),
                store.list_blocked_or_extended_dates(artist_id, start, end),
                store.list_appointments(artist_id, start, end),
            ),
            timeout=timeout,
        )
        return Snapshot(weekly, overrides, appointments)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        retry=retry_if_exception_type((asyncio.TimeoutError, TransientFetchError)),
        before_sleep=_log_before_retry,
        reraise=True,
    )
    try:
        return await retrying(_gather)
    except (asyncio.TimeoutError, TransientFetchError) as e:
        logger.error(f"Giving up on records for artist {artist_id} ({start}..{end}): {_short_exc(e)}")
        raise AvailabilityUnavailableError(
            f"Availability for artist {artist_id} is temporarily unavailable"
        ) from e
