import asyncio
from datetime import date, time
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from inkstudio.errors import TransientFetchError
from inkstudio.models import Appointment, BlockedOrExtendedDate, WeeklyAvailability
from inkstudio.store import SqlRecordStore, load_snapshot

DAY = date(2024, 1, 1)


@pytest.fixture
def records(session, artist, service):
    session.add(BlockedOrExtendedDate(artist_id=artist.id, date=DAY, start_time=time(10), end_time=time(11)))
    session.add(BlockedOrExtendedDate(artist_id=artist.id, date=date(2024, 2, 1)))
    for start, status in ((9, "confirmed"), (11, "cancelled"), (12, "pending")):
        session.add(Appointment(
            artist_id=artist.id, service_id=service.id,
            client_name="Sam", client_email="sam@example.com", client_phone="0123456789",
            date=DAY, start_time=time(start), end_time=time(start + 1), status=status,
        ))
    session.commit()
    return artist


def test_sql_store_reads(engine, records):
    store = SqlRecordStore(engine)
    weekly = asyncio.run(store.list_weekly_availability(records.id))
    assert [w.weekday for w in weekly] == list(range(7))
    assert all(isinstance(w, WeeklyAvailability) for w in weekly)

    overrides = asyncio.run(store.list_blocked_or_extended_dates(records.id, DAY, DAY))
    assert len(overrides) == 1
    assert len(asyncio.run(store.list_blocked_or_extended_dates(records.id))) == 2

    appointments = asyncio.run(store.list_appointments(records.id, DAY))
    assert [a.start_time for a in appointments] == [time(9), time(12)]


def test_snapshot_from_sql(engine, records):
    snap = asyncio.run(load_snapshot(SqlRecordStore(engine), records.id, DAY, timeout=5))
    assert len(snap.weekly) == 7
    assert len(snap.overrides) == 1
    assert len(snap.appointments) == 2


def test_driver_errors_become_transient(engine):
    store = SqlRecordStore(engine)
    error = OperationalError("SELECT 1", {}, Exception("database is locked"))
    with patch.object(SqlRecordStore, "_fetch", side_effect=error):
        with pytest.raises(TransientFetchError):
            asyncio.run(store.list_weekly_availability(1))


def test_programming_errors_are_not_retried_as_transient(engine):
    store = SqlRecordStore(engine)
    with patch.object(SqlRecordStore, "_fetch", side_effect=AttributeError("no such column attribute")):
        with pytest.raises(AttributeError):
            asyncio.run(store.list_weekly_availability(1))
