# inkstudio/routers/appointments_routes.py

import logging
from datetime import datetime, timezone

from anyio import from_thread
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from inkstudio import slots as slot_service
from inkstudio.db import get_session
from inkstudio.errors import BookingConflictError, OffGridSlotError
from inkstudio.intervals import overlaps, to_minutes, to_time
from inkstudio.models import Appointment, ArtistService
from inkstudio.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentReschedule,
    AppointmentStatus,
)
from inkstudio.auth import AuthContext
from inkstudio.deps import get_record_store
from inkstudio.routers.artists_routes import get_artist_or_404, get_current_artist
from inkstudio.store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["appointments"],
)

PENDING = AppointmentStatus.pending.value
CONFIRMED = AppointmentStatus.confirmed.value
CANCELLED = AppointmentStatus.cancelled.value


def ensure_no_overlap(session: Session, appt: Appointment, ignore_id=None):
    """Persistence-time conflict check against the live appointments of that artist and date."""
    stmt = (
        select(Appointment)
        .where(Appointment.artist_id == appt.artist_id)
        .where(Appointment.date == appt.date)
        .where(Appointment.status != CANCELLED)
    )
    if ignore_id is not None:
        stmt = stmt.where(Appointment.id != ignore_id)

    start, end = to_minutes(appt.start_time), to_minutes(appt.end_time)
    with session.no_autoflush:
        others = session.exec(stmt).all()
    for other in others:
        if overlaps(start, end, to_minutes(other.start_time), to_minutes(other.end_time)):
            raise BookingConflictError("That time is no longer available, please pick another slot")


def save_appointment(session: Session, appt: Appointment, ignore_id=None) -> Appointment:
    ensure_no_overlap(session, appt, ignore_id=ignore_id)
    session.add(appt)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BookingConflictError("Appointment already exists for that start time")
    session.refresh(appt)
    return appt


def get_own_appointment(session: Session, artist: AuthContext, appt_id: int) -> Appointment:
    target = session.get(Appointment, appt_id)
    if target is None or target.artist_id != artist.user_id:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return target


@router.post("/appointments", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
):
    # 1) Validate artist and service
    get_artist_or_404(session, appt.artist_id)
    service = session.get(ArtistService, appt.service_id)
    if service is None or service.artist_id != appt.artist_id or not service.is_active:
        raise HTTPException(status_code=422, detail="Service not available")

    # 2) Prevent booking in the past (server local time)
    if datetime.combine(appt.date, appt.start_time) < datetime.now():
        raise HTTPException(status_code=422, detail="Cannot book an appointment in the past")

    # 3) The requested slot must be one the day still offers
    try:
        slot = from_thread.run(
            slot_service.check_booking,
            store,
            appt.artist_id,
            appt.date,
            to_minutes(appt.start_time),
            service.duration_minutes,
        )
    except (OffGridSlotError, BookingConflictError) as e:
        logger.info(f"Rejected booking for artist {appt.artist_id} on {appt.date} at {appt.start_time}: {e}")
        raise

    # 4) Create and save appointment
    db_appt = Appointment(
        artist_id=appt.artist_id,
        service_id=appt.service_id,
        client_name=appt.client_name,
        client_email=appt.client_email,
        client_phone=appt.client_phone,
        date=appt.date,
        start_time=appt.start_time,
        end_time=to_time(slot.end),
        status=PENDING,
        notes=appt.notes,
    )
    return save_appointment(session, db_appt)


@router.patch("/appointments/{appt_id}/confirm", response_model=AppointmentPublic)
def confirm_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    target = get_own_appointment(session, artist, appt_id)
    if target.status != PENDING:
        raise HTTPException(status_code=409, detail=f"Appointment is already {target.status}")

    target.status = CONFIRMED
    target.updated_at = datetime.now(timezone.utc)
    session.add(target)
    session.commit()
    session.refresh(target)
    return target


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    target = get_own_appointment(session, artist, appt_id)
    if target.status == CANCELLED:
        raise HTTPException(status_code=409, detail="Appointment already cancelled")

    target.status = CANCELLED
    target.updated_at = datetime.now(timezone.utc)
    session.add(target)
    session.commit()
    session.refresh(target)
    return target


@router.patch("/appointments/{appt_id}", response_model=AppointmentPublic)
def reschedule_appointment(
    appt_id: int,
    changes: AppointmentReschedule,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    target = get_own_appointment(session, artist, appt_id)
    if target.status == CANCELLED:
        raise HTTPException(status_code=409, detail="Cancelled appointments cannot be moved")

    target.date = changes.date
    target.start_time = changes.start_time
    target.end_time = changes.end_time
    target.updated_at = datetime.now(timezone.utc)
    try:
        return save_appointment(session, target, ignore_id=target.id)
    except BookingConflictError:
        session.rollback()
        raise
