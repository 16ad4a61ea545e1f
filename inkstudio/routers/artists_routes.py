# inkstudio/routers/artists_routes.py

from datetime import date, datetime, timezone
from typing import List, Optional

from anyio import from_thread
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from inkstudio import slots as slot_service
from inkstudio.config import settings
from inkstudio.db import get_session
from inkstudio.models import (
    Appointment,
    ArtistService,
    BlockedOrExtendedDate,
    User,
    UserRole,
    WeeklyAvailability,
)
from inkstudio.schemas import (
    AppointmentPublic,
    AppointmentStatus,
    ArtistPublic,
    AvailabilityResponse,
    BlockedDateCreate,
    BlockedDatePublic,
    DailySlotCount,
    DisabledDatesResponse,
    Role,
    ServiceCreate,
    ServicePublic,
    ServiceUpdate,
    WeeklyAvailabilityCreate,
    WeeklyAvailabilityPublic,
)
from inkstudio.auth import AuthContext, get_current_user
from inkstudio.deps import get_record_store, require_role
from inkstudio.store import RecordStore

router = APIRouter(
    prefix="/artists",
    tags=["artists"],
)


def get_current_artist(current_user: AuthContext = Depends(get_current_user)) -> AuthContext:
    require_role(current_user, Role.staff.value)
    return current_user


def get_artist_or_404(session: Session, artist_id: int) -> User:
    artist = session.exec(
        select(User)
        .join(UserRole, UserRole.user_id == User.id)
        .where(User.id == artist_id)
        .where(User.is_active == True)  # noqa: E712
        .where(UserRole.role == Role.staff.value)
    ).first()
    if artist is None:
        raise HTTPException(status_code=404, detail="Artist Not Found")
    return artist


def resolve_duration(
    session: Session,
    artist_id: int,
    service_id: Optional[int],
    duration_minutes: Optional[int],
) -> int:
    if (service_id is None) == (duration_minutes is None):
        raise HTTPException(status_code=422, detail="Give exactly one of service_id or duration_minutes")
    if duration_minutes is not None:
        return duration_minutes

    service = session.get(ArtistService, service_id)
    if service is None or service.artist_id != artist_id or not service.is_active:
        raise HTTPException(status_code=404, detail="Service not available")
    return service.duration_minutes


# --- Weekly availability (own) ---

@router.get("/me/availability", response_model=List[WeeklyAvailabilityPublic])
def list_my_availability(
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    return session.exec(
        select(WeeklyAvailability)
        .where(WeeklyAvailability.artist_id == artist.user_id)
        .order_by(WeeklyAvailability.weekday, WeeklyAvailability.start_time)
    ).all()


@router.post("/me/availability", response_model=WeeklyAvailabilityPublic, status_code=201)
def create_my_availability(
    availability: WeeklyAvailabilityCreate,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    same_day = session.exec(
        select(WeeklyAvailability)
        .where(WeeklyAvailability.artist_id == artist.user_id)
        .where(WeeklyAvailability.weekday == availability.weekday)
    ).all()
    for existing in same_day:
        if availability.start_time < existing.end_time and existing.start_time < availability.end_time:
            raise HTTPException(status_code=409, detail="Range overlaps existing availability")

    db_row = WeeklyAvailability(artist_id=artist.user_id, **availability.model_dump(mode="python"))
    session.add(db_row)
    session.commit()
    session.refresh(db_row)
    return db_row


@router.delete("/me/availability/{availability_id}", status_code=204)
def delete_my_availability(
    availability_id: int,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    row = session.get(WeeklyAvailability, availability_id)
    if row is None or row.artist_id != artist.user_id:
        raise HTTPException(status_code=404, detail="Availability not found")
    session.delete(row)
    session.commit()


# --- Blocked / extended dates (own) ---

@router.get("/me/blocked-dates", response_model=List[BlockedDatePublic])
def list_my_blocked_dates(
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    return session.exec(
        select(BlockedOrExtendedDate)
        .where(BlockedOrExtendedDate.artist_id == artist.user_id)
        .order_by(BlockedOrExtendedDate.date.desc())
    ).all()


@router.post("/me/blocked-dates", response_model=BlockedDatePublic, status_code=201)
def create_my_blocked_date(
    blocked: BlockedDateCreate,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    db_row = BlockedOrExtendedDate(artist_id=artist.user_id, **blocked.model_dump(mode="python"))
    session.add(db_row)
    session.commit()
    session.refresh(db_row)
    return db_row


@router.delete("/me/blocked-dates/{blocked_id}", status_code=204)
def delete_my_blocked_date(
    blocked_id: int,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    row = session.get(BlockedOrExtendedDate, blocked_id)
    if row is None or row.artist_id != artist.user_id:
        raise HTTPException(status_code=404, detail="Blocked date not found")
    session.delete(row)
    session.commit()


# --- Services (own) ---

def _get_my_service(session: Session, artist: AuthContext, service_id: int) -> ArtistService:
    service = session.get(ArtistService, service_id)
    if service is None or service.artist_id != artist.user_id:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.get("/me/services", response_model=List[ServicePublic])
def list_my_services(
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    return session.exec(
        select(ArtistService)
        .where(ArtistService.artist_id == artist.user_id)
        .order_by(ArtistService.name)
    ).all()


@router.post("/me/services", response_model=ServicePublic, status_code=201)
def create_my_service(
    service: ServiceCreate,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    db_service = ArtistService(artist_id=artist.user_id, **service.model_dump())
    session.add(db_service)
    session.commit()
    session.refresh(db_service)
    return db_service


@router.patch("/me/services/{service_id}", response_model=ServicePublic)
def update_my_service(
    service_id: int,
    changes: ServiceUpdate,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    service = _get_my_service(session, artist, service_id)
    for key, value in changes.model_dump(exclude_unset=True).items():
        setattr(service, key, value)
    service.updated_at = datetime.now(timezone.utc)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.delete("/me/services/{service_id}", status_code=204)
def delete_my_service(
    service_id: int,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    service = _get_my_service(session, artist, service_id)
    booked = session.exec(
        select(Appointment).where(Appointment.service_id == service_id)
    ).first()
    if booked is not None:
        # appointments keep pointing at their service; retire it instead
        raise HTTPException(status_code=409, detail="Service has appointments; deactivate it instead")
    session.delete(service)
    session.commit()


# --- Appointments (own) ---

@router.get("/me/appointments", response_model=List[AppointmentPublic])
def list_my_appointments(
    status: Optional[str] = "active",
    on_date: Optional[date] = None,
    session: Session = Depends(get_session),
    artist: AuthContext = Depends(get_current_artist),
):
    allowed = {s.value for s in AppointmentStatus} | {"active", "all"}
    if status not in allowed:
        raise HTTPException(status_code=422, detail="status must be pending, confirmed, cancelled, active or all")

    stmt = select(Appointment).where(Appointment.artist_id == artist.user_id)

    if on_date is not None:
        stmt = stmt.where(Appointment.date == on_date)

    if status == "active":
        stmt = stmt.where(Appointment.status != AppointmentStatus.cancelled.value)
    elif status != "all":
        stmt = stmt.where(Appointment.status == status)

    stmt = stmt.order_by(Appointment.date.desc(), Appointment.start_time.desc())
    return session.exec(stmt).all()


# --- Public views ---

@router.get("", response_model=List[ArtistPublic])
def list_artists(session: Session = Depends(get_session)):
    return session.exec(
        select(User)
        .join(UserRole, UserRole.user_id == User.id)
        .where(User.is_active == True)  # noqa: E712
        .where(UserRole.role == Role.staff.value)
        .where(User.is_visible == True)  # noqa: E712
        .order_by(User.order_index, User.display_name)
    ).all()


@router.get("/{artist_id}/services", response_model=List[ServicePublic])
def list_artist_services(artist_id: int, session: Session = Depends(get_session)):
    get_artist_or_404(session, artist_id)
    return session.exec(
        select(ArtistService)
        .where(ArtistService.artist_id == artist_id)
        .where(ArtistService.is_active == True)  # noqa: E712
        .order_by(ArtistService.name)
    ).all()


@router.get("/{artist_id}/slots", response_model=AvailabilityResponse)
def artist_slots(
    artist_id: int,
    date: date,
    service_id: Optional[int] = None,
    duration_minutes: Optional[int] = Query(default=None, gt=0),
    session: Session = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
):
    get_artist_or_404(session, artist_id)
    duration = resolve_duration(session, artist_id, service_id, duration_minutes)

    found = from_thread.run(slot_service.compute_available_slots, store, artist_id, date, duration)
    return {
        "artist_id": artist_id,
        "date": date,
        "duration_minutes": duration,
        "slots": [s.as_dict() for s in found],
    }


@router.get("/{artist_id}/slot-counts", response_model=List[DailySlotCount])
def artist_slot_counts(
    artist_id: int,
    start_date: date,
    end_date: date,
    service_id: Optional[int] = None,
    duration_minutes: Optional[int] = Query(default=None, gt=0),
    session: Session = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
):
    get_artist_or_404(session, artist_id)
    if end_date < start_date:
        raise HTTPException(status_code=422, detail="end_date cannot be before start_date")
    if (end_date - start_date).days >= settings.BOOKING_HORIZON_DAYS:
        raise HTTPException(status_code=422, detail="Date range is too long")
    duration = resolve_duration(session, artist_id, service_id, duration_minutes)

    return from_thread.run(
        slot_service.compute_daily_slot_counts, store, artist_id, start_date, end_date, duration
    )


@router.get("/{artist_id}/disabled-dates", response_model=DisabledDatesResponse)
def artist_disabled_dates(
    artist_id: int,
    start: Optional[date] = None,
    days: int = Query(default=settings.BOOKING_HORIZON_DAYS, ge=1, le=366),
    session: Session = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
):
    get_artist_or_404(session, artist_id)
    start = start or date.today()

    disabled = from_thread.run(slot_service.compute_disabled_dates, store, artist_id, start, days)
    return {"artist_id": artist_id, "start": start, "days": days, "disabled_dates": disabled}
