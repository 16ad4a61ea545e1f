# inkstudio/models.py

from typing import Optional
from datetime import datetime, date as Date, time, timezone

from sqlalchemy import Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    display_name: str
    is_active: bool = True
    # public artist listing
    is_visible: bool = True
    order_index: int = 0
    created_at: datetime = Field(default_factory=utcnow)


class UserRole(SQLModel, table=True):
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_role"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    role: str  # superadmin, admin, staff or user


class WeeklyAvailability(SQLModel, table=True):
    __tablename__ = "artist_availability"

    id: Optional[int] = Field(default=None, primary_key=True)
    artist_id: int = Field(foreign_key="user.id", index=True)
    weekday: int  # 0=Sunday ... 6=Saturday
    start_time: time
    end_time: time


class BlockedOrExtendedDate(SQLModel, table=True):
    __tablename__ = "artist_blocked_dates"

    id: Optional[int] = Field(default=None, primary_key=True)
    artist_id: int = Field(foreign_key="user.id", index=True)
    date: Date = Field(index=True)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_blocked: bool = True
    reason: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_full_day_block(self) -> bool:
        return self.is_blocked and self.start_time is None and self.end_time is None


class ArtistService(SQLModel, table=True):
    __tablename__ = "artist_services"

    id: Optional[int] = Field(default=None, primary_key=True)
    artist_id: int = Field(foreign_key="user.id", index=True)
    name: str
    duration_minutes: int
    price: Optional[float] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        # one live booking per artist start; cancelled rows free the start again
        Index(
            "uq_appointment_artist_start",
            "artist_id",
            "date",
            "start_time",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    artist_id: int = Field(foreign_key="user.id", index=True)
    service_id: int = Field(foreign_key="artist_services.id")

    client_name: str
    client_email: str
    client_phone: str

    date: Date = Field(index=True)
    start_time: time
    end_time: time
    status: str = "pending"  # pending, confirmed or cancelled
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
