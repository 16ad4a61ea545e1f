# inkstudio/schemas.py

from datetime import datetime, date as Date, time
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_serializer, model_validator


def hhmm(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value is not None else None


def whole_minutes(value: time) -> time:
    if value.second or value.microsecond:
        raise ValueError("times must be whole minutes (HH:MM)")
    return value


WholeMinute = Annotated[time, AfterValidator(whole_minutes)]


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class Role(str, Enum):
    superadmin = "superadmin"
    admin = "admin"
    staff = "staff"
    user = "user"


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


# --- Users ---

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    display_name: str = Field(min_length=2)


class AdminUserCreate(UserCreate):
    roles: List[Role] = Field(default_factory=lambda: [Role.user], min_length=1)


class PasswordReset(BaseModel):
    password: str = Field(min_length=8, max_length=72)


class UserPublic(BaseModel):
    id: int
    email: str
    display_name: str
    is_active: bool
    is_visible: bool = True
    order_index: int = 0
    roles: List[Role] = []


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    display_name: Optional[str] = Field(default=None, min_length=2)
    is_active: Optional[bool] = None
    is_visible: Optional[bool] = None
    order_index: Optional[int] = Field(default=None, ge=0)
    # replaces the whole role set when given
    roles: Optional[List[Role]] = Field(default=None, min_length=1)


class ArtistPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    display_name: str


# --- Weekly availability ---

class TimeRange(BaseModel):
    start_time: WholeMinute
    end_time: WholeMinute

    @model_validator(mode="after")
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @field_serializer("start_time", "end_time", when_used="json")
    def serialize_time(self, value: time) -> str:
        return hhmm(value)


class WeeklyAvailabilityCreate(TimeRange):
    weekday: int = Field(ge=0, le=6)  # 0=Sunday


class WeeklyAvailabilityPublic(WeeklyAvailabilityCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    artist_id: int


# --- Blocked / extended dates ---

class BlockedDateCreate(BaseModel):
    date: Date
    start_time: Optional[WholeMinute] = None
    end_time: Optional[WholeMinute] = None
    is_blocked: bool = True
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must be given together")
        if not self.is_blocked and self.start_time is None:
            raise ValueError("extended availability needs start_time and end_time")
        if self.start_time is not None and self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @field_serializer("start_time", "end_time", when_used="json")
    def serialize_time(self, value: Optional[time]) -> Optional[str]:
        return hhmm(value)


class BlockedDatePublic(BlockedDateCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    artist_id: int


# --- Services ---

class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    duration_minutes: int = Field(gt=0, le=24 * 60)
    price: Optional[float] = Field(default=None, ge=0)
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    price: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class ServicePublic(ServiceCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    artist_id: int


# --- Appointments ---

class AppointmentCreate(BaseModel):
    artist_id: int
    service_id: int
    client_name: str = Field(min_length=2)
    client_email: EmailStr
    client_phone: str = Field(min_length=9)
    date: Date
    start_time: WholeMinute
    notes: Optional[str] = None


class AppointmentReschedule(BaseModel):
    date: Date
    start_time: WholeMinute
    end_time: WholeMinute

    @model_validator(mode="after")
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    artist_id: int
    service_id: int
    client_name: str
    client_email: str
    client_phone: str
    date: Date
    start_time: time
    end_time: time
    status: AppointmentStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("start_time", "end_time", when_used="json")
    def serialize_time(self, value: time) -> str:
        return hhmm(value)


# --- Availability ---

class SlotPublic(BaseModel):
    start_time: str
    end_time: str


class AvailabilityResponse(BaseModel):
    artist_id: int
    date: Date
    duration_minutes: int
    slots: List[SlotPublic]


class DailySlotCount(BaseModel):
    date: Date
    slot_count: int


class DisabledDatesResponse(BaseModel):
    artist_id: int
    start: Date
    days: int
    disabled_dates: List[Date]
