"""Appointment schemas."""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def new_id() -> str:
    return uuid4().hex


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELED = "canceled"


class ConsultationType(BaseModel):
    """Billable service definition."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, decimal_places=2)


class SlotRequest(BaseModel):
    """A (date, time) pair as submitted for booking or rescheduling."""

    date: str = Field(..., pattern=DATE_PATTERN)
    time: str = Field(..., pattern=TIME_PATTERN)

    @field_validator("date")
    @classmethod
    def validate_calendar_date(cls, v: str) -> str:
        """Reject strings that look like dates but are not (e.g. 2024-02-30)."""
        date.fromisoformat(v)
        return v


class AppointmentCreate(SlotRequest):
    """Schema for booking a new appointment."""

    patient_id: str = Field(..., min_length=1)
    consultation_type_id: str = Field(..., min_length=1)


class AppointmentReschedule(SlotRequest):
    """Schema for moving an appointment to a new slot."""


class Appointment(BaseModel):
    """Stored appointment.

    ``patient_name`` and ``price`` are snapshots taken at booking time and are
    never refreshed from the patient or the consultation type.
    """

    id: str = Field(default_factory=new_id)
    patient_id: str
    patient_name: str
    date: str = Field(..., pattern=DATE_PATTERN)
    time: str = Field(..., pattern=TIME_PATTERN)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    consultation_type_id: str
    price: Decimal
    reminder_sent: bool = False

    @property
    def is_scheduled(self) -> bool:
        return self.status == AppointmentStatus.SCHEDULED

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.date, self.time)


class DayAvailability(BaseModel):
    """Capacity summary of one calendar day."""

    date: str
    is_past: bool
    is_holiday: bool
    holiday_name: str | None = None
    is_full: bool
    available_count: int
    taken_count: int
    total_capacity: int


class AppointmentAgenda(BaseModel):
    """Appointments split the way the schedule screen lists them."""

    upcoming: list[Appointment]
    past: list[Appointment]
