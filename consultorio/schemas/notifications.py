"""Post-login notification schemas."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from consultorio.schemas.appointments import Appointment, new_id
from consultorio.schemas.patients import Patient


class AccountProfile(BaseModel):
    """Practitioner account state relevant to onboarding."""

    password_changed: bool = False
    profile_image: str | None = None


class NotificationLogEntry(BaseModel):
    """Record of a notification sent to a patient."""

    id: str = Field(default_factory=new_id)
    date: datetime
    patient_name: str
    type: Literal["sms", "email", "whatsapp"] = "sms"
    status: Literal["sent", "pending"] = "sent"
    details: str = ""


class SequencerStep(str, Enum):
    """Post-login checks in priority order."""

    ONBOARDING = "onboarding"
    BIRTHDAYS = "birthdays"
    REMINDERS = "reminders"
    TODAY_AGENDA = "today_agenda"


class OnboardingTasks(BaseModel):
    """Which setup tasks the practitioner has already done."""

    password_changed: bool
    profile_image_set: bool


class NotificationCheckResult(BaseModel):
    """Outcome of one sequencer check and what to render for it."""

    step: SequencerStep
    has_content: bool
    patients: list[Patient] = Field(default_factory=list)
    appointments: list[Appointment] = Field(default_factory=list)
    onboarding: OnboardingTasks | None = None


class NotificationSequenceState(BaseModel):
    """Where the login sequence currently stands."""

    current: NotificationCheckResult | None
    completed: bool
