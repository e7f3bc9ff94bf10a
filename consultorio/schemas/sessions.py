"""Consultation session schemas."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from consultorio.schemas.appointments import Appointment
from consultorio.schemas.notes import NoteDraft


class SessionState(str, Enum):
    """Consultation session lifecycle."""

    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"
    AWAITING_PAYMENT = "awaiting_payment"
    RECEIPT_OFFERED = "receipt_offered"


class SessionOpenRequest(BaseModel):
    """Schema for opening a patient's record in consultation mode."""

    patient_id: str


class PaymentRequest(BaseModel):
    """Schema for confirming payment."""

    method: str | None = None


class Receipt(BaseModel):
    """Data needed to print a payment receipt."""

    patient_name: str
    amount: Decimal
    method: str
    date: str


class ConsultationSessionView(BaseModel):
    """Snapshot of the live consultation session."""

    patient_id: str
    state: SessionState
    appointment: Appointment | None
    elapsed_seconds: int
    elapsed_display: str
    anamnesis_complete: bool
    today_note_saved: bool
    can_start: bool
    can_finalize: bool
    missing: list[str]
    pending_note: NoteDraft | None = None
    receipt: Receipt | None = None
