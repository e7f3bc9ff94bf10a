"""Domain schemas."""

from consultorio.schemas.appointments import (
    Appointment,
    AppointmentAgenda,
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentStatus,
    ConsultationType,
    DayAvailability,
)
from consultorio.schemas.notes import Evaluation, EvolutionPoint, NoteDraft, NoteUpdate, SessionNote
from consultorio.schemas.notifications import (
    AccountProfile,
    NotificationCheckResult,
    NotificationLogEntry,
    SequencerStep,
)
from consultorio.schemas.patients import Anamnesis, AnamnesisChange, Patient
from consultorio.schemas.sessions import ConsultationSessionView, Receipt, SessionState
from consultorio.schemas.transactions import Transaction, TransactionType

__all__ = [
    "AccountProfile",
    "Anamnesis",
    "AnamnesisChange",
    "Appointment",
    "AppointmentAgenda",
    "AppointmentCreate",
    "AppointmentReschedule",
    "AppointmentStatus",
    "ConsultationSessionView",
    "ConsultationType",
    "DayAvailability",
    "Evaluation",
    "EvolutionPoint",
    "NoteDraft",
    "NoteUpdate",
    "NotificationCheckResult",
    "NotificationLogEntry",
    "Patient",
    "Receipt",
    "SequencerStep",
    "SessionNote",
    "SessionState",
    "Transaction",
    "TransactionType",
]
