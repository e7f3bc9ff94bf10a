"""Consultation session controller.

Drives today's appointment of one patient from the start of the consultation
to payment and receipt:

    idle -> active -> ended -> awaiting_payment -> receipt_offered -> idle

Payment is only reachable once the patient's anamnesis is filled in and a
note linked to today's appointment has been saved.
"""

from contextlib import ExitStack
from dataclasses import dataclass, field

import structlog

from consultorio.config import Settings
from consultorio.core.clock import Clock
from consultorio.core.exceptions import GateError, StateError, ValidationError
from consultorio.schemas.appointments import Appointment
from consultorio.schemas.notes import Evaluation, NoteDraft, SessionNote
from consultorio.schemas.patients import Anamnesis, AnamnesisChange
from consultorio.schemas.sessions import ConsultationSessionView, Receipt, SessionState
from consultorio.schemas.transactions import Transaction, TransactionType
from consultorio.services.anamnesis_service import AnamnesisService, apply_anamnesis_change
from consultorio.services.appointment_service import AppointmentService
from consultorio.services.collaborators import Ledger
from consultorio.services.note_service import NoteService

logger = structlog.get_logger(__name__)

MISSING_ANAMNESIS = "anamnesis"
MISSING_TODAY_NOTE = "today's note"


def format_elapsed(seconds: int) -> str:
    """``MM:SS``, or ``H:MM:SS`` from one hour on."""
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    prefix = f"{hours}:" if hours > 0 else ""
    return f"{prefix}{minutes:02d}:{secs:02d}"


class SessionTimer:
    """Elapsed-time counter that advances one tick per interval while running."""

    def __init__(self, clock: Clock, interval_seconds: float = 1.0):
        self.clock = clock
        self.interval_seconds = interval_seconds
        self._accumulated = 0.0
        self._started_at: float | None = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self.clock.monotonic()

    def stop(self) -> None:
        """Stop counting. Safe to call when already stopped."""
        if self._started_at is not None:
            self._accumulated += self.clock.monotonic() - self._started_at
            self._started_at = None

    @property
    def ticks(self) -> int:
        total = self._accumulated
        if self._started_at is not None:
            total += self.clock.monotonic() - self._started_at
        return int(total // self.interval_seconds)

    @property
    def elapsed_seconds(self) -> int:
        return int(self.ticks * self.interval_seconds)


@dataclass
class _Session:
    patient_id: str
    appointment_id: str | None
    timer: SessionTimer
    state: SessionState = SessionState.IDLE
    pending_note: NoteDraft | None = None
    receipt: Receipt | None = None
    resources: ExitStack = field(default_factory=ExitStack)


class ConsultationSessionController:
    """Single active consultation session for the practitioner."""

    def __init__(
        self,
        settings: Settings,
        clock: Clock,
        appointments: AppointmentService,
        anamnesis: AnamnesisService,
        notes: NoteService,
        ledger: Ledger,
    ):
        self.settings = settings
        self.clock = clock
        self.appointments = appointments
        self.anamnesis = anamnesis
        self.notes = notes
        self.ledger = ledger
        self._session: _Session | None = None

    # Session scope

    @property
    def state(self) -> SessionState:
        return self._session.state if self._session else SessionState.IDLE

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def open(self, patient_id: str) -> ConsultationSessionView:
        """
        Open a patient's record in consultation mode.

        Any session already open is closed first. Today's appointment is
        resolved once, here.
        """
        self.close()
        # Unknown patients raise NotFoundException here
        self.anamnesis.get(patient_id)
        appointment = self.appointments.today_appointment_for(patient_id)
        self._session = _Session(
            patient_id=patient_id,
            appointment_id=appointment.id if appointment else None,
            timer=SessionTimer(self.clock),
        )
        logger.info(
            "consultation_opened",
            patient_id=patient_id,
            appointment_id=self._session.appointment_id,
        )
        return self.view()

    def close(self) -> None:
        """Leave the record. Safe from any state, and when nothing is open."""
        session = self._session
        if session is None:
            return
        session.resources.close()
        self._session = None
        logger.info("consultation_closed", patient_id=session.patient_id, state=session.state.value)

    def _require_session(self) -> _Session:
        if self._session is None:
            raise StateError("No consultation session is open")
        return self._session

    def _require_state(self, *states: SessionState) -> _Session:
        session = self._require_session()
        if session.state not in states:
            expected = ", ".join(s.value for s in states)
            raise StateError(
                f"Consultation is {session.state.value}; expected {expected}"
            )
        return session

    def _appointment(self, session: _Session) -> Appointment | None:
        if session.appointment_id is None:
            return None
        return self.appointments.get_appointment(session.appointment_id)

    # Completeness gate

    def missing_requirements(self) -> list[str]:
        """Which of anamnesis and today's note are still missing."""
        session = self._require_session()
        missing = []
        if not self.anamnesis.is_complete(session.patient_id):
            missing.append(MISSING_ANAMNESIS)
        if session.appointment_id is None or not self.notes.has_note_for_appointment(
            session.appointment_id
        ):
            missing.append(MISSING_TODAY_NOTE)
        return missing

    def can_finalize(self) -> bool:
        return not self.missing_requirements()

    def _advance_if_finalizable(self, session: _Session) -> None:
        appointment = self._appointment(session)
        if appointment is None or not appointment.is_scheduled:
            return
        if self.can_finalize():
            session.state = SessionState.AWAITING_PAYMENT
            logger.info("consultation_awaiting_payment", appointment_id=appointment.id)

    # Timer

    def start(self) -> ConsultationSessionView:
        """Start the consultation and its timer."""
        session = self._require_state(SessionState.IDLE)
        appointment = self._appointment(session)
        if appointment is None or not appointment.is_scheduled:
            raise StateError("No open appointment today for this patient")

        session.timer.start()
        session.resources.callback(session.timer.stop)
        session.state = SessionState.ACTIVE
        logger.info("consultation_started", appointment_id=appointment.id)
        return self.view()

    def end(self) -> ConsultationSessionView:
        """Stop the timer; move on to payment if the record is complete."""
        session = self._require_state(SessionState.ACTIVE)
        session.resources.close()
        session.state = SessionState.ENDED
        logger.info(
            "consultation_ended",
            appointment_id=session.appointment_id,
            elapsed_seconds=session.timer.elapsed_seconds,
        )
        self._advance_if_finalizable(session)
        return self.view()

    # Documentation

    def draft_note(self, content: str) -> NoteDraft:
        """First phase of saving a note: capture the text."""
        session = self._require_session()
        session.pending_note = self.notes.draft(session.patient_id, content, session.appointment_id)
        return session.pending_note

    def confirm_note(self, evaluation: Evaluation | None) -> SessionNote:
        """Second phase: persist the pending note with its evaluation."""
        session = self._require_session()
        if session.pending_note is None:
            raise StateError("No note text captured")
        note = self.notes.confirm(session.pending_note, evaluation)
        session.pending_note = None
        return note

    def discard_note(self) -> None:
        self._require_session().pending_note = None

    def edit_note(self, note_id: str, content: str, evaluation: Evaluation | None) -> SessionNote:
        self._require_session()
        return self.notes.edit(note_id, content, evaluation)

    def save_anamnesis(self, anamnesis: Anamnesis) -> ConsultationSessionView:
        session = self._require_session()
        self.anamnesis.save(session.patient_id, anamnesis)
        if session.state == SessionState.ENDED:
            self._advance_if_finalizable(session)
        elif session.state == SessionState.AWAITING_PAYMENT and not self.can_finalize():
            session.state = SessionState.ENDED
            logger.info("consultation_payment_withdrawn", patient_id=session.patient_id)
        return self.view()

    def update_anamnesis_field(self, change: AnamnesisChange) -> ConsultationSessionView:
        """Apply one form edit to the stored anamnesis and save it."""
        session = self._require_session()
        current = self.anamnesis.get(session.patient_id) or Anamnesis()
        return self.save_anamnesis(apply_anamnesis_change(current, change))

    # Finalize

    def proceed_to_payment(self) -> ConsultationSessionView:
        """
        Ask to finalize an ended consultation.

        Raises:
            StateError: If the consultation has not ended
            GateError: If anamnesis or today's note is missing
        """
        session = self._require_state(SessionState.ENDED, SessionState.AWAITING_PAYMENT)
        appointment = self._appointment(session)
        if appointment is None or not appointment.is_scheduled:
            raise StateError("Today's appointment is no longer open")

        missing = self.missing_requirements()
        if missing:
            logger.warning("finalize_blocked", appointment_id=appointment.id, missing=missing)
            raise GateError(missing)

        session.state = SessionState.AWAITING_PAYMENT
        return self.view()

    def confirm_payment(self, method: str | None = None) -> Receipt:
        """
        Complete the appointment, record the income and offer a receipt.

        Args:
            method: Payment method; defaults to the configured one

        Returns:
            Receipt data for the optional print

        Completion and the ledger entry are applied together: if the ledger
        write fails the appointment is put back as it was and the error
        propagates, leaving the session awaiting payment.

        Raises:
            StateError: If payment is not awaited
            GateError: If anamnesis or today's note went missing meanwhile
            ValidationError: If the payment method is not accepted
        """
        session = self._require_state(SessionState.AWAITING_PAYMENT)
        method = method or self.settings.default_payment_method
        if method not in self.settings.payment_methods:
            raise ValidationError(f"Unknown payment method: {method}")

        appointment = self._appointment(session)
        if appointment is None:
            raise StateError("No appointment to finalize")

        missing = self.missing_requirements()
        if missing:
            session.state = SessionState.ENDED
            logger.warning("finalize_blocked", appointment_id=appointment.id, missing=missing)
            raise GateError(missing)

        transaction = Transaction(
            description=f"Consulta - {appointment.patient_name} ({method})",
            amount=appointment.price,
            type=TransactionType.INCOME,
            date=appointment.date,
            patient_id=appointment.patient_id,
        )
        completed = self.appointments.mark_completed(appointment.id)
        try:
            self.ledger.append(transaction)
        except Exception as e:
            self.appointments.restore(appointment)
            logger.error(
                "consultation_finalize_failed",
                appointment_id=appointment.id,
                error=str(e),
            )
            raise

        session.resources.close()
        session.receipt = Receipt(
            patient_name=completed.patient_name,
            amount=completed.price,
            method=method,
            date=completed.date,
        )
        session.state = SessionState.RECEIPT_OFFERED
        logger.info(
            "consultation_finalized",
            appointment_id=completed.id,
            amount=str(completed.price),
            method=method,
            elapsed_seconds=session.timer.elapsed_seconds,
        )
        return session.receipt

    def accept_receipt(self) -> Receipt:
        """Take the receipt for printing and end the session."""
        session = self._require_state(SessionState.RECEIPT_OFFERED)
        receipt = session.receipt
        if receipt is None:
            raise StateError("No receipt to print")
        self.close()
        return receipt

    def decline_receipt(self) -> None:
        """Skip the receipt and end the session."""
        self._require_state(SessionState.RECEIPT_OFFERED)
        self.close()

    # Snapshot

    def view(self) -> ConsultationSessionView:
        session = self._require_session()
        appointment = self._appointment(session)
        missing = self.missing_requirements()
        return ConsultationSessionView(
            patient_id=session.patient_id,
            state=session.state,
            appointment=appointment,
            elapsed_seconds=session.timer.elapsed_seconds,
            elapsed_display=format_elapsed(session.timer.elapsed_seconds),
            anamnesis_complete=MISSING_ANAMNESIS not in missing,
            today_note_saved=MISSING_TODAY_NOTE not in missing,
            can_start=(
                session.state == SessionState.IDLE
                and appointment is not None
                and appointment.is_scheduled
            ),
            can_finalize=not missing,
            missing=missing,
            pending_note=session.pending_note,
            receipt=session.receipt,
        )
