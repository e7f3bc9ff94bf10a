"""Appointment lifecycle: booking, rescheduling and status transitions."""

from collections.abc import Callable

import structlog
from pydantic import ValidationError as PydanticValidationError

from consultorio.core.clock import Clock, current_time_string, time_to_minutes, today_string
from consultorio.core.exceptions import (
    ConflictError,
    NotFoundException,
    StateError,
    TemporalError,
    ValidationError,
)
from consultorio.core.store import Collection, KeyValueStore
from consultorio.schemas.appointments import (
    Appointment,
    AppointmentAgenda,
    AppointmentStatus,
    SlotRequest,
)
from consultorio.services.availability_service import has_conflict
from consultorio.services.collaborators import ConsultationTypeRepository, PatientRepository

logger = structlog.get_logger(__name__)

APPOINTMENTS_KEY = "appointments"


class AppointmentService:
    """System of record for appointments.

    Every mutation reads the current set, derives the next one and replaces it
    in a single write. Validation happens before the write, so a rejected call
    leaves the stored set untouched.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock,
        patients: PatientRepository,
        consultation_types: ConsultationTypeRepository,
    ):
        """Initialize service with its store and collaborators."""
        self.collection = Collection(store, APPOINTMENTS_KEY, Appointment)
        self.clock = clock
        self.patients = patients
        self.consultation_types = consultation_types

    def list_all(self) -> list[Appointment]:
        return self.collection.get_all()

    def get_appointment(self, appointment_id: str) -> Appointment:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
        """
        appointment = next((a for a in self.list_all() if a.id == appointment_id), None)
        if appointment is None:
            raise NotFoundException("Appointment not found")
        return appointment

    def _validate_slot(self, day: str, time: str) -> None:
        try:
            SlotRequest(date=day, time=time)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid date or time: {day} {time}") from e

        today = today_string(self.clock)
        if day < today:
            raise TemporalError("Date cannot be earlier than today")
        if day == today and time_to_minutes(time) < time_to_minutes(current_time_string(self.clock)):
            raise TemporalError("Time cannot be earlier than the current time")

    def create_appointment(
        self,
        patient_id: str,
        date: str,
        time: str,
        consultation_type_id: str,
    ) -> Appointment:
        """
        Book a new appointment.

        Args:
            patient_id: Patient being booked
            date: ISO date of the appointment
            time: ``HH:MM`` start time
            consultation_type_id: Service being booked

        Returns:
            Created appointment, with the consultation type's current price

        Raises:
            ValidationError: If patient or consultation type does not exist
            TemporalError: If the slot lies in the past
            ConflictError: If the slot is held by another scheduled appointment
        """
        patient = self.patients.find_by_id(patient_id)
        consultation_type = self.consultation_types.find_by_id(consultation_type_id)
        if patient is None or consultation_type is None:
            logger.warning(
                "appointment_rejected",
                reason="validation",
                patient_id=patient_id,
                consultation_type_id=consultation_type_id,
            )
            raise ValidationError("Invalid patient or consultation type")

        self._validate_slot(date, time)

        current = self.list_all()
        if has_conflict(current, date, time):
            logger.warning("appointment_rejected", reason="conflict", date=date, time=time)
            raise ConflictError("Time slot already taken")

        appointment = Appointment(
            patient_id=patient.id,
            patient_name=patient.name,
            date=date,
            time=time,
            status=AppointmentStatus.SCHEDULED,
            consultation_type_id=consultation_type.id,
            price=consultation_type.price,
            reminder_sent=False,
        )
        self.collection.replace_all([*current, appointment])

        logger.info(
            "appointment_created",
            appointment_id=appointment.id,
            patient_id=patient.id,
            date=date,
            time=time,
            price=str(appointment.price),
        )
        return appointment

    def reschedule_appointment(self, appointment_id: str, new_date: str, new_time: str) -> Appointment:
        """
        Move a scheduled appointment to another slot.

        Patient, consultation type and price are carried over unchanged.

        Raises:
            NotFoundException: If appointment not found
            StateError: If the appointment is no longer scheduled
            TemporalError: If the new slot lies in the past
            ConflictError: If another scheduled appointment holds the new slot
        """
        current = self.list_all()
        appointment = next((a for a in current if a.id == appointment_id), None)
        if appointment is None:
            raise NotFoundException("Appointment not found")
        if not appointment.is_scheduled:
            raise StateError(f"Cannot reschedule a {appointment.status.value} appointment")

        self._validate_slot(new_date, new_time)

        if has_conflict(current, new_date, new_time, exclude_appointment_id=appointment_id):
            logger.warning(
                "appointment_rejected", reason="conflict", date=new_date, time=new_time
            )
            raise ConflictError("Time slot already taken")

        moved = appointment.model_copy(update={"date": new_date, "time": new_time})
        self.collection.replace_all([moved if a.id == appointment_id else a for a in current])

        logger.info(
            "appointment_rescheduled",
            appointment_id=appointment_id,
            old_date=appointment.date,
            old_time=appointment.time,
            date=new_date,
            time=new_time,
        )
        return moved

    def _update(
        self,
        appointment_id: str,
        change: Callable[[Appointment], Appointment],
    ) -> Appointment:
        current = self.list_all()
        appointment = next((a for a in current if a.id == appointment_id), None)
        if appointment is None:
            raise NotFoundException("Appointment not found")
        updated = change(appointment)
        self.collection.replace_all([updated if a.id == appointment_id else a for a in current])
        return updated

    def _transition(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        def change(appointment: Appointment) -> Appointment:
            if not appointment.is_scheduled:
                logger.warning(
                    "appointment_transition_rejected",
                    appointment_id=appointment_id,
                    current_status=appointment.status.value,
                    requested_status=status.value,
                )
                raise StateError(
                    f"Cannot mark a {appointment.status.value} appointment as {status.value}"
                )
            return appointment.model_copy(update={"status": status})

        updated = self._update(appointment_id, change)
        logger.info(
            "appointment_status_changed",
            appointment_id=appointment_id,
            status=status.value,
        )
        return updated

    def mark_completed(self, appointment_id: str) -> Appointment:
        """
        Mark a scheduled appointment as completed.

        No ledger entry is created here; the caller that completes the
        appointment owns the matching transaction.
        """
        return self._transition(appointment_id, AppointmentStatus.COMPLETED)

    def mark_canceled(self, appointment_id: str) -> Appointment:
        return self._transition(appointment_id, AppointmentStatus.CANCELED)

    def mark_reminder_sent(self, appointment_id: str) -> Appointment:
        """Flag the day-before reminder as sent. Idempotent, any status."""
        updated = self._update(
            appointment_id, lambda a: a.model_copy(update={"reminder_sent": True})
        )
        logger.info("reminder_marked_sent", appointment_id=appointment_id)
        return updated

    def restore(self, snapshot: Appointment) -> Appointment:
        """
        Put back a previously read appointment.

        Undoes a write whose follow-up step failed, so the pair of writes
        leaves nothing half-applied.
        """
        restored = self._update(snapshot.id, lambda _: snapshot)
        logger.warning(
            "appointment_restored",
            appointment_id=snapshot.id,
            status=snapshot.status.value,
            reminder_sent=snapshot.reminder_sent,
        )
        return restored

    def today_appointment_for(self, patient_id: str) -> Appointment | None:
        """A patient's appointment for today that is still open, if any."""
        today = today_string(self.clock)
        return next(
            (
                a
                for a in self.list_all()
                if a.patient_id == patient_id and a.date == today and a.is_scheduled
            ),
            None,
        )

    def scheduled_on(self, day: str) -> list[Appointment]:
        """Scheduled appointments of a day ordered by time."""
        return sorted(
            (a for a in self.list_all() if a.date == day and a.is_scheduled),
            key=lambda a: a.time,
        )

    def agenda(self) -> AppointmentAgenda:
        """Upcoming appointments soonest first, closed ones most recent first."""
        appointments = self.list_all()
        upcoming = sorted((a for a in appointments if a.is_scheduled), key=lambda a: a.sort_key)
        past = sorted(
            (a for a in appointments if not a.is_scheduled),
            key=lambda a: a.sort_key,
            reverse=True,
        )
        return AppointmentAgenda(upcoming=upcoming, past=past)
