"""Post-login notification sequence.

After each login the practitioner is walked through a fixed chain of checks:
onboarding, birthdays, tomorrow's reminders and today's agenda. A check with
nothing to show is skipped; dismissing a shown check evaluates the next one
against live data. The chain runs once per login.
"""

from collections.abc import Callable
from datetime import date

import structlog

from consultorio.core.clock import Clock, today_string, tomorrow_string
from consultorio.core.exceptions import StateError, ValidationError
from consultorio.schemas.appointments import Appointment
from consultorio.schemas.notifications import (
    NotificationCheckResult,
    NotificationLogEntry,
    NotificationSequenceState,
    OnboardingTasks,
    SequencerStep,
)
from consultorio.schemas.patients import Patient
from consultorio.services.appointment_service import AppointmentService
from consultorio.services.collaborators import AccountRepository, NotificationLog, PatientRepository

logger = structlog.get_logger(__name__)

Check = Callable[[], NotificationCheckResult]


class NotificationSequencer:
    """Driver for an ordered list of (step, check) pairs.

    ``start`` evaluates checks from the top until one has content; ``dismiss``
    resumes right after the step being shown. Once the last check has been
    passed the sequencer is complete and stays that way.
    """

    def __init__(self, checks: list[tuple[SequencerStep, Check]]):
        self._checks = checks
        self._position = -1
        self._current: NotificationCheckResult | None = None
        self._started = False
        self._completed = False

    @property
    def current(self) -> NotificationCheckResult | None:
        return self._current

    @property
    def completed(self) -> bool:
        return self._completed

    def state(self) -> NotificationSequenceState:
        return NotificationSequenceState(current=self._current, completed=self._completed)

    def start(self) -> NotificationSequenceState:
        """Run the chain from the top. Later calls return the current state."""
        if self._started:
            return self.state()
        self._started = True
        return self._run_from(0)

    def dismiss(self) -> NotificationSequenceState:
        """Close the step being shown and evaluate the following ones."""
        if not self._started or self._completed:
            raise StateError("No notification step is being shown")
        return self._run_from(self._position + 1)

    def halt(self) -> NotificationSequenceState:
        """End the chain without evaluating the remaining steps."""
        if not self._started:
            raise StateError("Notification sequence has not started")
        self._finish()
        return self.state()

    def _run_from(self, index: int) -> NotificationSequenceState:
        for position in range(index, len(self._checks)):
            step, check = self._checks[position]
            result = check()
            if result.has_content:
                self._position = position
                self._current = result
                logger.info("notification_step_shown", step=step.value)
                return self.state()
            logger.debug("notification_step_skipped", step=step.value)
        self._finish()
        return self.state()

    def _finish(self) -> None:
        self._position = len(self._checks)
        self._current = None
        if not self._completed:
            self._completed = True
            logger.info("notification_sequence_completed")


def is_birthday(patient: Patient, today: date) -> bool:
    """Birth month/day equals today's; expects ``YYYY-MM-DD``."""
    if not patient.date_of_birth:
        return False
    parts = patient.date_of_birth.split("-")
    if len(parts) != 3:
        return False
    return int(parts[1]) == today.month and int(parts[2]) == today.day


class NotificationService:
    """Builds the login checks from live data and owns the current sequence."""

    def __init__(
        self,
        clock: Clock,
        appointments: AppointmentService,
        patients: PatientRepository,
        accounts: AccountRepository,
        notification_log: NotificationLog,
    ):
        self.clock = clock
        self.appointments = appointments
        self.patients = patients
        self.accounts = accounts
        self.notification_log = notification_log
        self.sequencer: NotificationSequencer | None = None

    # Checks

    def check_onboarding(self) -> NotificationCheckResult:
        account = self.accounts.get()
        tasks = OnboardingTasks(
            password_changed=account.password_changed,
            profile_image_set=bool(account.profile_image),
        )
        return NotificationCheckResult(
            step=SequencerStep.ONBOARDING,
            has_content=not (tasks.password_changed and tasks.profile_image_set),
            onboarding=tasks,
        )

    def check_birthdays(self) -> NotificationCheckResult:
        today = self.clock.now().date()
        patients = [p for p in self.patients.list_active() if is_birthday(p, today)]
        return NotificationCheckResult(
            step=SequencerStep.BIRTHDAYS,
            has_content=bool(patients),
            patients=patients,
        )

    def pending_reminders(self) -> list[Appointment]:
        tomorrow = tomorrow_string(self.clock)
        return [a for a in self.appointments.scheduled_on(tomorrow) if not a.reminder_sent]

    def check_reminders(self) -> NotificationCheckResult:
        pending = self.pending_reminders()
        return NotificationCheckResult(
            step=SequencerStep.REMINDERS,
            has_content=bool(pending),
            appointments=pending,
        )

    def check_today_agenda(self) -> NotificationCheckResult:
        today = self.appointments.scheduled_on(today_string(self.clock))
        return NotificationCheckResult(
            step=SequencerStep.TODAY_AGENDA,
            has_content=bool(today),
            appointments=today,
        )

    def build_checks(self) -> list[tuple[SequencerStep, Check]]:
        return [
            (SequencerStep.ONBOARDING, self.check_onboarding),
            (SequencerStep.BIRTHDAYS, self.check_birthdays),
            (SequencerStep.REMINDERS, self.check_reminders),
            (SequencerStep.TODAY_AGENDA, self.check_today_agenda),
        ]

    # Sequence

    def on_login(self) -> NotificationSequenceState:
        """Start a fresh sequence for a new login."""
        self.sequencer = NotificationSequencer(self.build_checks())
        return self.sequencer.start()

    def _require_sequencer(self) -> NotificationSequencer:
        if self.sequencer is None:
            raise StateError("No login sequence in progress")
        return self.sequencer

    def current_state(self) -> NotificationSequenceState:
        """What is being shown now; never re-runs the checks."""
        return self._require_sequencer().state()

    def dismiss(self) -> NotificationSequenceState:
        return self._require_sequencer().dismiss()

    def begin_setup(self) -> NotificationSequenceState:
        """Leave onboarding for the setup screen; the chain ends for this login."""
        sequencer = self._require_sequencer()
        current = sequencer.current
        if current is None or current.step != SequencerStep.ONBOARDING:
            raise StateError("Onboarding is not being shown")
        return sequencer.halt()

    def mark_reminder_sent(self, appointment_id: str) -> NotificationSequenceState:
        """
        Flag a reminder as sent while the reminder step is shown.

        Sets ``reminder_sent`` on the appointment, logs the notification and
        drops the appointment from the list being shown. If the log write
        fails the flag is put back and the error propagates.

        Raises:
            StateError: If the reminder step is not being shown
            ValidationError: If the appointment is not in the shown list
        """
        sequencer = self._require_sequencer()
        current = sequencer.current
        if current is None or current.step != SequencerStep.REMINDERS:
            raise StateError("Reminder check is not being shown")
        if appointment_id not in {a.id for a in current.appointments}:
            raise ValidationError("Appointment is not in the reminder list")

        before = self.appointments.get_appointment(appointment_id)
        entry = NotificationLogEntry(
            date=self.clock.now(),
            patient_name=before.patient_name,
            type="sms",
            status="sent",
            details="Enviado via Verificação Diária.",
        )
        self.appointments.mark_reminder_sent(appointment_id)
        try:
            self.notification_log.append(entry)
        except Exception as e:
            self.appointments.restore(before)
            logger.error("reminder_log_failed", appointment_id=appointment_id, error=str(e))
            raise

        current.appointments = [a for a in current.appointments if a.id != appointment_id]
        return sequencer.state()
