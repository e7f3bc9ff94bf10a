"""Tests for the appointment lifecycle."""

import random
from decimal import Decimal

import pytest

from consultorio.core.exceptions import (
    AppException,
    ConflictError,
    NotFoundException,
    StateError,
    TemporalError,
    ValidationError,
)
from consultorio.schemas.appointments import AppointmentStatus
from consultorio.services.appointment_service import APPOINTMENTS_KEY

TODAY = "2024-06-10"


def test_create_appointment(container, patient, consultation_type):
    """Test booking snapshots patient name and consultation price."""
    appointment = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )

    assert appointment.patient_id == patient.id
    assert appointment.patient_name == "Ana Souza"
    assert appointment.price == Decimal("150.00")
    assert appointment.status == AppointmentStatus.SCHEDULED
    assert appointment.reminder_sent is False
    assert container.appointments.list_all() == [appointment]


def test_price_snapshot_survives_price_change(container, patient, consultation_type):
    appointment = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )

    container.consultation_types.update_price(consultation_type.id, Decimal("200.00"))

    stored = container.appointments.get_appointment(appointment.id)
    assert stored.price == Decimal("150.00")

    second = container.appointments.create_appointment(
        patient.id, "2024-06-12", "15:00", consultation_type.id
    )
    assert second.price == Decimal("200.00")


@pytest.mark.parametrize("missing", ["patient", "consultation_type"])
def test_create_rejects_unknown_references(container, store, patient, consultation_type, missing):
    """Test unknown patient or type is a validation error and nothing is stored."""
    patient_id = "nope" if missing == "patient" else patient.id
    type_id = "nope" if missing == "consultation_type" else consultation_type.id

    with pytest.raises(ValidationError):
        container.appointments.create_appointment(patient_id, "2024-06-12", "14:00", type_id)

    assert store.get(APPOINTMENTS_KEY) is None


def test_create_rejects_past_date(container, patient, consultation_type):
    with pytest.raises(TemporalError):
        container.appointments.create_appointment(
            patient.id, "2024-06-09", "14:00", consultation_type.id
        )


def test_create_today_compares_time_to_the_minute(container, clock, patient, consultation_type):
    """Test earlier times today are rejected while the current minute is allowed."""
    with pytest.raises(TemporalError):
        container.appointments.create_appointment(patient.id, TODAY, "08:59", consultation_type.id)

    appointment = container.appointments.create_appointment(
        patient.id, TODAY, "09:00", consultation_type.id
    )
    assert appointment.time == "09:00"


@pytest.mark.parametrize(
    ("day", "time"),
    [("2024-02-30", "10:00"), ("2024-6-12", "10:00"), ("2024-06-12", "24:00"), ("2024-06-12", "9:00")],
)
def test_create_rejects_malformed_slot(container, patient, consultation_type, day, time):
    with pytest.raises(ValidationError):
        container.appointments.create_appointment(patient.id, day, time, consultation_type.id)


def test_create_conflict(container, store, patient, other_patient, consultation_type):
    """Test a scheduled slot cannot be double-booked and the store is unchanged."""
    container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )
    before = store.get(APPOINTMENTS_KEY)

    with pytest.raises(ConflictError):
        container.appointments.create_appointment(
            other_patient.id, "2024-06-12", "14:00", consultation_type.id
        )

    assert store.get(APPOINTMENTS_KEY) == before


def test_canceled_slot_can_be_rebooked(container, patient, other_patient, consultation_type):
    first = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )
    container.appointments.mark_canceled(first.id)

    second = container.appointments.create_appointment(
        other_patient.id, "2024-06-12", "14:00", consultation_type.id
    )

    assert second.status == AppointmentStatus.SCHEDULED


def test_reschedule_keeps_type_and_price(container, patient, consultation_type):
    appointment = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )
    container.consultation_types.update_price(consultation_type.id, Decimal("180.00"))

    moved = container.appointments.reschedule_appointment(appointment.id, "2024-06-13", "09:30")

    assert moved.id == appointment.id
    assert (moved.date, moved.time) == ("2024-06-13", "09:30")
    assert moved.price == Decimal("150.00")
    assert moved.consultation_type_id == consultation_type.id
    assert len(container.appointments.list_all()) == 1


def test_reschedule_to_own_slot_is_not_a_conflict(container, patient, consultation_type):
    appointment = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )

    moved = container.appointments.reschedule_appointment(appointment.id, "2024-06-12", "14:00")

    assert moved.time == "14:00"


def test_reschedule_conflict_and_past(container, patient, other_patient, consultation_type):
    first = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )
    container.appointments.create_appointment(
        other_patient.id, "2024-06-12", "15:00", consultation_type.id
    )

    with pytest.raises(ConflictError):
        container.appointments.reschedule_appointment(first.id, "2024-06-12", "15:00")
    with pytest.raises(TemporalError):
        container.appointments.reschedule_appointment(first.id, "2024-06-01", "15:00")

    assert container.appointments.get_appointment(first.id).time == "14:00"


def test_reschedule_closed_appointment(container, patient, consultation_type):
    appointment = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )
    container.appointments.mark_canceled(appointment.id)

    with pytest.raises(StateError):
        container.appointments.reschedule_appointment(appointment.id, "2024-06-13", "14:00")


def test_status_transitions_are_one_way(container, patient, consultation_type):
    """Test completed and canceled are terminal."""
    first = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )
    second = container.appointments.create_appointment(
        patient.id, "2024-06-12", "15:00", consultation_type.id
    )

    assert container.appointments.mark_completed(first.id).status == AppointmentStatus.COMPLETED
    assert container.appointments.mark_canceled(second.id).status == AppointmentStatus.CANCELED

    with pytest.raises(StateError):
        container.appointments.mark_canceled(first.id)
    with pytest.raises(StateError):
        container.appointments.mark_completed(second.id)
    with pytest.raises(StateError):
        container.appointments.mark_canceled(second.id)


def test_unknown_appointment(container):
    with pytest.raises(NotFoundException):
        container.appointments.get_appointment("missing")
    with pytest.raises(NotFoundException):
        container.appointments.mark_canceled("missing")
    with pytest.raises(NotFoundException):
        container.appointments.reschedule_appointment("missing", "2024-06-12", "10:00")


def test_mark_reminder_sent_is_idempotent(container, patient, consultation_type):
    appointment = container.appointments.create_appointment(
        patient.id, "2024-06-11", "14:00", consultation_type.id
    )

    container.appointments.mark_reminder_sent(appointment.id)
    updated = container.appointments.mark_reminder_sent(appointment.id)

    assert updated.reminder_sent is True
    assert updated.status == AppointmentStatus.SCHEDULED


def test_restore_puts_back_previous_version(container, patient, consultation_type):
    """Test restoring a snapshot undoes a completion and keeps other appointments."""
    appointment = container.appointments.create_appointment(
        patient.id, "2024-06-11", "14:00", consultation_type.id
    )
    other = container.appointments.create_appointment(
        patient.id, "2024-06-12", "14:00", consultation_type.id
    )
    container.appointments.mark_completed(appointment.id)

    restored = container.appointments.restore(appointment)

    assert restored == appointment
    assert container.appointments.get_appointment(appointment.id).is_scheduled
    assert container.appointments.get_appointment(other.id) == other
    assert len(container.appointments.list_all()) == 2


def test_agenda_ordering(container, patient, consultation_type):
    """Test upcoming is soonest first and past is most recent first."""
    late = container.appointments.create_appointment(
        patient.id, "2024-06-14", "08:00", consultation_type.id
    )
    early = container.appointments.create_appointment(
        patient.id, "2024-06-12", "16:00", consultation_type.id
    )
    done_early = container.appointments.create_appointment(
        patient.id, "2024-06-11", "08:00", consultation_type.id
    )
    done_late = container.appointments.create_appointment(
        patient.id, "2024-06-11", "10:00", consultation_type.id
    )
    container.appointments.mark_completed(done_early.id)
    container.appointments.mark_canceled(done_late.id)

    agenda = container.appointments.agenda()

    assert [a.id for a in agenda.upcoming] == [early.id, late.id]
    assert [a.id for a in agenda.past] == [done_late.id, done_early.id]


def test_today_appointment_for(container, patient, other_patient, consultation_type):
    container.appointments.create_appointment(patient.id, "2024-06-11", "10:00", consultation_type.id)
    assert container.appointments.today_appointment_for(patient.id) is None

    today = container.appointments.create_appointment(patient.id, TODAY, "10:00", consultation_type.id)

    assert container.appointments.today_appointment_for(patient.id).id == today.id
    assert container.appointments.today_appointment_for(other_patient.id) is None

    container.appointments.mark_canceled(today.id)
    assert container.appointments.today_appointment_for(patient.id) is None


def test_random_operations_never_double_book(container, patient, other_patient, consultation_type):
    """Test no two scheduled appointments ever share a slot."""
    rng = random.Random(20240610)
    days = ["2024-06-11", "2024-06-12"]
    times = ["08:00", "08:30", "09:00"]
    patients = [patient.id, other_patient.id]

    for _ in range(200):
        appointments = container.appointments.list_all()
        scheduled = [a for a in appointments if a.is_scheduled]
        operation = rng.choice(["create", "create", "reschedule", "cancel", "complete"])
        try:
            if operation == "create" or not scheduled:
                container.appointments.create_appointment(
                    rng.choice(patients), rng.choice(days), rng.choice(times), consultation_type.id
                )
            elif operation == "reschedule":
                container.appointments.reschedule_appointment(
                    rng.choice(scheduled).id, rng.choice(days), rng.choice(times)
                )
            elif operation == "cancel":
                container.appointments.mark_canceled(rng.choice(scheduled).id)
            else:
                container.appointments.mark_completed(rng.choice(scheduled).id)
        except AppException:
            pass

        slots = [(a.date, a.time) for a in container.appointments.list_all() if a.is_scheduled]
        assert len(slots) == len(set(slots))
