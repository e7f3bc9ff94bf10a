"""Tests for slot generation, day capacity and conflict detection."""

import pytest

from consultorio.config import Settings
from consultorio.core.holidays import HolidayCalendar
from consultorio.schemas.appointments import AppointmentStatus
from consultorio.services.availability_service import (
    AvailabilityEngine,
    generate_daily_time_slots,
    has_conflict,
)

TODAY = "2024-06-10"


def test_generate_default_slots():
    """Test the default working window yields half-hour slots 08:00-19:30."""
    slots = generate_daily_time_slots(30)

    assert len(slots) == 24
    assert slots[0] == "08:00"
    assert slots[1] == "08:30"
    assert slots[-1] == "19:30"


def test_generate_slots_other_interval():
    slots = generate_daily_time_slots(60, "09:00", "12:00")
    assert slots == ["09:00", "10:00", "11:00"]


def test_generate_slots_skips_partial_last_slot():
    """Test a slot that would overrun the window end is not offered."""
    assert generate_daily_time_slots(45, "08:00", "10:00") == ["08:00", "08:45"]


def test_generate_slots_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        generate_daily_time_slots(0)


def test_engine_capacity_follows_settings(clock):
    engine = AvailabilityEngine(
        Settings(SLOT_INTERVAL_MINUTES=60, WORKDAY_START="08:00", WORKDAY_END="12:00"),
        clock,
        HolidayCalendar(),
    )
    assert engine.total_capacity == 4


def test_empty_day(container):
    """Test a day without bookings is fully available."""
    availability = container.availability.day_availability("2024-06-12", [])

    assert availability.total_capacity == 24
    assert availability.available_count == 24
    assert availability.taken_count == 0
    assert availability.is_full is False
    assert availability.is_past is False
    assert availability.is_holiday is False
    assert availability.holiday_name is None


def test_overbooking_threshold(container, make_appointment):
    """Test a day is full only once bookings reach capacity times the multiplier."""
    day = "2024-06-12"
    slots = container.availability.daily_slots
    # Overbooking allows several bookings per slot; times may repeat
    appointments = [make_appointment(day, slots[i % len(slots)]) for i in range(35)]

    availability = container.availability.day_availability(day, appointments)
    assert availability.taken_count == 35
    assert availability.available_count == 0
    assert availability.is_full is False

    appointments.append(make_appointment(day, "08:00"))
    availability = container.availability.day_availability(day, appointments)
    assert availability.taken_count == 36
    assert availability.is_full is True


def test_only_scheduled_appointments_count(container, make_appointment):
    day = "2024-06-12"
    appointments = [
        make_appointment(day, "08:00"),
        make_appointment(day, "08:30", AppointmentStatus.CANCELED),
        make_appointment(day, "09:00", AppointmentStatus.COMPLETED),
        make_appointment("2024-06-13", "08:00"),
    ]

    availability = container.availability.day_availability(day, appointments)

    assert availability.taken_count == 1
    assert availability.available_count == 23


def test_past_and_today(container):
    assert container.availability.day_availability("2024-06-09", []).is_past is True
    assert container.availability.day_availability(TODAY, []).is_past is False


def test_holiday_reported(container):
    availability = container.availability.day_availability("2024-12-25", [])

    assert availability.is_holiday is True
    assert availability.holiday_name == "Natal"


def test_month_availability(container, make_appointment):
    """Test the month view covers every day and carries per-day counts."""
    appointments = [make_appointment("2024-02-14", "10:00")]

    month = container.availability.month_availability(2024, 2, appointments)

    assert len(month) == 29
    assert month[0].date == "2024-02-01"
    assert month[-1].date == "2024-02-29"
    assert month[13].taken_count == 1
    # Carnival 2024
    assert month[11].is_holiday is True
    assert month[12].is_holiday is True


def test_free_slots(container, make_appointment):
    day = "2024-06-12"
    appointments = [
        make_appointment(day, "08:00"),
        make_appointment(day, "08:30", AppointmentStatus.CANCELED),
    ]

    free = container.availability.free_slots(day, appointments)

    assert "08:00" not in free
    assert "08:30" in free
    assert len(free) == 23


def test_has_conflict(make_appointment):
    """Test conflicts consider only scheduled appointments on the same slot."""
    booked = make_appointment("2024-06-12", "10:00")
    canceled = make_appointment("2024-06-12", "11:00", AppointmentStatus.CANCELED)
    appointments = [booked, canceled]

    assert has_conflict(appointments, "2024-06-12", "10:00") is True
    assert has_conflict(appointments, "2024-06-12", "11:00") is False
    assert has_conflict(appointments, "2024-06-13", "10:00") is False
    assert has_conflict(appointments, "2024-06-12", "10:00", exclude_appointment_id=booked.id) is False
