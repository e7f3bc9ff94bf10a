"""Availability engine and conflict resolver.

Both are pure functions of an appointment snapshot passed in by the caller;
nothing here reads or writes the store.
"""

import calendar
from collections.abc import Iterable
from datetime import date

from consultorio.config import Settings
from consultorio.core.clock import Clock, minutes_to_time, time_to_minutes, today_string
from consultorio.core.holidays import HolidayCalendar
from consultorio.schemas.appointments import Appointment, DayAvailability


def generate_daily_time_slots(
    interval_minutes: int,
    start: str = "08:00",
    end: str = "20:00",
) -> list[str]:
    """
    List slot start times of a working day.

    Args:
        interval_minutes: Slot granularity
        start: First slot start, ``HH:MM``
        end: Exclusive end of the working window, ``HH:MM``

    Returns:
        Slot start times in ascending order
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    first = time_to_minutes(start)
    last = time_to_minutes(end)
    return [minutes_to_time(m) for m in range(first, last, interval_minutes) if m + interval_minutes <= last]


def has_conflict(
    appointments: Iterable[Appointment],
    date: str,
    time: str,
    exclude_appointment_id: str | None = None,
) -> bool:
    """True iff a scheduled appointment other than the excluded one holds (date, time)."""
    return any(
        app.is_scheduled and app.date == date and app.time == time and app.id != exclude_appointment_id
        for app in appointments
    )


def scheduled_on(appointments: Iterable[Appointment], day: str) -> list[Appointment]:
    return [app for app in appointments if app.date == day and app.is_scheduled]


class AvailabilityEngine:
    """Daily capacity from the configured working window."""

    def __init__(self, settings: Settings, clock: Clock, holidays: HolidayCalendar):
        self.settings = settings
        self.clock = clock
        self.holidays = holidays
        self.daily_slots = generate_daily_time_slots(
            settings.slot_interval_minutes,
            settings.workday_start,
            settings.workday_end,
        )

    @property
    def total_capacity(self) -> int:
        return len(self.daily_slots)

    def day_availability(self, day: str, appointments: Iterable[Appointment]) -> DayAvailability:
        """
        Summarize a day's capacity.

        ``is_full`` uses the overbooking multiplier, so a day saturates only
        once bookings exceed nominal capacity by that factor.
        """
        taken_count = len(scheduled_on(appointments, day))
        total = self.total_capacity
        holiday_name = self.holidays.holiday_name(day)
        return DayAvailability(
            date=day,
            is_past=day < today_string(self.clock),
            is_holiday=holiday_name is not None,
            holiday_name=holiday_name,
            is_full=taken_count >= total * self.settings.overbooking_multiplier,
            available_count=max(0, total - taken_count),
            taken_count=taken_count,
            total_capacity=total,
        )

    def month_availability(
        self,
        year: int,
        month: int,
        appointments: Iterable[Appointment],
    ) -> list[DayAvailability]:
        """Availability of every day in a month, as the booking calendar shows it."""
        snapshot = list(appointments)
        _, days_in_month = calendar.monthrange(year, month)
        return [
            self.day_availability(date(year, month, day).isoformat(), snapshot)
            for day in range(1, days_in_month + 1)
        ]

    def free_slots(self, day: str, appointments: Iterable[Appointment]) -> list[str]:
        """Working-window slots on ``day`` not held by a scheduled appointment."""
        taken = {app.time for app in scheduled_on(appointments, day)}
        return [slot for slot in self.daily_slots if slot not in taken]
