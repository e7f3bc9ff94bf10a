"""Brazilian national holiday calendar.

Pure lookup: given an ISO date, answer the holiday's name or ``None``.
Movable feasts are derived from Western Easter.
"""

from datetime import date, timedelta

from dateutil.easter import easter

FIXED_HOLIDAYS: dict[str, str] = {
    "01-01": "Confraternização Universal",
    "04-21": "Tiradentes",
    "05-01": "Dia do Trabalho",
    "09-07": "Independência do Brasil",
    "10-12": "Nossa Senhora Aparecida",
    "11-02": "Finados",
    "11-15": "Proclamação da República",
    "11-20": "Dia da Consciência Negra",
    "12-25": "Natal",
}

# Offsets in days relative to Easter Sunday
MOVABLE_HOLIDAYS: dict[int, str] = {
    -48: "Carnaval (segunda-feira)",
    -47: "Carnaval (terça-feira)",
    -2: "Sexta-feira Santa",
    60: "Corpus Christi",
}


def movable_holidays(year: int) -> dict[str, str]:
    """Easter-relative holidays of a year keyed by ISO date."""
    easter_sunday = easter(year)
    return {
        (easter_sunday + timedelta(days=offset)).isoformat(): name
        for offset, name in MOVABLE_HOLIDAYS.items()
    }


class HolidayCalendar:
    """Calendar oracle with optional extra blocked dates."""

    def __init__(self, extra_holidays: list[str] | None = None):
        self.extra_holidays = set(extra_holidays or [])
        self._movable_cache: dict[int, dict[str, str]] = {}

    def holiday_name(self, day: str) -> str | None:
        """Return the holiday's name for an ISO date, or None."""
        parsed = date.fromisoformat(day)
        fixed = FIXED_HOLIDAYS.get(day[5:])
        if fixed:
            return fixed
        if parsed.year not in self._movable_cache:
            self._movable_cache[parsed.year] = movable_holidays(parsed.year)
        movable = self._movable_cache[parsed.year].get(day)
        if movable:
            return movable
        if day in self.extra_holidays:
            return "Feriado"
        return None

    def is_holiday(self, day: str) -> bool:
        return self.holiday_name(day) is not None
