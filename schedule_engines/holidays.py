"""
Module: schedule_engines.holidays
Responsibility:
    Built-in Peruvian national holiday calendar: the fixed-date holidays
    plus the two Easter-relative ones (Jueves Santo, Viernes Santo), for
    any Gregorian year.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import schedule_kernel/domain.

Invariants enforced:
    - Pure ``year -> tuple`` computation; every call returns a fresh tuple
      and no stored state is touched.
    - Easter is computed algorithmically (no lookup table), so any year works.
    - Results are sorted by date and contain no duplicate dates.

Failure modes:
    - InvalidInputError for years outside ``date``'s range (1..9999).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from schedule_kernel.domain.values import Holiday
from schedule_kernel.exceptions import InvalidInputError

# (month, day, name)
PERU_FIXED_HOLIDAYS: tuple[tuple[int, int, str], ...] = (
    (1, 1, "Año Nuevo"),
    (5, 1, "Día del Trabajo"),
    (6, 29, "San Pedro y San Pablo"),
    (7, 28, "Fiestas Patrias"),
    (7, 29, "Fiestas Patrias"),
    (8, 30, "Santa Rosa de Lima"),
    (10, 8, "Combate de Angamos"),
    (11, 1, "Día de Todos los Santos"),
    (12, 8, "Inmaculada Concepción"),
    (12, 9, "Batalla de Ayacucho"),
    (12, 25, "Navidad"),
)

# (days relative to Easter Sunday, name)
PERU_EASTER_HOLIDAYS: tuple[tuple[int, str], ...] = (
    (-3, "Jueves Santo"),
    (-2, "Viernes Santo"),
)


def _check_year(year: int) -> None:
    if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
        raise InvalidInputError(f"Year must be an integer in 1..9999, got {year!r}", field="year")


def easter_sunday(year: int) -> date:
    """
    Gregorian Easter Sunday (anonymous / Meeus-Jones-Butcher algorithm).

    >>> easter_sunday(2025)
    datetime.date(2025, 4, 20)
    """
    _check_year(year)
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def get_peru_holidays(year: int) -> tuple[Holiday, ...]:
    """All Peruvian national holidays for ``year``, sorted by date."""
    _check_year(year)
    by_date: dict[date, Holiday] = {}
    for month, day, name in PERU_FIXED_HOLIDAYS:
        d = date(year, month, day)
        by_date[d] = Holiday(date=d, name=name, recurring=True)

    easter = easter_sunday(year)
    for offset, name in PERU_EASTER_HOLIDAYS:
        d = easter + timedelta(days=offset)
        # Holy week never coincides with a fixed holiday, first entry wins anyway
        by_date.setdefault(d, Holiday(date=d, name=name, recurring=True))

    return tuple(by_date[d] for d in sorted(by_date))


def get_holidays_for_years(years: Iterable[int]) -> tuple[Holiday, ...]:
    """Concatenate ``get_peru_holidays`` over distinct years, in year order."""
    result: list[Holiday] = []
    for year in sorted(set(years)):
        result.extend(get_peru_holidays(year))
    return tuple(result)


def holiday_window_years(kickoff_date: date) -> tuple[int, int, int]:
    """
    Years whose holidays a schedule anchored at ``kickoff_date`` may touch.

    PREPARE's backward walk can cross into the previous year and the
    forward phases into the next one.
    """
    year = kickoff_date.year
    return (year - 1, year, year + 1)
