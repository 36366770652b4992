"""
Module: schedule_engines.working_days
Responsibility:
    Working-day arithmetic over timezone-naive calendar dates: end date from
    a start and a duration, start date from an end and a duration, shifting
    by N working days, counting, and per-day calendar classification.
    A day is *working* iff it is not Saturday, not Sunday and not a holiday.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import schedule_kernel/domain.

Invariants enforced:
    - Holiday lookup compares calendar days only; datetimes are reduced to
      their business-timezone date before comparison.
    - A holiday falling on a weekend is skipped once, not twice.
    - For a working ``start`` and any ``d >= 1``:
      ``calculate_start_date(calculate_end_date(start, d), d) == start``.

Failure modes:
    - InvalidInputError for durations below 1 (milestones never reach this
      module) and for negative shift counts.
    - InvalidDateError for holiday entries that cannot become dates.

Usage:
    from datetime import date
    from schedule_engines.working_days import calculate_end_date

    calculate_end_date(date(2025, 6, 2), 5, holidays=())  # date(2025, 6, 6)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from schedule_kernel.domain.dates import ONE_DAY, to_calendar_date
from schedule_kernel.domain.values import Holiday
from schedule_kernel.exceptions import InvalidInputError

HolidayInput = Iterable[Holiday | date | datetime | str]

_SATURDAY = 5


@dataclass(frozen=True, slots=True)
class CalendarDay:
    """One day of a calendar view, classified."""

    date: date
    is_working: bool
    is_weekend: bool
    is_holiday: bool
    holiday_name: str | None = None


def _as_date(entry: Holiday | date | datetime | str) -> date:
    if isinstance(entry, Holiday):
        return entry.date
    return to_calendar_date(entry)


def holiday_dates(holidays: HolidayInput | None) -> frozenset[date]:
    """Normalize any holiday collection to a frozenset of calendar dates."""
    if holidays is None:
        return frozenset()
    if isinstance(holidays, frozenset) and all(
        type(h) is date for h in holidays
    ):
        return holidays
    return frozenset(_as_date(h) for h in holidays)


def holiday_names(holidays: HolidayInput | None) -> dict[date, str]:
    """Map each holiday date to its display name (first name wins)."""
    names: dict[date, str] = {}
    for h in holidays or ():
        if isinstance(h, Holiday):
            names.setdefault(h.date, h.name)
        else:
            names.setdefault(_as_date(h), "")
    return names


def is_weekend(day: date) -> bool:
    return day.weekday() >= _SATURDAY


def is_working_day(day: date, holidays: HolidayInput | None = None) -> bool:
    """True if ``day`` is neither a weekend day nor a holiday."""
    lookup = holiday_dates(holidays)
    return not is_weekend(day) and day not in lookup


def _is_working(day: date, lookup: frozenset[date]) -> bool:
    return day.weekday() < _SATURDAY and day not in lookup


def _require_count(value: int, field: str, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise InvalidInputError(
            f"{field} must be an integer >= {minimum}, got {value!r}", field=field
        )


def next_working_day(day: date, holidays: HolidayInput | None = None) -> date:
    """First working day strictly after ``day``."""
    lookup = holiday_dates(holidays)
    current = day + ONE_DAY
    while not _is_working(current, lookup):
        current += ONE_DAY
    return current


def previous_working_day(day: date, holidays: HolidayInput | None = None) -> date:
    """Last working day strictly before ``day``."""
    lookup = holiday_dates(holidays)
    current = day - ONE_DAY
    while not _is_working(current, lookup):
        current -= ONE_DAY
    return current


def add_working_days(day: date, count: int, holidays: HolidayInput | None = None) -> date:
    """
    Shift ``day`` forward by ``count`` working days.

    A non-working ``day`` is first rolled forward to the next working day,
    which then counts as the origin (``count == 0`` returns it).
    """
    _require_count(count, "count", 0)
    lookup = holiday_dates(holidays)
    current = day
    while not _is_working(current, lookup):
        current += ONE_DAY

    added = 0
    while added < count:
        current += ONE_DAY
        if _is_working(current, lookup):
            added += 1
    return current


def subtract_working_days(day: date, count: int, holidays: HolidayInput | None = None) -> date:
    """Mirror of ``add_working_days``: roll back to a working day, then go back ``count``."""
    _require_count(count, "count", 0)
    lookup = holiday_dates(holidays)
    current = day
    while not _is_working(current, lookup):
        current -= ONE_DAY

    subtracted = 0
    while subtracted < count:
        current -= ONE_DAY
        if _is_working(current, lookup):
            subtracted += 1
    return current


def calculate_end_date(start: date, duration: int, holidays: HolidayInput | None = None) -> date:
    """
    Last working day of a span of ``duration`` working days beginning at ``start``.

    Preconditions:
        ``duration >= 1``.  If ``start`` is not a working day, the span
        begins at the next working day.

    Postconditions:
        The returned date is a working day and exactly ``duration`` working
        days lie in the inclusive span.
    """
    _require_count(duration, "duration", 1)
    return add_working_days(start, duration - 1, holidays)


def calculate_start_date(end: date, duration: int, holidays: HolidayInput | None = None) -> date:
    """
    First working day of a span of ``duration`` working days ending at ``end``.

    If ``end`` is not a working day, the span ends at the previous working day.
    """
    _require_count(duration, "duration", 1)
    return subtract_working_days(end, duration - 1, holidays)


def count_working_days(start: date, end: date, holidays: HolidayInput | None = None) -> int:
    """Working days in the inclusive range ``start..end`` (0 when end < start)."""
    lookup = holiday_dates(holidays)
    count = 0
    current = start
    while current <= end:
        if _is_working(current, lookup):
            count += 1
        current += ONE_DAY
    return count


def days_in_range(
    start: date,
    end: date,
    holidays: HolidayInput | None = None,
) -> tuple[CalendarDay, ...]:
    """Every calendar day of ``start..end`` classified for a calendar view."""
    names = holiday_names(holidays)
    days: list[CalendarDay] = []
    current = start
    while current <= end:
        weekend = is_weekend(current)
        holiday = current in names
        days.append(
            CalendarDay(
                date=current,
                is_working=not weekend and not holiday,
                is_weekend=weekend,
                is_holiday=holiday,
                holiday_name=names.get(current) or None,
            )
        )
        current += ONE_DAY
    return tuple(days)
