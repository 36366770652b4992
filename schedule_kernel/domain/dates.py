"""
Calendar-date boundary helpers.

Responsibility:
    Convert whatever crosses the system boundary (``date``, naive or aware
    ``datetime``, ISO strings) into a timezone-naive ``datetime.date`` and
    render calendar dates for display.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Every schedule date inside the kernel and the engines is a plain
      ``date``: no time-of-day, no tzinfo.  Comparisons and holiday lookups
      are therefore day-exact.
    - Aware datetimes are converted to the business timezone
      (America/Lima) *before* the date is taken, so a UTC timestamp at
      02:00 on the 2nd is the 1st in Lima, never the other way round.

Failure modes:
    - InvalidDateError for values that are not dates, datetimes or ISO
      date strings.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from schedule_kernel.exceptions import InvalidDateError

BUSINESS_TIMEZONE_NAME = "America/Lima"
BUSINESS_TIMEZONE = ZoneInfo(BUSINESS_TIMEZONE_NAME)

ONE_DAY = timedelta(days=1)

DISPLAY_FORMAT = "%d/%m/%Y"

# Monday first, matching date.weekday()
SPANISH_DAY_NAMES: tuple[str, ...] = (
    "lunes",
    "martes",
    "miércoles",
    "jueves",
    "viernes",
    "sábado",
    "domingo",
)


def to_calendar_date(value: date | datetime | str, tz: ZoneInfo = BUSINESS_TIMEZONE) -> date:
    """
    Normalize a boundary value to a timezone-naive calendar date.

    Preconditions:
        ``value`` is a ``date``, a ``datetime`` or an ISO-8601 string.

    Postconditions:
        Returns a ``date`` (never a ``datetime``).  Aware datetimes are
        first converted to ``tz``; naive datetimes keep their wall-clock day.

    Raises:
        InvalidDateError: If the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(tz).date()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return to_calendar_date(datetime.fromisoformat(text), tz)
        except ValueError as exc:
            raise InvalidDateError(value, reason=str(exc)) from exc
    raise InvalidDateError(value, reason=f"unsupported type {type(value).__name__}")


def format_date(value: date, fmt: str = DISPLAY_FORMAT) -> str:
    """Render a calendar date for display (dd/mm/yyyy by default)."""
    return to_calendar_date(value).strftime(fmt)


def spanish_day_name(value: date) -> str:
    """Spanish weekday name of a calendar date."""
    return SPANISH_DAY_NAMES[to_calendar_date(value).weekday()]
