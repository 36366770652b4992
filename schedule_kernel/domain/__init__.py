"""
Pure domain layer.

This module contains value objects and calendar-date helpers
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.  The only time source
is the injectable Clock.
"""

from schedule_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from schedule_kernel.domain.dates import (
    BUSINESS_TIMEZONE,
    BUSINESS_TIMEZONE_NAME,
    format_date,
    spanish_day_name,
    to_calendar_date,
)
from schedule_kernel.domain.values import (
    Activity,
    ActivityStatus,
    ActivityTemplate,
    BlockerPeriod,
    Holiday,
    ParticipationType,
    Phase,
    PhaseDurations,
    PhaseTemplate,
    PhaseType,
)

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Dates
    "BUSINESS_TIMEZONE",
    "BUSINESS_TIMEZONE_NAME",
    "format_date",
    "spanish_day_name",
    "to_calendar_date",
    # Values
    "Activity",
    "ActivityStatus",
    "ActivityTemplate",
    "BlockerPeriod",
    "Holiday",
    "ParticipationType",
    "Phase",
    "PhaseDurations",
    "PhaseTemplate",
    "PhaseType",
]
