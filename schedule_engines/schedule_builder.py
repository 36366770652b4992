"""
Module: schedule_engines.schedule_builder
Responsibility:
    Lay out every phase and activity of a new project: scale the SAM
    template, date PREPARE backward from the kickoff and CONNECT, REALIZE
    and RUN forward from it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Orchestrates schedule_engines.template and schedule_engines.working_days.

Invariants enforced:
    - PREPARE's last dated activity ends on ``kickoff - 1 day`` whatever
      weekday that is; earlier PREPARE activities chain backward from it.
    - The backward pass only fills a ``code -> (start, end)`` lookup;
      emission in template order is a separate forward step.
    - Forward activities are contiguous: each starts the calendar day after
      the previous one ends, and ends where its working-day count runs out.
    - Milestones (duration 0) get no dates and never move either cursor.
    - Every emitted activity is PENDIENTE with progress 0.

Failure modes:
    - InvalidPhaseDurationError propagated from the scaler, before any
      date is computed.
    - InvalidDateError for a kickoff that is not a calendar date.

Usage:
    from datetime import date
    from schedule_engines.holidays import get_holidays_for_years, holiday_window_years
    from schedule_engines.schedule_builder import build_schedule

    kickoff = date(2025, 6, 2)
    holidays = get_holidays_for_years(holiday_window_years(kickoff))
    phases = build_schedule(kickoff, {"prepare": 6, "connect": 14, "realize": 20, "run": 15}, holidays)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date

from schedule_engines.template import SAM_TEMPLATE, scale_template
from schedule_engines.tracer import traced_engine
from schedule_engines.working_days import (
    HolidayInput,
    calculate_end_date,
    calculate_start_date,
    holiday_dates,
)
from schedule_kernel.domain.dates import ONE_DAY, to_calendar_date
from schedule_kernel.domain.values import (
    Activity,
    ActivityStatus,
    ActivityTemplate,
    Phase,
    PhaseDurations,
    PhaseTemplate,
    PhaseType,
)
from schedule_kernel.logging_config import get_logger

logger = get_logger("engines.schedule_builder")

DateSpan = tuple[date, date]


def plan_backward_pass(
    activities: Sequence[ActivityTemplate],
    kickoff_date: date,
    holidays: HolidayInput | None = None,
) -> dict[str, DateSpan]:
    """
    Date pre-kickoff activities backward from the day before kickoff.

    Returns a ``code -> (start, end)`` lookup for every positive-duration
    activity; milestones are absent from it.
    """
    lookup = holiday_dates(holidays)
    anchor = kickoff_date - ONE_DAY
    spans: dict[str, DateSpan] = {}
    for activity in reversed(activities):
        if activity.default_duration <= 0:
            continue
        end = anchor
        start = calculate_start_date(end, activity.default_duration, lookup)
        spans[activity.code] = (start, end)
        anchor = start - ONE_DAY
    return spans


def plan_forward_pass(
    phases: Sequence[PhaseTemplate],
    kickoff_date: date,
    holidays: HolidayInput | None = None,
) -> dict[str, DateSpan]:
    """
    Date post-kickoff activities forward from the kickoff, across phases.

    Returns a ``code -> (start, end)`` lookup; milestones are absent from it.
    """
    lookup = holiday_dates(holidays)
    cursor = kickoff_date
    spans: dict[str, DateSpan] = {}
    for phase in phases:
        for activity in phase.activities:
            if activity.default_duration <= 0:
                continue
            start = cursor
            end = calculate_end_date(start, activity.default_duration, lookup)
            spans[activity.code] = (start, end)
            cursor = end + ONE_DAY
    return spans


def _emit_phase(phase: PhaseTemplate, spans: Mapping[str, DateSpan]) -> Phase:
    activities = []
    for template in phase.activities:
        span = spans.get(template.code) if template.default_duration > 0 else None
        activities.append(
            Activity(
                code=template.code,
                name=template.name,
                order=template.order,
                duration_days=template.default_duration,
                start_date=span[0] if span else None,
                end_date=span[1] if span else None,
                status=ActivityStatus.PENDIENTE,
                progress=0,
                participation_type=template.participation_type,
            )
        )
    return Phase(type=phase.type, name=phase.name, order=phase.order, activities=tuple(activities))


@traced_engine(
    "schedule_builder",
    "1.0",
    fingerprint_fields=("kickoff_date", "phase_durations", "holidays"),
)
def build_schedule(
    kickoff_date: date,
    phase_durations: PhaseDurations | Mapping[str, object],
    holidays: HolidayInput | None = None,
    template: Sequence[PhaseTemplate] = SAM_TEMPLATE,
) -> tuple[Phase, ...]:
    """
    Build the complete dated schedule for a project.

    Preconditions:
        ``holidays`` should cover kickoff year -1..+1 (see
        ``holiday_window_years``); missing years simply contribute none.

    Postconditions:
        Phases are returned in template order with activities in template
        order; only the date computation for PREPARE walks backward.
    """
    kickoff = to_calendar_date(kickoff_date)
    lookup = holiday_dates(holidays)

    scaled = scale_template(template, phase_durations)
    prepare = [p for p in scaled if p.type == PhaseType.PREPARE]
    forward = [p for p in scaled if p.type != PhaseType.PREPARE]

    logger.info(
        "schedule_build_started",
        extra={
            "kickoff_date": kickoff.isoformat(),
            "phase_count": len(scaled),
            "holiday_count": len(lookup),
        },
    )

    spans: dict[str, DateSpan] = {}
    for phase in prepare:
        spans.update(plan_backward_pass(phase.activities, kickoff, lookup))
    spans.update(plan_forward_pass(forward, kickoff, lookup))

    phases = tuple(_emit_phase(phase, spans) for phase in scaled)

    logger.info(
        "schedule_build_completed",
        extra={
            "kickoff_date": kickoff.isoformat(),
            "activity_count": sum(len(p.activities) for p in phases),
            "dated_activity_count": len(spans),
        },
    )
    return phases
