"""
Module: schedule_engines.recalculation
Responsibility:
    Shift the pending part of a schedule forward after blocking or pause
    periods resolve with a day impact.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import schedule_kernel/domain and schedule_engines.working_days.

Invariants enforced:
    - COMPLETADO activities and dateless milestones are never moved.
    - Every other dated activity moves by exactly ``days_to_add`` working
      days: its start is shifted with ``add_working_days`` and its end is
      recomputed from the new start and its duration.
    - Shifted activities keep their relative order and contiguity (each
      one's working-day index moves by the same amount).
    - Phase and activity order in the result match the input.

Failure modes:
    - InvalidInputError when ``days_to_add`` is not a positive integer.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from schedule_engines.tracer import traced_engine
from schedule_engines.working_days import (
    HolidayInput,
    add_working_days,
    calculate_end_date,
    holiday_dates,
)
from schedule_kernel.domain.values import Activity, ActivityStatus, BlockerPeriod, Phase
from schedule_kernel.exceptions import InvalidInputError
from schedule_kernel.logging_config import get_logger

logger = get_logger("engines.recalculation")


def total_pending_impact(blockers: Iterable[BlockerPeriod]) -> int:
    """Working days owed by resolved periods with a positive impact."""
    return sum(b.pending_impact for b in blockers)


def _is_shiftable(activity: Activity) -> bool:
    return (
        activity.status != ActivityStatus.COMPLETADO
        and activity.start_date is not None
        and activity.end_date is not None
    )


@traced_engine(
    "date_recalculation",
    "1.0",
    fingerprint_fields=("phases", "days_to_add", "holidays"),
)
def recalculate_dates(
    phases: Sequence[Phase],
    days_to_add: int,
    holidays: HolidayInput | None = None,
) -> tuple[Phase, ...]:
    """
    Push every pending dated activity ``days_to_add`` working days later.

    Raises:
        InvalidInputError: ``days_to_add`` is not a positive integer.
    """
    if isinstance(days_to_add, bool) or not isinstance(days_to_add, int) or days_to_add <= 0:
        raise InvalidInputError(
            f"days_to_add must be a positive integer, got {days_to_add!r}",
            field="days_to_add",
        )
    lookup = holiday_dates(holidays)

    # (phase index, activity index) in chronological order
    pending = sorted(
        (
            (p_idx, a_idx)
            for p_idx, phase in enumerate(phases)
            for a_idx, activity in enumerate(phase.activities)
            if _is_shiftable(activity)
        ),
        key=lambda pos: (phases[pos[0]].activities[pos[1]].start_date, pos),
    )

    shifted: dict[tuple[int, int], Activity] = {}
    for p_idx, a_idx in pending:
        activity = phases[p_idx].activities[a_idx]
        new_start = add_working_days(activity.start_date, days_to_add, lookup)
        new_end = calculate_end_date(new_start, activity.duration_days, lookup)
        shifted[(p_idx, a_idx)] = replace(activity, start_date=new_start, end_date=new_end)

    logger.info(
        "schedule_dates_recalculated",
        extra={"days_to_add": days_to_add, "shifted_activity_count": len(shifted)},
    )

    return tuple(
        replace(
            phase,
            activities=tuple(
                shifted.get((p_idx, a_idx), activity)
                for a_idx, activity in enumerate(phase.activities)
            ),
        )
        for p_idx, phase in enumerate(phases)
    )
