"""
Module: schedule_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for higher layers (schedule_kernel.services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import schedule_kernel/domain (and sibling engine modules).
    MUST NOT import schedule_kernel.services, models or db.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      "Today" is always passed in as an explicit parameter; services take
      it from an injected Clock.
    - Dates are timezone-naive calendar dates end to end.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - InvalidInputError (and subclasses) on malformed input, raised before
      any partial result exists.
    - ConsistencyViolationError if template scaling cannot reconcile.

Audit relevance:
    Top-level engine invocations are traced via the ``@traced_engine``
    decorator (see ``schedule_engines.tracer``), emitting
    SCHEDULE_ENGINE_TRACE log records that include engine name, version,
    input fingerprint, and duration.

Usage:
    from schedule_engines import build_schedule, summarize_progress
    from schedule_engines import get_holidays_for_years, holiday_window_years
"""

from schedule_kernel.logging_config import get_logger

logger = get_logger("engines")

from schedule_engines.hierarchy import (
    DateSummary,
    activity_level,
    get_sub_items,
    has_sub_items,
    item_date_range,
    parent_code,
    phase_date_summary,
)
from schedule_engines.holidays import (
    easter_sunday,
    get_holidays_for_years,
    get_peru_holidays,
    holiday_window_years,
)
from schedule_engines.progress import (
    DEFAULT_THRESHOLDS,
    ProgressSnapshot,
    ProgressStatus,
    ProgressVariance,
    VarianceThresholds,
    calculate_actual_progress,
    calculate_delayed_activities,
    calculate_estimated_progress,
    calculate_progress_variance,
    calculate_weighted_progress,
    get_project_end_date,
    is_activity_delayed,
    summarize_progress,
)
from schedule_engines.recalculation import recalculate_dates, total_pending_impact
from schedule_engines.schedule_builder import (
    build_schedule,
    plan_backward_pass,
    plan_forward_pass,
)
from schedule_engines.template import (
    SAM_TEMPLATE,
    default_phase_durations,
    scale_phase_activities,
    scale_template,
    total_template_duration,
)
from schedule_engines.tracer import traced_engine
from schedule_engines.working_days import (
    CalendarDay,
    add_working_days,
    calculate_end_date,
    calculate_start_date,
    count_working_days,
    days_in_range,
    holiday_dates,
    is_working_day,
    next_working_day,
    previous_working_day,
    subtract_working_days,
)

__all__ = [
    # Holidays
    "easter_sunday",
    "get_holidays_for_years",
    "get_peru_holidays",
    "holiday_window_years",
    # Working days
    "CalendarDay",
    "add_working_days",
    "calculate_end_date",
    "calculate_start_date",
    "count_working_days",
    "days_in_range",
    "holiday_dates",
    "is_working_day",
    "next_working_day",
    "previous_working_day",
    "subtract_working_days",
    # Template
    "SAM_TEMPLATE",
    "default_phase_durations",
    "scale_phase_activities",
    "scale_template",
    "total_template_duration",
    # Schedule builder
    "build_schedule",
    "plan_backward_pass",
    "plan_forward_pass",
    # Progress
    "DEFAULT_THRESHOLDS",
    "ProgressSnapshot",
    "ProgressStatus",
    "ProgressVariance",
    "VarianceThresholds",
    "calculate_actual_progress",
    "calculate_delayed_activities",
    "calculate_estimated_progress",
    "calculate_progress_variance",
    "calculate_weighted_progress",
    "get_project_end_date",
    "is_activity_delayed",
    "summarize_progress",
    # Recalculation
    "recalculate_dates",
    "total_pending_impact",
    # Hierarchy
    "DateSummary",
    "activity_level",
    "get_sub_items",
    "has_sub_items",
    "item_date_range",
    "parent_code",
    "phase_date_summary",
    # Tracing
    "traced_engine",
]
