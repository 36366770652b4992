"""
Module: schedule_engines.progress
Responsibility:
    Read-time progress derivations for a scheduled project: actual progress
    (share of completed activities), estimated progress (elapsed share of
    the planned calendar span), delayed-activity detection, and the
    variance classification shown on the project dashboard.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import schedule_kernel/domain.

Invariants enforced:
    - Purity: ``today`` is always an explicit argument; nothing here reads
      the clock.
    - PREPARE is pre-engagement work and is excluded from actual progress,
      weighted progress and the project end date.  Delayed-activity
      detection covers every phase.
    - Percentages round halves up and stay within 0..100.
    - Classification order: ahead, critical, behind, on track.

Failure modes:
    - InvalidInputError for negative thresholds.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum

from schedule_engines.tracer import traced_engine
from schedule_kernel.domain.values import Activity, ActivityStatus, Phase, PhaseType
from schedule_kernel.exceptions import InvalidInputError
from schedule_kernel.utils.rounding import percentage, round_half_up


class ProgressStatus(str, Enum):
    """Dashboard trend classification, best to worst."""

    AHEAD = "ahead"
    ON_TRACK = "on_track"
    BEHIND = "behind"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """0 for AHEAD up to 3 for CRITICAL."""
        return _STATUS_RANK[self]


_STATUS_RANK: dict[ProgressStatus, int] = {
    ProgressStatus.AHEAD: 0,
    ProgressStatus.ON_TRACK: 1,
    ProgressStatus.BEHIND: 2,
    ProgressStatus.CRITICAL: 3,
}


@dataclass(frozen=True)
class VarianceThresholds:
    """
    Cutoffs for the variance classification, in percentage points.

    Guarantees:
        - All values are non-negative.
    """

    tolerance: int = 5
    critical_gap: int = 20
    critical_delayed_activities: int = 3

    def __post_init__(self) -> None:
        for name in ("tolerance", "critical_gap", "critical_delayed_activities"):
            if getattr(self, name) < 0:
                raise InvalidInputError(f"{name} cannot be negative", field=name)


DEFAULT_THRESHOLDS = VarianceThresholds()


@dataclass(frozen=True)
class ProgressVariance:
    """Outcome of comparing actual against estimated progress."""

    variance: int
    status: ProgressStatus
    label: str
    description: str


@dataclass(frozen=True)
class ProgressSnapshot:
    """Everything the project dashboard derives on a read."""

    as_of: date
    start_date: date
    end_date: date
    actual_progress: int
    weighted_progress: int
    estimated_progress: int
    delayed_activities: int
    variance: ProgressVariance


def _project_activities(phases: Iterable[Phase]) -> list[Activity]:
    return [
        activity
        for phase in phases
        if phase.type != PhaseType.PREPARE
        for activity in phase.activities
    ]


def calculate_actual_progress(phases: Sequence[Phase]) -> int:
    """Share of completed activities outside PREPARE, 0..100 (0 if none)."""
    activities = _project_activities(phases)
    completed = sum(1 for a in activities if a.status == ActivityStatus.COMPLETADO)
    return percentage(completed, len(activities))


def calculate_weighted_progress(phases: Sequence[Phase]) -> int:
    """Mean of per-activity ``progress`` outside PREPARE (0 if none)."""
    activities = _project_activities(phases)
    if not activities:
        return 0
    return round_half_up(sum(a.progress for a in activities), len(activities))


def get_project_end_date(phases: Sequence[Phase], fallback_start: date) -> date:
    """
    Latest ``end_date`` among activities outside PREPARE.

    Falls back to ``fallback_start`` when no such activity is dated.
    """
    ends = [a.end_date for a in _project_activities(phases) if a.end_date is not None]
    return max(ends) if ends else fallback_start


def calculate_estimated_progress(
    start_date: date | None,
    end_date: date | None,
    today: date,
) -> int:
    """
    Elapsed share of the planned span ``start_date..end_date`` as of ``today``.

    0 when either date is missing or the project has not started, 100 once
    ``today`` is past the end, 0 for an empty or inverted span.
    """
    if start_date is None or end_date is None:
        return 0
    if today < start_date:
        return 0
    if today > end_date:
        return 100
    total_days = (end_date - start_date).days
    if total_days <= 0:
        return 0
    elapsed_days = (today - start_date).days
    return max(0, min(100, percentage(elapsed_days, total_days)))


def is_activity_delayed(activity: Activity, today: date) -> bool:
    """Dated, past its end, and not completed."""
    return (
        activity.end_date is not None
        and activity.end_date < today
        and activity.status != ActivityStatus.COMPLETADO
    )


def calculate_delayed_activities(phases: Sequence[Phase], today: date) -> int:
    """Count of delayed activities across all phases."""
    return sum(
        1
        for phase in phases
        for activity in phase.activities
        if is_activity_delayed(activity, today)
    )


@traced_engine(
    "progress_variance",
    "1.0",
    fingerprint_fields=("estimated", "actual", "delayed_count"),
)
def calculate_progress_variance(
    estimated: int,
    actual: int,
    delayed_count: int = 0,
    thresholds: VarianceThresholds = DEFAULT_THRESHOLDS,
) -> ProgressVariance:
    """
    Classify actual against estimated progress.

    Evaluated in order: AHEAD when actual leads by more than the tolerance;
    CRITICAL when enough activities are delayed or the lag exceeds the
    critical gap; BEHIND when the lag exceeds the tolerance; else ON_TRACK.
    """
    variance = actual - estimated
    gap = abs(variance)

    if variance > thresholds.tolerance:
        return ProgressVariance(
            variance=variance,
            status=ProgressStatus.AHEAD,
            label=f"Adelantado {gap}%",
            description=f"El proyecto está {gap}% por encima de lo estimado",
        )

    if delayed_count >= thresholds.critical_delayed_activities or -variance > thresholds.critical_gap:
        lag = max(0, -variance)
        label = f"Crítico {lag}%"
        if lag <= thresholds.critical_gap:
            # only the delayed count makes it critical
            label = f"Crítico {lag}% ({delayed_count} atrasadas)"
        return ProgressVariance(
            variance=variance,
            status=ProgressStatus.CRITICAL,
            label=label,
            description=(
                f"El proyecto está {lag}% por debajo de lo estimado "
                f"con {delayed_count} actividades atrasadas"
            ),
        )

    if -variance > thresholds.tolerance:
        return ProgressVariance(
            variance=variance,
            status=ProgressStatus.BEHIND,
            label=f"Atrasado {gap}%",
            description=f"El proyecto está {gap}% por debajo de lo estimado",
        )

    return ProgressVariance(
        variance=variance,
        status=ProgressStatus.ON_TRACK,
        label="En linea",
        description="El proyecto avanza segun lo planificado",
    )


def summarize_progress(
    phases: Sequence[Phase],
    kickoff_date: date,
    today: date,
    thresholds: VarianceThresholds = DEFAULT_THRESHOLDS,
) -> ProgressSnapshot:
    """Derive the full dashboard snapshot for one project read."""
    end_date = get_project_end_date(phases, kickoff_date)
    actual = calculate_actual_progress(phases)
    estimated = calculate_estimated_progress(kickoff_date, end_date, today)
    delayed = calculate_delayed_activities(phases, today)
    return ProgressSnapshot(
        as_of=today,
        start_date=kickoff_date,
        end_date=end_date,
        actual_progress=actual,
        weighted_progress=calculate_weighted_progress(phases),
        estimated_progress=estimated,
        delayed_activities=delayed,
        variance=calculate_progress_variance(estimated, actual, delayed, thresholds),
    )
