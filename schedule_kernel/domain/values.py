"""
Values -- Immutable, self-validating schedule value objects.

Responsibility:
    Provides the value types every schedule computation works on:
    Holiday, PhaseDurations, the static template records (ActivityTemplate,
    PhaseTemplate) and the dated results (Activity, Phase), plus the
    BlockerPeriod consumed by date recalculation.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by the engines and the services. No outward dependencies
    except schedule_kernel.exceptions.

Invariants enforced:
    - Every date is a timezone-naive ``datetime.date`` (never a datetime).
    - PhaseDurations are positive integers (booleans rejected).
    - An Activity carries both dates iff its duration is positive, and
      ``end_date >= start_date``.
    - Activity progress lies in 0..100.

Failure modes:
    - InvalidPhaseDurationError for non-positive or non-integer durations.
    - DurationDateMismatchError when dates disagree with duration.
    - InvalidInputError for out-of-range progress or inverted date spans.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from schedule_kernel.exceptions import (
    DurationDateMismatchError,
    InvalidInputError,
    InvalidPhaseDurationError,
)


class PhaseType(str, Enum):
    """SAM methodology phases, in methodology order."""

    PREPARE = "PREPARE"
    CONNECT = "CONNECT"
    REALIZE = "REALIZE"
    RUN = "RUN"


class ActivityStatus(str, Enum):
    """Lifecycle status of a scheduled activity."""

    PENDIENTE = "PENDIENTE"
    EN_PROGRESO = "EN_PROGRESO"
    COMPLETADO = "COMPLETADO"
    BLOQUEADO = "BLOQUEADO"


class ParticipationType(str, Enum):
    """Who carries an activity (drives the Gantt colour in the UI)."""

    PREVIO_KICKOFF = "PREVIO_KICKOFF"
    CLIENTE = "CLIENTE"
    SEIDOR = "SEIDOR"
    RECUPERADOS = "RECUPERADOS"
    FIN_PROYECTO = "FIN_PROYECTO"

    @property
    def label(self) -> str:
        return _PARTICIPATION_LABELS[self]


_PARTICIPATION_LABELS: dict[ParticipationType, str] = {
    ParticipationType.PREVIO_KICKOFF: "Previo al Kick Off",
    ParticipationType.CLIENTE: "Participación activa Cliente",
    ParticipationType.SEIDOR: "Seidor",
    ParticipationType.RECUPERADOS: "Días Recuperados",
    ParticipationType.FIN_PROYECTO: "Fin del proyecto",
}


def _require_calendar_date(value: object, field_name: str) -> None:
    # datetime is a date subclass; reject it explicitly
    if isinstance(value, datetime) or not isinstance(value, date):
        raise InvalidInputError(
            f"{field_name} must be a calendar date, got {value!r}",
            field=field_name,
        )


@dataclass(frozen=True, slots=True)
class Holiday:
    """
    A non-working calendar date.

    Contract:
        Identified by ``date`` within a lookup set; ``name`` is display text.
    Guarantees:
        - ``date`` is a plain ``date`` with no time-of-day.
    """

    date: date
    name: str
    recurring: bool = False

    def __post_init__(self) -> None:
        _require_calendar_date(self.date, "date")


@dataclass(frozen=True, slots=True)
class PhaseDurations:
    """
    Requested working-day totals per SAM phase.

    Contract:
        Supplied at project creation and consumed by the template scaler;
        never stored as an entity.
    Guarantees:
        - Every field is a positive ``int`` (``bool`` is rejected).
    """

    prepare: int
    connect: int
    realize: int
    run: int

    def __post_init__(self) -> None:
        for phase_type in PhaseType:
            value = getattr(self, phase_type.value.lower())
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidPhaseDurationError(phase_type.value, value)

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> PhaseDurations:
        """Build from a mapping keyed by ``prepare``/``connect``/``realize``/``run``."""
        missing = [p.value for p in PhaseType if p.value.lower() not in values]
        if missing:
            raise InvalidPhaseDurationError(missing[0], None)
        return cls(
            prepare=values["prepare"],  # type: ignore[arg-type]
            connect=values["connect"],  # type: ignore[arg-type]
            realize=values["realize"],  # type: ignore[arg-type]
            run=values["run"],  # type: ignore[arg-type]
        )

    def for_phase(self, phase_type: PhaseType) -> int:
        """Requested total for one phase."""
        return getattr(self, phase_type.value.lower())

    def as_dict(self) -> dict[str, int]:
        return {
            "prepare": self.prepare,
            "connect": self.connect,
            "realize": self.realize,
            "run": self.run,
        }

    @property
    def total(self) -> int:
        return self.prepare + self.connect + self.realize + self.run


@dataclass(frozen=True, slots=True)
class ActivityTemplate:
    """
    Catalog entry for one activity of the SAM template.

    ``default_duration == 0`` marks a section header (milestone) that never
    receives dates.
    """

    code: str
    name: str
    order: int
    default_duration: int
    participation_type: ParticipationType

    def __post_init__(self) -> None:
        if self.default_duration < 0:
            raise InvalidInputError(
                f"Activity {self.code}: default_duration cannot be negative",
                field="default_duration",
            )

    @property
    def is_milestone(self) -> bool:
        return self.default_duration == 0


@dataclass(frozen=True, slots=True)
class PhaseTemplate:
    """Catalog entry for one SAM phase and its ordered activities."""

    type: PhaseType
    name: str
    order: int
    activities: tuple[ActivityTemplate, ...]

    @property
    def total_duration(self) -> int:
        """Sum of positive activity durations."""
        return sum(a.default_duration for a in self.activities if a.default_duration > 0)


@dataclass(frozen=True, slots=True)
class Activity:
    """
    A scheduled activity with concrete dates.

    Contract:
        Produced by the schedule builder and by date recalculation; services
        rebuild it from persisted rows.
    Guarantees:
        - ``start_date``/``end_date`` are both None iff ``duration_days == 0``.
        - ``end_date >= start_date`` when dated.
        - ``0 <= progress <= 100``.
    Non-goals:
        - Does not enforce ``progress == 100`` for COMPLETADO activities.
    """

    code: str
    name: str
    order: int
    duration_days: int
    start_date: date | None
    end_date: date | None
    status: ActivityStatus = ActivityStatus.PENDIENTE
    progress: int = 0
    participation_type: ParticipationType = ParticipationType.SEIDOR

    def __post_init__(self) -> None:
        if self.duration_days < 0:
            raise InvalidInputError(
                f"Activity {self.code}: duration_days cannot be negative",
                field="duration_days",
            )
        dated = (self.start_date is not None, self.end_date is not None)
        if self.duration_days == 0 and dated != (False, False):
            raise self._mismatch()
        if self.duration_days > 0 and dated != (True, True):
            raise self._mismatch()
        if self.start_date is not None and self.end_date is not None:
            _require_calendar_date(self.start_date, "start_date")
            _require_calendar_date(self.end_date, "end_date")
            if self.end_date < self.start_date:
                raise InvalidInputError(
                    f"Activity {self.code}: end_date {self.end_date} "
                    f"precedes start_date {self.start_date}",
                    field="end_date",
                )
        if not 0 <= self.progress <= 100:
            raise InvalidInputError(
                f"Activity {self.code}: progress must be within 0..100, got {self.progress}",
                field="progress",
            )

    def _mismatch(self) -> DurationDateMismatchError:
        return DurationDateMismatchError(
            activity_code=self.code,
            duration_days=self.duration_days,
            start_date=self.start_date.isoformat() if self.start_date else None,
            end_date=self.end_date.isoformat() if self.end_date else None,
        )

    @property
    def is_milestone(self) -> bool:
        return self.duration_days == 0

    @property
    def is_completed(self) -> bool:
        return self.status == ActivityStatus.COMPLETADO


@dataclass(frozen=True, slots=True)
class Phase:
    """A project phase with its dated activities, in methodology order."""

    type: PhaseType
    name: str
    order: int
    activities: tuple[Activity, ...]

    @property
    def dated_activities(self) -> tuple[Activity, ...]:
        return tuple(a for a in self.activities if not a.is_milestone)


@dataclass(frozen=True, slots=True)
class BlockerPeriod:
    """
    A blocking or pause period reported against a project.

    Once ``resolved`` with a positive ``impact_days`` it contributes that
    many working days to the pending schedule shift.
    """

    start_date: date
    end_date: date | None = None
    impact_days: int | None = None
    resolved: bool = False

    def __post_init__(self) -> None:
        _require_calendar_date(self.start_date, "start_date")
        if self.end_date is not None:
            _require_calendar_date(self.end_date, "end_date")
            if self.end_date < self.start_date:
                raise InvalidInputError(
                    f"Blocker end_date {self.end_date} precedes start_date {self.start_date}",
                    field="end_date",
                )

    @property
    def pending_impact(self) -> int:
        """Working days this period adds to the schedule shift."""
        if self.resolved and self.impact_days is not None and self.impact_days > 0:
            return self.impact_days
        return 0
