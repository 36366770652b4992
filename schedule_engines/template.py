"""
Module: schedule_engines.template
Responsibility:
    The SAM (Smart Agile Methodology) base template -- four phases and
    their activities with default working-day durations -- and the scaler
    that fits it to caller-requested phase totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import schedule_kernel/domain.

Invariants enforced:
    - SAM_TEMPLATE is an immutable tuple of frozen records; the scaler
      always builds new records and never mutates its input.
    - Per phase, the sum of positive scaled durations equals the requested
      total exactly (checked after reconciliation).
    - Every activity that had a positive default keeps at least one day
      unless the requested total is smaller than the activity count; the
      activities dropped then are those with the smallest defaults.
    - Within a phase, scaled durations keep the order of the defaults.
    - Zero-duration activities (section headers) pass through unchanged.
    - Code, name, order and participation type are preserved.

Failure modes:
    - InvalidPhaseDurationError for non-positive or non-integer totals.
    - ConsistencyViolationError if reconciliation cannot hit the total
      (only possible for a phase with no positive activities).

Usage:
    from schedule_engines.template import SAM_TEMPLATE, scale_template
    from schedule_kernel.domain.values import PhaseDurations

    scaled = scale_template(SAM_TEMPLATE, PhaseDurations(3, 5, 10, 3))
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace

from schedule_engines.tracer import traced_engine
from schedule_kernel.domain.values import (
    ActivityTemplate,
    ParticipationType,
    PhaseDurations,
    PhaseTemplate,
    PhaseType,
)
from schedule_kernel.exceptions import ConsistencyViolationError
from schedule_kernel.logging_config import get_logger
from schedule_kernel.utils.rounding import round_half_up

logger = get_logger("engines.template")

_P = ParticipationType


def _phase(
    phase_type: PhaseType,
    name: str,
    order: int,
    activities: Sequence[tuple[str, str, int, ParticipationType]],
) -> PhaseTemplate:
    return PhaseTemplate(
        type=phase_type,
        name=name,
        order=order,
        activities=tuple(
            ActivityTemplate(
                code=code,
                name=activity_name,
                order=index,
                default_duration=duration,
                participation_type=participation,
            )
            for index, (code, activity_name, duration, participation) in enumerate(
                activities, start=1
            )
        ),
    )


SAM_TEMPLATE: tuple[PhaseTemplate, ...] = (
    _phase(
        PhaseType.PREPARE,
        "Prepare",
        1,
        (
            ("1.1", "Aseguramiento de Ambientes, Credenciales y Requerimientos Técnicos", 3, _P.PREVIO_KICKOFF),
            ("1.1.1", "Identificación de Stakeholders y Riesgos del Proyecto", 1, _P.PREVIO_KICKOFF),
            ("1.1.2", "Preparación del KickOff", 1, _P.PREVIO_KICKOFF),
            ("1.1.3", "Presentación del KickOff", 1, _P.CLIENTE),
        ),
    ),
    _phase(
        PhaseType.CONNECT,
        "Connect",
        2,
        (
            ("2.1", "Levantamiento", 0, _P.SEIDOR),
            ("2.1.1", "Entendimiento detallado del AS IS", 2, _P.CLIENTE),
            ("2.1.2", "Generación de video detallado del proceso + Consultas", 2, _P.CLIENTE),
            ("2.2", "Diseño Funcional", 0, _P.SEIDOR),
            ("2.2.1", "Definición del TO BE", 2, _P.SEIDOR),
            ("2.2.2", "Elaboración del PDD", 3, _P.SEIDOR),
            ("2.2.3", "Reunión de revisión del PDD", 1, _P.CLIENTE),
            ("2.2.4", "Aprobación del PDD", 1, _P.CLIENTE),
            ("2.3", "Diseño Solución", 0, _P.SEIDOR),
            ("2.3.1", "Definición de pruebas integrales", 1, _P.SEIDOR),
            ("2.3.2", "Generación de Producto Backlog", 1, _P.SEIDOR),
            ("2.3.3", "Sprint Planning", 1, _P.SEIDOR),
        ),
    ),
    _phase(
        PhaseType.REALIZE,
        "Realize",
        3,
        (
            ("3", "Desarrollo", 0, _P.SEIDOR),
            ("3.1.1", "Construcción + Testing en Desarrollo", 10, _P.SEIDOR),
            ("3.1.2", "Playbacks", 2, _P.CLIENTE),
            ("3.2", "Pruebas Integrales - UAT", 0, _P.SEIDOR),
            ("3.2.1", "Pruebas UAT (atendidas y desatendidas)", 3, _P.CLIENTE),
            ("3.2.2", "Ajustes de pruebas integrales", 2, _P.SEIDOR),
            ("3.2.4", "Elaboración de Manual de Usuario", 2, _P.SEIDOR),
            ("3.2.5", "Capacitación Funcional a Usuarios", 1, _P.CLIENTE),
        ),
    ),
    _phase(
        PhaseType.RUN,
        "Run",
        4,
        (
            ("5.1", "GO LIVE", 0, _P.SEIDOR),
            ("5.1.1", "Elaboración de documentación: DSD y PDD actualizado y Documentos para pase", 2, _P.SEIDOR),
            ("5.1.2", "Pase a Producción - Fin de Proyecto", 1, _P.FIN_PROYECTO),
            ("5.2", "HyperCare - Garantía hasta 1 semana luego del GO Live", 0, _P.SEIDOR),
            ("5.2.1", "Estabilización en PRD", 5, _P.SEIDOR),
            ("5.2.2", "Marcha blanca", 5, _P.SEIDOR),
            ("5.2.3", "Entrega de Documentación", 1, _P.SEIDOR),
            ("5.2.4", "Capacitación Técnica", 1, _P.CLIENTE),
        ),
    ),
)


def default_phase_durations(
    template: Sequence[PhaseTemplate] = SAM_TEMPLATE,
) -> PhaseDurations:
    """Per-phase sums of the template's default durations."""
    totals = {p.type.value.lower(): p.total_duration for p in template}
    return PhaseDurations.from_mapping(totals)


def total_template_duration(template: Sequence[PhaseTemplate] = SAM_TEMPLATE) -> int:
    """Working days across every phase of the template."""
    return sum(p.total_duration for p in template)


def _grow_index(scaled: list[int], defaults: list[int], candidates: Sequence[int]) -> int:
    # largest scaled, then largest default, first index on ties
    return max(candidates, key=lambda i: (scaled[i], defaults[i], -i))


def _shrink_index(scaled: list[int], defaults: list[int], candidates: Sequence[int]) -> int:
    # largest scaled, then smallest default, latest index on ties
    return max(candidates, key=lambda i: (scaled[i], -defaults[i], i))


def scale_phase_activities(phase: PhaseTemplate, target: int) -> tuple[ActivityTemplate, ...]:
    """
    Fit one phase's positive durations to ``target`` working days.

    Each positive activity gets ``max(1, round_half_up(d * target / base))``.
    A shortfall is added to the largest activity.  An excess is removed one
    day at a time from the largest activity still above one day; once every
    activity is down to one day, days are taken from the activities with the
    smallest default first (latest on ties), which become dateless markers.

    An activity with a larger default never ends up shorter than one with a
    smaller default.
    """
    defaults = [a.default_duration for a in phase.activities]
    durations = list(defaults)
    positive = [i for i, d in enumerate(defaults) if d > 0]
    base_total = sum(defaults[i] for i in positive)

    if base_total > 0:
        for i in positive:
            durations[i] = max(1, round_half_up(defaults[i] * target, base_total))

        diff = target - sum(durations[i] for i in positive)
        if diff > 0:
            durations[_grow_index(durations, defaults, positive)] += diff
        while diff < 0:
            shrinkable = [i for i in positive if durations[i] > 1]
            if not shrinkable:
                shrinkable = [i for i in positive if durations[i] > 0]
            durations[_shrink_index(durations, defaults, shrinkable)] -= 1
            diff += 1

    actual = sum(d for d in durations if d > 0)
    if actual != target:
        raise ConsistencyViolationError(
            phase=phase.type.value, expected_total=target, actual_total=actual
        )

    return tuple(
        activity if activity.default_duration == durations[i]
        else replace(activity, default_duration=durations[i])
        for i, activity in enumerate(phase.activities)
    )


def _coerce_durations(requested: PhaseDurations | Mapping[str, object]) -> PhaseDurations:
    if isinstance(requested, PhaseDurations):
        return requested
    return PhaseDurations.from_mapping(requested)


@traced_engine("template_scaler", "1.0", fingerprint_fields=("requested",))
def scale_template(
    base: Sequence[PhaseTemplate],
    requested: PhaseDurations | Mapping[str, object],
) -> tuple[PhaseTemplate, ...]:
    """
    Scale every phase of ``base`` to the requested phase totals.

    Raises:
        InvalidPhaseDurationError: A requested total is not a positive integer.
        ConsistencyViolationError: A phase could not be reconciled.
    """
    durations = _coerce_durations(requested)
    scaled = tuple(
        replace(
            phase,
            activities=scale_phase_activities(phase, durations.for_phase(phase.type)),
        )
        for phase in base
    )
    logger.debug(
        "template_scaled",
        extra={"phase_durations": durations.as_dict()},
    )
    return scaled
