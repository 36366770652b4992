"""
Property-based tests for the scheduling engines.

Properties checked:
- End/start date round trip from any working start
- Exact per-phase totals after scaling
- Scaled durations never invert the order of the defaults
- PREPARE anchored on kickoff - 1 day
- Forward contiguity and duration coverage
- Actual progress monotone in completions
- Recalculation keeps pending activities ordered and contiguous,
  and leaves completed ones untouched
"""

from dataclasses import replace
from datetime import date, timedelta

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from schedule_engines.holidays import get_holidays_for_years, holiday_window_years
from schedule_engines.progress import calculate_actual_progress
from schedule_engines.recalculation import recalculate_dates
from schedule_engines.schedule_builder import build_schedule
from schedule_engines.template import SAM_TEMPLATE, scale_phase_activities, scale_template
from schedule_engines.working_days import (
    calculate_end_date,
    calculate_start_date,
    count_working_days,
    holiday_dates,
    is_working_day,
    next_working_day,
)
from schedule_kernel.domain.values import (
    ActivityStatus,
    ActivityTemplate,
    ParticipationType,
    PhaseDurations,
    PhaseTemplate,
    PhaseType,
)

HOLIDAYS = holiday_dates(get_holidays_for_years(range(2023, 2029)))

calendar_days = st.dates(min_value=date(2024, 1, 1), max_value=date(2027, 12, 31))
durations = st.integers(min_value=1, max_value=60)
phase_durations = st.builds(
    PhaseDurations,
    prepare=st.integers(min_value=1, max_value=30),
    connect=st.integers(min_value=1, max_value=40),
    realize=st.integers(min_value=1, max_value=60),
    run=st.integers(min_value=1, max_value=40),
)

SETTINGS = settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])


def _dated(phases, *, forward_only=False):
    return [
        a
        for p in phases
        if not (forward_only and p.type == PhaseType.PREPARE)
        for a in p.activities
        if a.start_date is not None
    ]


@SETTINGS
@given(start=calendar_days, duration=durations)
def test_end_start_round_trip(start, duration):
    if not is_working_day(start, HOLIDAYS):
        start = next_working_day(start, HOLIDAYS)
    end = calculate_end_date(start, duration, HOLIDAYS)
    assert is_working_day(end, HOLIDAYS)
    assert count_working_days(start, end, HOLIDAYS) == duration
    assert calculate_start_date(end, duration, HOLIDAYS) == start


@SETTINGS
@given(requested=phase_durations)
def test_scaled_totals_are_exact(requested):
    for phase in scale_template(SAM_TEMPLATE, requested):
        total = sum(a.default_duration for a in phase.activities if a.default_duration > 0)
        assert total == requested.for_phase(phase.type)


@SETTINGS
@given(
    defaults=st.lists(st.integers(min_value=0, max_value=12), min_size=1, max_size=12).filter(any),
    target=st.integers(min_value=1, max_value=80),
)
def test_scaling_keeps_default_order(defaults, target):
    phase = PhaseTemplate(
        type=PhaseType.CONNECT,
        name="Connect",
        order=2,
        activities=tuple(
            ActivityTemplate(f"2.{i}", f"Actividad {i}", i, d, ParticipationType.SEIDOR)
            for i, d in enumerate(defaults, start=1)
        ),
    )
    scaled = [a.default_duration for a in scale_phase_activities(phase, target)]

    assert sum(scaled) == target
    for i, base_a in enumerate(defaults):
        for j, base_b in enumerate(defaults):
            if base_b > 0 and base_a > base_b:
                assert scaled[i] >= scaled[j]
        if base_a == 0:
            assert scaled[i] == 0


@SETTINGS
@given(kickoff=calendar_days, requested=phase_durations)
def test_schedule_shape(kickoff, requested):
    holidays = get_holidays_for_years(holiday_window_years(kickoff))
    phases = build_schedule(kickoff, requested, holidays)

    prepare = [a for a in phases[0].activities if a.duration_days > 0]
    assert prepare[-1].end_date == kickoff - timedelta(days=1)

    forward = _dated(phases, forward_only=True)
    assert forward[0].start_date == kickoff
    for prev, nxt in zip(forward, forward[1:]):
        assert nxt.start_date == prev.end_date + timedelta(days=1)
    for activity in forward:
        assert count_working_days(activity.start_date, activity.end_date, holidays) == activity.duration_days


@SETTINGS
@given(requested=phase_durations, completions=st.lists(st.integers(min_value=0, max_value=40), max_size=40))
def test_actual_progress_monotone(requested, completions):
    phases = build_schedule(date(2025, 6, 2), requested, holidays=())
    codes = [a.code for p in phases for a in p.activities]

    previous = calculate_actual_progress(phases)
    done: set[str] = set()
    for index in completions:
        done.add(codes[index % len(codes)])
        phases = tuple(
            replace(
                p,
                activities=tuple(
                    replace(a, status=ActivityStatus.COMPLETADO) if a.code in done else a
                    for a in p.activities
                ),
            )
            for p in phases
        )
        current = calculate_actual_progress(phases)
        assert current >= previous
        previous = current


@SETTINGS
@given(
    kickoff=calendar_days,
    requested=phase_durations,
    days=st.integers(min_value=1, max_value=30),
    completed_count=st.integers(min_value=0, max_value=10),
)
def test_recalculation_preserves_order(kickoff, requested, days, completed_count):
    holidays = HOLIDAYS
    phases = build_schedule(kickoff, requested, holidays)
    completed = {a.code for a in _dated(phases)[:completed_count]}
    phases = tuple(
        replace(
            p,
            activities=tuple(
                replace(a, status=ActivityStatus.COMPLETADO, progress=100) if a.code in completed else a
                for a in p.activities
            ),
        )
        for p in phases
    )

    before = {a.code: a for a in _dated(phases)}
    after = recalculate_dates(phases, days, holidays)

    pending = sorted(
        (a for a in _dated(after) if a.code not in completed),
        key=lambda a: a.start_date,
    )
    for prev, nxt in zip(pending, pending[1:]):
        assert nxt.start_date == next_working_day(prev.end_date, holidays)
    for activity in _dated(after):
        if activity.code in completed:
            assert activity == before[activity.code]
        else:
            assert activity.start_date > before[activity.code].start_date
