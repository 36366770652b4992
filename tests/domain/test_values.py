"""Tests for the immutable schedule value objects."""

from dataclasses import FrozenInstanceError
from datetime import date, datetime

import pytest

from schedule_kernel.domain.values import (
    Activity,
    ActivityStatus,
    ActivityTemplate,
    BlockerPeriod,
    Holiday,
    ParticipationType,
    PhaseDurations,
    PhaseType,
)
from schedule_kernel.exceptions import (
    DurationDateMismatchError,
    InvalidInputError,
    InvalidPhaseDurationError,
)


class TestPhaseDurations:
    def test_valid(self):
        durations = PhaseDurations(prepare=3, connect=5, realize=10, run=3)
        assert durations.total == 21
        assert durations.for_phase(PhaseType.REALIZE) == 10
        assert durations.as_dict() == {"prepare": 3, "connect": 5, "realize": 10, "run": 3}

    @pytest.mark.parametrize("bad", [0, -1, 1.0, True, None, "5"])
    def test_invalid_value(self, bad):
        with pytest.raises(InvalidPhaseDurationError) as exc_info:
            PhaseDurations(prepare=3, connect=bad, realize=10, run=3)
        assert exc_info.value.phase == "CONNECT"
        assert exc_info.value.code == "INVALID_PHASE_DURATION"

    def test_from_mapping(self):
        durations = PhaseDurations.from_mapping({"prepare": 1, "connect": 2, "realize": 3, "run": 4})
        assert durations == PhaseDurations(1, 2, 3, 4)

    def test_from_mapping_missing_key(self):
        with pytest.raises(InvalidPhaseDurationError) as exc_info:
            PhaseDurations.from_mapping({"prepare": 1, "realize": 3, "run": 4})
        assert exc_info.value.phase == "CONNECT"
        assert exc_info.value.value is None

    def test_immutable(self):
        durations = PhaseDurations(1, 2, 3, 4)
        with pytest.raises(FrozenInstanceError):
            durations.prepare = 9


class TestActivity:
    def test_dated_activity(self):
        activity = Activity(
            code="2.2.2",
            name="Elaboración del PDD",
            order=4,
            duration_days=3,
            start_date=date(2025, 6, 2),
            end_date=date(2025, 6, 4),
        )
        assert not activity.is_milestone
        assert not activity.is_completed
        assert activity.status == ActivityStatus.PENDIENTE

    def test_milestone_without_dates(self):
        activity = Activity(code="2.1", name="Levantamiento", order=1, duration_days=0, start_date=None, end_date=None)
        assert activity.is_milestone

    def test_milestone_with_dates_rejected(self):
        with pytest.raises(DurationDateMismatchError) as exc_info:
            Activity(
                code="2.1",
                name="Levantamiento",
                order=1,
                duration_days=0,
                start_date=date(2025, 6, 2),
                end_date=date(2025, 6, 2),
            )
        assert exc_info.value.activity_code == "2.1"

    def test_dated_activity_missing_end_rejected(self):
        with pytest.raises(DurationDateMismatchError):
            Activity(code="2.1.1", name="AS IS", order=2, duration_days=2, start_date=date(2025, 6, 2), end_date=None)

    def test_inverted_dates_rejected(self):
        with pytest.raises(InvalidInputError):
            Activity(
                code="2.1.1",
                name="AS IS",
                order=2,
                duration_days=2,
                start_date=date(2025, 6, 5),
                end_date=date(2025, 6, 2),
            )

    def test_datetime_rejected(self):
        with pytest.raises(InvalidInputError):
            Activity(
                code="2.1.1",
                name="AS IS",
                order=2,
                duration_days=1,
                start_date=datetime(2025, 6, 2, 9, 0),
                end_date=date(2025, 6, 2),
            )

    @pytest.mark.parametrize("progress", [-1, 101])
    def test_progress_range(self, progress):
        with pytest.raises(InvalidInputError):
            Activity(
                code="2.1.1",
                name="AS IS",
                order=2,
                duration_days=1,
                start_date=date(2025, 6, 2),
                end_date=date(2025, 6, 2),
                progress=progress,
            )


class TestTemplatesAndHolidays:
    def test_negative_template_duration_rejected(self):
        with pytest.raises(InvalidInputError):
            ActivityTemplate(
                code="9.9",
                name="X",
                order=1,
                default_duration=-1,
                participation_type=ParticipationType.SEIDOR,
            )

    def test_participation_labels(self):
        assert ParticipationType.CLIENTE.label == "Participación activa Cliente"
        assert ParticipationType.FIN_PROYECTO.label == "Fin del proyecto"

    def test_holiday_requires_plain_date(self):
        with pytest.raises(InvalidInputError):
            Holiday(date=datetime(2025, 7, 28, 0, 0), name="Fiestas Patrias")


class TestBlockerPeriod:
    def test_pending_impact_only_when_resolved(self):
        assert BlockerPeriod(date(2025, 6, 3), impact_days=2, resolved=True).pending_impact == 2
        assert BlockerPeriod(date(2025, 6, 3), impact_days=2, resolved=False).pending_impact == 0
        assert BlockerPeriod(date(2025, 6, 3), impact_days=-1, resolved=True).pending_impact == 0

    def test_inverted_period_rejected(self):
        with pytest.raises(InvalidInputError):
            BlockerPeriod(start_date=date(2025, 6, 5), end_date=date(2025, 6, 3))
