"""
Tests for ProjectScheduleService.

Covers:
- Project creation: role gate, validation, holiday window, persistence
- Nothing persisted when creation fails
- Clock-driven progress snapshot
- Date recalculation and resolved-blocker consumption
- Activity status updates
- Audit trail of schedule operations
"""

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from schedule_engines.holidays import get_peru_holidays
from schedule_engines.progress import ProgressStatus, VarianceThresholds
from schedule_engines.schedule_builder import build_schedule
from schedule_engines.template import default_phase_durations
from schedule_kernel.domain.clock import DeterministicClock
from schedule_kernel.domain.values import ActivityStatus, BlockerPeriod
from schedule_kernel.exceptions import (
    AuthorizationError,
    DuplicateProjectCodeError,
    InvalidInputError,
    InvalidPhaseDurationError,
    ProjectNotFoundError,
)
from schedule_kernel.models.audit_event import AuditAction
from schedule_kernel.models.project import Project, ProjectActivity, ProjectPhase, ProjectStatus
from schedule_kernel.services.auditor_service import AuditorService
from schedule_kernel.services.holiday_service import HolidayService
from schedule_kernel.services.project_schedule_service import ProjectScheduleService

KICKOFF = date(2025, 6, 2)
COMPRESSED = {"prepare": 3, "connect": 5, "realize": 10, "run": 3}


@pytest.fixture
def service(session, deterministic_clock):
    return ProjectScheduleService(session, deterministic_clock)


@pytest.fixture
def project(service, manager):
    return service.create_project(manager, "PRJ-001", "Bot de conciliaciones", KICKOFF, COMPRESSED)


def _by_code(phases):
    return {a.code: a for p in phases for a in p.activities}


def _row_count(session, model):
    return session.execute(select(func.count()).select_from(model)).scalar_one()


class TestCreateProject:
    def test_creates_full_schedule(self, session, project):
        assert project.code == "PRJ-001"
        assert project.status == ProjectStatus.PLANIFICACION.value
        assert project.kickoff_date == KICKOFF
        assert [p.type for p in project.phases] == ["PREPARE", "CONNECT", "REALIZE", "RUN"]
        assert _row_count(session, ProjectActivity) == 32

    def test_stored_schedule_matches_engine(self, service, project):
        assert service.load_phases(project.id) == build_schedule(KICKOFF, COMPRESSED, holidays=())

    def test_uses_stored_holidays(self, session, service, manager, deterministic_clock):
        HolidayService(session, deterministic_clock).import_peru_holidays(manager, 2025)

        created = service.create_project(manager, "PRJ-002", "Bot de facturas", KICKOFF)

        expected = build_schedule(KICKOFF, default_phase_durations(), get_peru_holidays(2025))
        assert service.load_phases(created.id) == expected

    def test_default_durations(self, service, manager):
        created = service.create_project(manager, "PRJ-003", "Bot RRHH", KICKOFF)
        phases = service.load_phases(created.id)
        assert sum(a.duration_days for p in phases for a in p.activities) == 55

    def test_missing_holiday_years_logged(self, service, manager, captured_logs):
        service.create_project(manager, "PRJ-004", "Bot compras", KICKOFF, COMPRESSED)
        warnings = [r for r in captured_logs() if r["message"] == "holiday_data_missing"]
        assert warnings[0]["years"] == [2024, 2025, 2026]

    def test_architect_may_create(self, service, architect):
        created = service.create_project(architect, "PRJ-005", "Bot tesorería", KICKOFF, COMPRESSED)
        assert created.created_by_id == "architect-1"

    def test_consultant_denied_before_any_work(self, session, service, consultant, captured_logs):
        with pytest.raises(AuthorizationError):
            service.create_project(consultant, "PRJ-006", "Bot", KICKOFF, COMPRESSED)

        assert _row_count(session, Project) == 0
        messages = [r["message"] for r in captured_logs()]
        assert "authorization_denied" in messages
        assert "holiday_data_missing" not in messages
        assert "schedule_build_started" not in messages

    def test_invalid_durations_persist_nothing(self, session, service, manager):
        with pytest.raises(InvalidPhaseDurationError):
            service.create_project(
                manager, "PRJ-007", "Bot", KICKOFF, {"prepare": 3, "connect": -1, "realize": 10, "run": 3}
            )
        assert _row_count(session, Project) == 0
        assert _row_count(session, ProjectPhase) == 0

    def test_duplicate_code(self, service, manager, project):
        with pytest.raises(DuplicateProjectCodeError) as exc_info:
            service.create_project(manager, "PRJ-001", "Otro", KICKOFF, COMPRESSED)
        assert exc_info.value.project_code == "PRJ-001"

    def test_creation_is_audited(self, session, project):
        trace = AuditorService(session).get_trace("Project", str(project.id))
        assert len(trace) == 1
        assert trace[0].action == AuditAction.PROJECT_CREATED
        assert trace[0].payload["kickoff_date"] == "2025-06-02"
        assert trace[0].payload["phase_durations"] == COMPRESSED
        assert trace[0].payload["activity_count"] == 32

    def test_audit_failure_does_not_abort(self, session, service, manager, monkeypatch, captured_logs):
        def _fail(*args, **kwargs):
            raise SQLAlchemyError("audit table unavailable")

        monkeypatch.setattr(AuditorService, "_create_audit_event", _fail)

        created = service.create_project(manager, "PRJ-008", "Bot", KICKOFF, COMPRESSED)

        assert service.load_phases(created.id)
        assert any(r["message"] == "audit_record_failed" for r in captured_logs())


class TestProgressSnapshot:
    def test_snapshot_uses_clock(self, session, manager):
        clock = DeterministicClock.on_date(date(2025, 6, 13))
        service = ProjectScheduleService(session, clock)
        created = service.create_project(manager, "PRJ-010", "Bot", KICKOFF, COMPRESSED)

        snapshot = service.progress_snapshot(created.id)

        assert snapshot.as_of == date(2025, 6, 13)
        assert snapshot.end_date == date(2025, 6, 25)
        assert snapshot.estimated_progress == 48
        assert snapshot.delayed_activities == 9
        assert snapshot.variance.status == ProgressStatus.CRITICAL

    def test_snapshot_follows_clock_advance(self, session, manager):
        clock = DeterministicClock.on_date(date(2025, 6, 1))
        service = ProjectScheduleService(session, clock)
        created = service.create_project(manager, "PRJ-011", "Bot", KICKOFF, COMPRESSED)

        assert service.progress_snapshot(created.id).estimated_progress == 0
        clock.advance_days(40)
        assert service.progress_snapshot(created.id).estimated_progress == 100

    def test_configured_thresholds(self, session, manager):
        clock = DeterministicClock.on_date(date(2025, 6, 1))
        lenient = VarianceThresholds(tolerance=5, critical_gap=20, critical_delayed_activities=10)
        service = ProjectScheduleService(session, clock, thresholds=lenient)
        created = service.create_project(manager, "PRJ-012", "Bot", KICKOFF, COMPRESSED)

        assert service.progress_snapshot(created.id).variance.status == ProgressStatus.ON_TRACK

    def test_unknown_project(self, service):
        with pytest.raises(ProjectNotFoundError):
            service.progress_snapshot(uuid4())


class TestRecalculation:
    def test_shift_is_persisted(self, service, manager, project):
        returned = service.recalculate_project_dates(manager, project.id, 2)

        assert service.load_phases(project.id) == returned
        assert _by_code(returned)["2.1.1"].start_date == date(2025, 6, 4)

    def test_completed_activity_not_moved(self, service, manager, project):
        service.update_activity_status(manager, project.id, "2.1.1", "COMPLETADO")
        service.recalculate_project_dates(manager, project.id, 2)

        phases = _by_code(service.load_phases(project.id))
        assert phases["2.1.1"].start_date == date(2025, 6, 2)
        assert phases["2.1.2"].start_date == date(2025, 6, 5)

    def test_consultant_cannot_recalculate(self, service, consultant, project):
        with pytest.raises(AuthorizationError):
            service.recalculate_project_dates(consultant, project.id, 2)

    def test_invalid_days(self, service, manager, project):
        with pytest.raises(InvalidInputError):
            service.recalculate_project_dates(manager, project.id, 0)

    def test_unknown_project(self, service, manager):
        with pytest.raises(ProjectNotFoundError):
            service.recalculate_project_dates(manager, uuid4(), 2)

    def test_recalculation_is_audited(self, session, service, manager, project):
        service.recalculate_project_dates(manager, project.id, 2)
        trace = AuditorService(session).get_trace("Project", str(project.id))
        assert [e.action for e in trace] == [AuditAction.PROJECT_CREATED, AuditAction.SCHEDULE_RECALCULATED]
        assert trace[1].payload == {"days_to_add": 2, "shifted_activity_count": 17}


class TestResolvedBlockers:
    def test_consumes_resolved_impact(self, service, manager, project):
        blockers = [
            BlockerPeriod(start_date=date(2025, 6, 3), end_date=date(2025, 6, 4), impact_days=2, resolved=True),
            BlockerPeriod(start_date=date(2025, 6, 5), impact_days=1, resolved=True),
            BlockerPeriod(start_date=date(2025, 6, 6), impact_days=5, resolved=False),
        ]

        result = service.apply_resolved_blockers(manager, project.id, blockers)

        assert result.days_added == 3
        assert [b.impact_days for b in result.blockers] == [0, 0, 5]
        assert _by_code(result.phases)["2.1.1"].start_date == date(2025, 6, 5)

    def test_nothing_pending_moves_nothing(self, service, manager, project):
        before = service.load_phases(project.id)
        blockers = [BlockerPeriod(start_date=date(2025, 6, 6), impact_days=5, resolved=False)]

        result = service.apply_resolved_blockers(manager, project.id, blockers)

        assert result.days_added == 0
        assert result.phases == before
        assert result.blockers == tuple(blockers)

    def test_consumed_blockers_do_not_shift_twice(self, service, manager, project):
        blockers = [BlockerPeriod(start_date=date(2025, 6, 3), impact_days=2, resolved=True)]
        first = service.apply_resolved_blockers(manager, project.id, blockers)
        second = service.apply_resolved_blockers(manager, project.id, first.blockers)

        assert second.days_added == 0
        assert second.phases == first.phases


class TestActivityStatus:
    def test_complete_sets_progress(self, service, manager, project):
        phase = service.update_activity_status(manager, project.id, "2.2.3", "COMPLETADO")
        activity = next(a for a in phase.activities if a.code == "2.2.3")
        assert activity.status == ActivityStatus.COMPLETADO
        assert activity.progress == 100

    def test_completion_raises_actual_progress(self, service, manager, project):
        service.update_activity_status(manager, project.id, "2.2.3", "COMPLETADO")
        # one of 28 activities outside PREPARE
        assert service.progress_snapshot(project.id).actual_progress == 4

    def test_in_progress_with_partial_progress(self, service, manager, project):
        phase = service.update_activity_status(manager, project.id, "3.1.1", "EN_PROGRESO", progress=40)
        activity = next(a for a in phase.activities if a.code == "3.1.1")
        assert activity.progress == 40

    def test_unknown_activity(self, service, manager, project):
        with pytest.raises(InvalidInputError):
            service.update_activity_status(manager, project.id, "9.9.9", "COMPLETADO")

    def test_unknown_status(self, service, manager, project):
        with pytest.raises(InvalidInputError):
            service.update_activity_status(manager, project.id, "2.2.3", "TERMINADO")

    def test_progress_out_of_range(self, service, manager, project):
        with pytest.raises(InvalidInputError):
            service.update_activity_status(manager, project.id, "2.2.3", "EN_PROGRESO", progress=150)
