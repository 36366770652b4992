"""
Config → Engine/Service Bridges.

Functions that convert a ``SchedulingConfig`` into the inputs the engines
and services take.  They live in schedule_config (the producer) because
the kernel and the engines must NEVER import schedule_config.

The service factories at the bottom wire every bridge at once and are how
an application obtains configured services.

Usage:
    from schedule_config.bridges import build_project_schedule_service

    with session_scope() as session:
        service = build_project_schedule_service(session)
        service.create_project(actor, "PRJ-001", "Bot de conciliaciones", kickoff)
"""

from __future__ import annotations

from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from schedule_config import get_active_config
from schedule_config.schema import SchedulingConfig
from schedule_engines.progress import VarianceThresholds
from schedule_engines.template import SAM_TEMPLATE, default_phase_durations
from schedule_kernel.domain.clock import Clock, SystemClock
from schedule_kernel.domain.values import PhaseDurations
from schedule_kernel.services.auditor_service import AuditorService
from schedule_kernel.services.authorization import Role
from schedule_kernel.services.holiday_service import HolidayService
from schedule_kernel.services.project_schedule_service import ProjectScheduleService


def build_variance_thresholds(config: SchedulingConfig) -> VarianceThresholds:
    """Variance cutoffs for ``calculate_progress_variance``."""
    defs = config.variance_thresholds
    return VarianceThresholds(
        tolerance=defs.tolerance,
        critical_gap=defs.critical_gap,
        critical_delayed_activities=defs.critical_delayed_activities,
    )


def build_schedule_editor_roles(config: SchedulingConfig) -> frozenset[Role]:
    """Roles allowed to create projects and recalculate their dates."""
    return frozenset(Role(code) for code in config.roles.schedule_editors)


def build_holiday_admin_roles(config: SchedulingConfig) -> frozenset[Role]:
    """Roles allowed to create, delete and import holidays."""
    return frozenset(Role(code) for code in config.roles.holiday_admins)


def build_default_phase_durations(config: SchedulingConfig) -> PhaseDurations:
    """Configured default phase totals, or the SAM template's own sums."""
    if not config.default_phase_durations:
        return default_phase_durations(SAM_TEMPLATE)
    return PhaseDurations.from_mapping(config.default_phase_durations)


def build_business_timezone(config: SchedulingConfig) -> ZoneInfo:
    return ZoneInfo(config.business_timezone)


def build_holiday_service(
    session: Session,
    config: SchedulingConfig,
    clock: Clock | None = None,
    auditor: AuditorService | None = None,
) -> HolidayService:
    """HolidayService gated by the configured holiday-admin roles."""
    return HolidayService(
        session,
        clock,
        auditor,
        admin_roles=build_holiday_admin_roles(config),
    )


def build_project_schedule_service(
    session: Session,
    config: SchedulingConfig | None = None,
    clock: Clock | None = None,
) -> ProjectScheduleService:
    """
    ProjectScheduleService wired from a configuration set.

    Without ``config`` the active set is loaded through
    ``get_active_config()``.  Thresholds, editor roles and default phase
    totals come from the set; the holiday service is built from the same
    set and shares the auditor, so both write to one audit chain.
    """
    config = config or get_active_config()
    clock = clock or SystemClock()
    auditor = AuditorService(session, clock)
    return ProjectScheduleService(
        session,
        clock,
        auditor=auditor,
        holiday_service=build_holiday_service(session, config, clock, auditor),
        thresholds=build_variance_thresholds(config),
        editor_roles=build_schedule_editor_roles(config),
        default_durations=build_default_phase_durations(config),
    )
