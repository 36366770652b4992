"""
ProjectScheduleService -- project creation and schedule maintenance.

Responsibility:
    Orchestrates the schedule engines against the database: creates a
    project with its full SAM schedule, reads a project's schedule and
    progress snapshot, and shifts pending dates when blocking periods
    resolve.

Architecture position:
    Kernel > Services -- imperative shell.  Calls the pure engines in
    ``schedule_engines`` and persists their results through the ORM.

Invariants enforced:
    - Role gate first: ``require_role`` runs before any holiday fetch or
      schedule computation.
    - Input validation (phase durations, kickoff date) happens before any
      row is added; the caller's transaction holds every row, so a failure
      anywhere leaves no orphaned phases or activities.
    - Holidays for kickoff year -1..+1 are always passed to the builder.
    - "Today" comes from the injected clock, in the business timezone.
    - Auditing is fire-and-forget and runs after the schedule is flushed.

Failure modes:
    - AuthorizationError, InvalidInputError (and subclasses),
      DuplicateProjectCodeError, ProjectNotFoundError.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from schedule_engines.holidays import holiday_window_years
from schedule_engines.progress import (
    DEFAULT_THRESHOLDS,
    ProgressSnapshot,
    VarianceThresholds,
    summarize_progress,
)
from schedule_engines.recalculation import recalculate_dates, total_pending_impact
from schedule_engines.schedule_builder import build_schedule
from schedule_engines.template import SAM_TEMPLATE, default_phase_durations
from schedule_kernel.domain.clock import Clock
from schedule_kernel.domain.dates import to_calendar_date
from schedule_kernel.domain.values import (
    ActivityStatus,
    BlockerPeriod,
    Phase,
    PhaseDurations,
)
from schedule_kernel.exceptions import (
    DuplicateProjectCodeError,
    InvalidInputError,
    ProjectNotFoundError,
)
from schedule_kernel.logging_config import LogContext, get_logger
from schedule_kernel.models.audit_event import AuditAction
from schedule_kernel.models.project import (
    Project,
    ProjectActivity,
    ProjectPhase,
    ProjectStatus,
)
from schedule_kernel.services.auditor_service import AuditorService
from schedule_kernel.services.authorization import (
    SCHEDULE_EDITOR_ROLES,
    ActorContext,
    Role,
    require_role,
)
from schedule_kernel.services.base import BaseService
from schedule_kernel.services.holiday_service import HolidayService

logger = get_logger("services.project_schedule")


@dataclass(frozen=True)
class BlockerRecalculation:
    """Outcome of applying resolved blocker impact to a project."""

    days_added: int
    phases: tuple[Phase, ...]
    blockers: tuple[BlockerPeriod, ...]


class ProjectScheduleService(BaseService):
    """
    Service for project schedules.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT track blocker periods; callers pass them in and store
          the consumed copies it returns.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        auditor: AuditorService | None = None,
        holiday_service: HolidayService | None = None,
        thresholds: VarianceThresholds = DEFAULT_THRESHOLDS,
        editor_roles: Iterable[Role] = SCHEDULE_EDITOR_ROLES,
        default_durations: PhaseDurations | None = None,
    ):
        super().__init__(session, clock)
        self._auditor = auditor or AuditorService(session, self.clock)
        self._holidays = holiday_service or HolidayService(session, self.clock, self._auditor)
        self._thresholds = thresholds
        self._editor_roles = frozenset(editor_roles)
        self._default_durations = default_durations or default_phase_durations(SAM_TEMPLATE)

    # -- helpers ------------------------------------------------------------

    def _get_project(self, project_id: UUID) -> Project:
        project = self.session.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundError(str(project_id))
        return project

    def _coerce_durations(
        self, phase_durations: PhaseDurations | Mapping[str, object] | None
    ) -> PhaseDurations:
        if phase_durations is None:
            return self._default_durations
        if isinstance(phase_durations, PhaseDurations):
            return phase_durations
        return PhaseDurations.from_mapping(phase_durations)

    def _persist_schedule(
        self, project: Project, phases: Sequence[Phase], actor_id: str
    ) -> None:
        """Add one ProjectPhase per phase with its activities, in order."""
        for phase in phases:
            phase_row = ProjectPhase(
                type=phase.type.value,
                name=phase.name,
                order=phase.order,
                created_by_id=actor_id,
            )
            phase_row.activities = [
                ProjectActivity.from_domain(activity, created_by_id=actor_id)
                for activity in phase.activities
            ]
            project.phases.append(phase_row)
        self.session.flush()

    # -- operations ---------------------------------------------------------

    def create_project(
        self,
        actor: ActorContext,
        code: str,
        name: str,
        kickoff_date: date | datetime | str,
        phase_durations: PhaseDurations | Mapping[str, object] | None = None,
    ) -> Project:
        """
        Create a project and its complete dated SAM schedule.

        Raises:
            AuthorizationError: Actor may not create schedules.
            InvalidInputError: Bad kickoff date or phase durations.
            DuplicateProjectCodeError: ``code`` is already taken.
        """
        require_role(actor, self._editor_roles)
        kickoff = to_calendar_date(kickoff_date)
        durations = self._coerce_durations(phase_durations)

        existing = self.session.execute(
            select(Project.id).where(Project.code == code)
        ).scalar_one_or_none()
        if existing is not None:
            raise DuplicateProjectCodeError(code)

        with LogContext.bind(actor_id=actor.actor_id):
            holidays = self._holidays.fetch_holidays(holiday_window_years(kickoff))
            phases = build_schedule(kickoff, durations, holidays)

            project = Project(
                code=code,
                name=name,
                kickoff_date=kickoff,
                status=ProjectStatus.PLANIFICACION.value,
                created_by_id=actor.actor_id,
            )
            self.session.add(project)
            self._persist_schedule(project, phases, actor.actor_id)

            with LogContext.bind(project_id=project.id):
                logger.info(
                    "project_created",
                    extra={
                        "project_code": code,
                        "kickoff_date": kickoff.isoformat(),
                        "phase_durations": durations.as_dict(),
                    },
                )
                self._auditor.record_audit(
                    entity_type="Project",
                    entity_id=str(project.id),
                    action=AuditAction.PROJECT_CREATED,
                    actor_id=actor.actor_id,
                    payload={
                        "code": code,
                        "kickoff_date": kickoff,
                        "phase_durations": durations.as_dict(),
                        "activity_count": sum(len(p.activities) for p in phases),
                    },
                )
        return project

    def load_phases(self, project_id: UUID) -> tuple[Phase, ...]:
        """The stored schedule of a project as domain values."""
        return self._get_project(project_id).to_phases()

    def progress_snapshot(self, project_id: UUID) -> ProgressSnapshot:
        """Progress, variance and delays of a project as of the clock's today."""
        project = self._get_project(project_id)
        with LogContext.bind(project_id=project_id):
            snapshot = summarize_progress(
                project.to_phases(),
                kickoff_date=project.kickoff_date,
                today=self.clock.today(),
                thresholds=self._thresholds,
            )
            logger.debug(
                "progress_snapshot_taken",
                extra={
                    "as_of": snapshot.as_of,
                    "variance_status": snapshot.variance.status,
                    "delayed_activities": snapshot.delayed_activities,
                },
            )
        return snapshot

    def _recalculation_years(self, phases: Sequence[Phase], days_to_add: int) -> list[int]:
        dated = [a for p in phases for a in p.activities if a.start_date is not None]
        if not dated:
            return []
        first = min(a.start_date for a in dated).year
        last = max(a.end_date for a in dated).year
        # a long shift can push dates more than a year out
        return list(range(first - 1, last + 2 + days_to_add // 200))

    def recalculate_project_dates(
        self, actor: ActorContext, project_id: UUID, days_to_add: int
    ) -> tuple[Phase, ...]:
        """
        Shift every pending dated activity ``days_to_add`` working days later.

        Raises:
            AuthorizationError: Actor may not edit schedules.
            ProjectNotFoundError: Unknown project.
            InvalidInputError: ``days_to_add`` is not a positive integer.
        """
        require_role(actor, self._editor_roles)
        project = self._get_project(project_id)
        phases = project.to_phases()

        with LogContext.bind(actor_id=actor.actor_id, project_id=project_id):
            holidays = self._holidays.fetch_holidays(
                self._recalculation_years(phases, days_to_add)
            )
            updated = recalculate_dates(phases, days_to_add, holidays)

            shifted = 0
            for phase_row, phase in zip(project.phases, updated):
                for activity_row, activity in zip(phase_row.activities, phase.activities):
                    if (activity_row.start_date, activity_row.end_date) != (
                        activity.start_date,
                        activity.end_date,
                    ):
                        activity_row.apply_dates(activity, updated_by_id=actor.actor_id)
                        shifted += 1
            self.session.flush()

            logger.info(
                "project_dates_recalculated",
                extra={"days_to_add": days_to_add, "shifted_activity_count": shifted},
            )
            self._auditor.record_audit(
                entity_type="Project",
                entity_id=str(project_id),
                action=AuditAction.SCHEDULE_RECALCULATED,
                actor_id=actor.actor_id,
                payload={"days_to_add": days_to_add, "shifted_activity_count": shifted},
            )
        return updated

    def apply_resolved_blockers(
        self,
        actor: ActorContext,
        project_id: UUID,
        blockers: Sequence[BlockerPeriod],
    ) -> BlockerRecalculation:
        """
        Consume the pending impact of resolved blockers.

        Sums the positive impact of resolved periods, shifts the schedule
        by that many working days, and returns the blockers with the
        consumed impact set to 0.  Nothing moves when no impact is pending.
        """
        require_role(actor, self._editor_roles)
        days = total_pending_impact(blockers)
        with LogContext.bind(actor_id=actor.actor_id, project_id=project_id):
            if days == 0:
                logger.info("no_blocker_impact_pending", extra={"blocker_count": len(blockers)})
                return BlockerRecalculation(
                    days_added=0,
                    phases=self.load_phases(project_id),
                    blockers=tuple(blockers),
                )

            phases = self.recalculate_project_dates(actor, project_id, days)
            consumed = tuple(
                replace(b, impact_days=0) if b.pending_impact > 0 else b for b in blockers
            )
            logger.info(
                "blocker_impact_consumed",
                extra={
                    "days_added": days,
                    "consumed_blocker_count": sum(1 for b in blockers if b.pending_impact > 0),
                },
            )
        return BlockerRecalculation(days_added=days, phases=phases, blockers=consumed)

    def update_activity_status(
        self,
        actor: ActorContext,
        project_id: UUID,
        activity_code: str,
        status: str,
        progress: int | None = None,
    ) -> Phase:
        """
        Change one activity's status (and optionally progress).

        COMPLETADO without an explicit progress sets progress to 100.

        Returns:
            The updated phase containing the activity.

        Raises:
            InvalidInputError: Unknown activity code or invalid status/progress.
        """
        require_role(actor, self._editor_roles)
        project = self._get_project(project_id)
        try:
            new_status = ActivityStatus(status)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown activity status {status!r}", field="status") from exc
        if progress is None and new_status == ActivityStatus.COMPLETADO:
            progress = 100

        with LogContext.bind(actor_id=actor.actor_id, project_id=project_id):
            for phase_row in project.phases:
                for activity_row in phase_row.activities:
                    if activity_row.code != activity_code:
                        continue
                    candidate = replace(
                        activity_row.to_domain(),
                        status=new_status,
                        progress=activity_row.progress if progress is None else progress,
                    )
                    activity_row.status = candidate.status.value
                    activity_row.progress = candidate.progress
                    activity_row.updated_by_id = actor.actor_id
                    self.session.flush()
                    logger.info(
                        "activity_status_updated",
                        extra={
                            "activity_code": activity_code,
                            "status": candidate.status,
                            "progress": candidate.progress,
                        },
                    )
                    return phase_row.to_domain()

        raise InvalidInputError(
            f"Project {project_id} has no activity {activity_code!r}",
            field="activity_code",
        )
