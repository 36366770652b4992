"""
Module: schedule_kernel.models.project
Responsibility: ORM persistence for projects and their dated SAM schedule
    (phases and activities).
Architecture position: Kernel > Models.  May import from db/base.py and domain/.

Invariants enforced:
    - Project codes are unique.
    - Phases and activities load in ``order``; domain conversion preserves it.
    - Activity rows satisfy the domain invariants on conversion: both dates
      set iff duration is positive (enforced by ``Activity`` on load).
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schedule_kernel.db.base import TrackedBase, UUIDString
from schedule_kernel.domain.values import (
    Activity,
    ActivityStatus,
    ParticipationType,
    Phase,
    PhaseType,
)


class ProjectStatus(str, Enum):
    """Project lifecycle."""

    PLANIFICACION = "PLANIFICACION"
    EN_PROGRESO = "EN_PROGRESO"
    PAUSADO = "PAUSADO"
    COMPLETADO = "COMPLETADO"


class Project(TrackedBase):
    """A client project with a kickoff date and a SAM schedule."""

    __tablename__ = "projects"

    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    kickoff_date: Mapped[date] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectStatus.PLANIFICACION.value
    )

    phases: Mapped[list["ProjectPhase"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectPhase.order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Project {self.code} kickoff={self.kickoff_date.isoformat()}>"

    def to_phases(self) -> tuple[Phase, ...]:
        """The project's schedule as domain values, in phase order."""
        return tuple(p.to_domain() for p in self.phases)


class ProjectPhase(TrackedBase):
    """One SAM phase of a project."""

    __tablename__ = "project_phases"

    __table_args__ = (
        UniqueConstraint("project_id", "type", name="uq_project_phase_type"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("projects.id"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)

    project: Mapped[Project] = relationship(back_populates="phases")
    activities: Mapped[list["ProjectActivity"]] = relationship(
        back_populates="phase",
        cascade="all, delete-orphan",
        order_by="ProjectActivity.order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<ProjectPhase {self.type} order={self.order}>"

    def to_domain(self) -> Phase:
        return Phase(
            type=PhaseType(self.type),
            name=self.name,
            order=self.order,
            activities=tuple(a.to_domain() for a in self.activities),
        )


class ProjectActivity(TrackedBase):
    """One dated activity (or dateless milestone) of a phase."""

    __tablename__ = "project_activities"

    __table_args__ = (
        Index("idx_activity_phase_order", "phase_id", "order"),
    )

    phase_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("project_phases.id"), nullable=False
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_date: Mapped[date | None] = mapped_column(nullable=True)
    end_date: Mapped[date | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ActivityStatus.PENDIENTE.value
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    participation_type: Mapped[str] = mapped_column(String(20), nullable=False)

    phase: Mapped[ProjectPhase] = relationship(back_populates="activities")

    def __repr__(self) -> str:
        return f"<ProjectActivity {self.code} status={self.status}>"

    def to_domain(self) -> Activity:
        return Activity(
            code=self.code,
            name=self.name,
            order=self.order,
            duration_days=self.duration_days,
            start_date=self.start_date,
            end_date=self.end_date,
            status=ActivityStatus(self.status),
            progress=self.progress,
            participation_type=ParticipationType(self.participation_type),
        )

    @classmethod
    def from_domain(cls, activity: Activity, created_by_id: str) -> ProjectActivity:
        return cls(
            code=activity.code,
            name=activity.name,
            order=activity.order,
            duration_days=activity.duration_days,
            start_date=activity.start_date,
            end_date=activity.end_date,
            status=activity.status.value,
            progress=activity.progress,
            participation_type=activity.participation_type.value,
            created_by_id=created_by_id,
        )

    def apply_dates(self, activity: Activity, updated_by_id: str) -> None:
        """Copy recalculated dates from a domain value."""
        self.start_date = activity.start_date
        self.end_date = activity.end_date
        self.updated_by_id = updated_by_id
