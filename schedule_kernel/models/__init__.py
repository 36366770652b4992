"""ORM models for the schedule kernel."""

from schedule_kernel.models.audit_event import AuditAction, AuditEvent
from schedule_kernel.models.holiday import HolidayRecord
from schedule_kernel.models.project import (
    Project,
    ProjectActivity,
    ProjectPhase,
    ProjectStatus,
)

__all__ = [
    "AuditAction",
    "AuditEvent",
    "HolidayRecord",
    "Project",
    "ProjectActivity",
    "ProjectPhase",
    "ProjectStatus",
]
