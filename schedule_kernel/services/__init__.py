"""Services for the schedule kernel (write side)."""

from schedule_kernel.services.auditor_service import AuditorService, AuditTraceEntry
from schedule_kernel.services.authorization import (
    HOLIDAY_ADMIN_ROLES,
    SCHEDULE_EDITOR_ROLES,
    ActorContext,
    Role,
    require_role,
)
from schedule_kernel.services.holiday_service import HolidayService
from schedule_kernel.services.project_schedule_service import (
    BlockerRecalculation,
    ProjectScheduleService,
)

__all__ = [
    "ActorContext",
    "AuditorService",
    "AuditTraceEntry",
    "BlockerRecalculation",
    "HOLIDAY_ADMIN_ROLES",
    "HolidayService",
    "ProjectScheduleService",
    "Role",
    "SCHEDULE_EDITOR_ROLES",
    "require_role",
]
