"""
HolidayService -- the persisted non-working-day calendar.

Responsibility:
    Manual holiday entry and deletion, bulk import of the built-in Peruvian
    calendar for a year, and the ``fetch_holidays(years)`` lookup the
    schedule services feed into the working-day engine.

Architecture position:
    Kernel > Services -- imperative shell over HolidayRecord.

Invariants enforced:
    - One holiday per calendar date; imports skip dates already stored.
    - Mutations are gated by ``require_role`` before any query runs.
    - Missing holiday years are never an error: ``fetch_holidays`` logs
      ``holiday_data_missing`` and returns what it has.

Failure modes:
    - AuthorizationError for actors outside the holiday-admin roles.
    - DuplicateHolidayError / HolidayNotFoundError on create / delete.
    - InvalidDateError for dates that cannot be read as calendar dates.
"""

from collections.abc import Iterable
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from schedule_engines.holidays import get_peru_holidays
from schedule_kernel.domain.clock import Clock
from schedule_kernel.domain.dates import to_calendar_date
from schedule_kernel.domain.values import Holiday
from schedule_kernel.exceptions import DuplicateHolidayError, HolidayNotFoundError
from schedule_kernel.logging_config import LogContext, get_logger
from schedule_kernel.models.audit_event import AuditAction
from schedule_kernel.models.holiday import HolidayRecord
from schedule_kernel.services.auditor_service import AuditorService
from schedule_kernel.services.authorization import (
    HOLIDAY_ADMIN_ROLES,
    ActorContext,
    Role,
    require_role,
)
from schedule_kernel.services.base import BaseService

logger = get_logger("services.holiday")


class HolidayService(BaseService):
    """
    Service for the holiday calendar.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        auditor: AuditorService | None = None,
        admin_roles: Iterable[Role] = HOLIDAY_ADMIN_ROLES,
    ):
        super().__init__(session, clock)
        self._auditor = auditor or AuditorService(session, self.clock)
        self._admin_roles = frozenset(admin_roles)

    def _find_by_date(self, holiday_date: date) -> HolidayRecord | None:
        return self.session.execute(
            select(HolidayRecord).where(HolidayRecord.date == holiday_date)
        ).scalar_one_or_none()

    def create_holiday(
        self,
        actor: ActorContext,
        holiday_date: date | datetime | str,
        name: str,
        recurring: bool = False,
    ) -> HolidayRecord:
        """
        Register a holiday on a calendar date.

        Raises:
            AuthorizationError: Actor is not a holiday admin.
            DuplicateHolidayError: A holiday already exists on that date.
        """
        require_role(actor, self._admin_roles)
        day = to_calendar_date(holiday_date)

        existing = self._find_by_date(day)
        if existing is not None:
            raise DuplicateHolidayError(day.isoformat(), existing.name)

        record = HolidayRecord.from_domain(
            Holiday(date=day, name=name, recurring=recurring),
            created_by_id=actor.actor_id,
        )
        self.session.add(record)
        self.session.flush()

        with LogContext.bind(actor_id=actor.actor_id):
            logger.info(
                "holiday_created",
                extra={"holiday_date": day.isoformat(), "holiday_name": name},
            )
            self._auditor.record_audit(
                entity_type="Holiday",
                entity_id=str(record.id),
                action=AuditAction.HOLIDAY_CREATED,
                actor_id=actor.actor_id,
                payload={"date": day, "name": name, "recurring": recurring},
            )
        return record

    def delete_holiday(self, actor: ActorContext, holiday_id: UUID) -> None:
        """
        Remove a holiday.

        Raises:
            AuthorizationError: Actor is not a holiday admin.
            HolidayNotFoundError: No holiday with that ID.
        """
        require_role(actor, self._admin_roles)
        record = self.session.get(HolidayRecord, holiday_id)
        if record is None:
            raise HolidayNotFoundError(str(holiday_id))

        payload = {"date": record.date, "name": record.name}
        self.session.delete(record)
        self.session.flush()

        with LogContext.bind(actor_id=actor.actor_id):
            logger.info("holiday_deleted", extra={"holiday_date": payload["date"].isoformat()})
            self._auditor.record_audit(
                entity_type="Holiday",
                entity_id=str(holiday_id),
                action=AuditAction.HOLIDAY_DELETED,
                actor_id=actor.actor_id,
                payload=payload,
            )

    def import_peru_holidays(self, actor: ActorContext, year: int) -> int:
        """
        Store the built-in Peruvian holidays for ``year``.

        Dates that already hold a holiday (imported or manual) are skipped.

        Returns:
            Number of holidays inserted.
        """
        require_role(actor, self._admin_roles)
        candidates = get_peru_holidays(year)

        existing = set(
            self.session.execute(
                select(HolidayRecord.date).where(
                    HolidayRecord.date.in_([h.date for h in candidates])
                )
            ).scalars()
        )

        inserted = 0
        for holiday in candidates:
            if holiday.date in existing:
                continue
            self.session.add(HolidayRecord.from_domain(holiday, created_by_id=actor.actor_id))
            inserted += 1
        self.session.flush()

        with LogContext.bind(actor_id=actor.actor_id):
            logger.info(
                "holidays_imported",
                extra={"year": year, "inserted": inserted, "skipped": len(candidates) - inserted},
            )
            self._auditor.record_audit(
                entity_type="HolidayCalendar",
                entity_id=str(year),
                action=AuditAction.HOLIDAYS_IMPORTED,
                actor_id=actor.actor_id,
                payload={"year": year, "inserted": inserted},
            )
        return inserted

    def fetch_holidays(self, years: Iterable[int]) -> tuple[Holiday, ...]:
        """
        Stored holidays for the given years, sorted by date.

        Years with no stored holidays contribute nothing; each one is
        reported with a ``holiday_data_missing`` warning.
        """
        wanted = sorted(set(years))
        records = self.session.execute(
            select(HolidayRecord)
            .where(HolidayRecord.year.in_(wanted))
            .order_by(HolidayRecord.date)
        ).scalars().all()

        found_years = {r.year for r in records}
        missing = [y for y in wanted if y not in found_years]
        if missing:
            logger.warning("holiday_data_missing", extra={"years": missing})

        return tuple(r.to_domain() for r in records)

    def list_holidays(self, year: int) -> list[HolidayRecord]:
        """Stored holidays of one year, by date."""
        return list(
            self.session.execute(
                select(HolidayRecord)
                .where(HolidayRecord.year == year)
                .order_by(HolidayRecord.date)
            ).scalars()
        )
