"""
Module: schedule_kernel.models.audit_event
Responsibility: ORM persistence for the tamper-evident audit hash chain.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Hash chain integrity: hash = H(entity_type | entity_id | action |
      payload_hash | prev_hash).  Validated by AuditorService.
    - seq is strictly increasing and unique.

Minimum coverage (each action type generates at least one AuditEvent):
    - PROJECT_CREATED, SCHEDULE_RECALCULATED
    - HOLIDAY_CREATED, HOLIDAY_DELETED, HOLIDAYS_IMPORTED
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from schedule_kernel.db.base import Base


class AuditAction(str, Enum):
    """Types of auditable actions."""

    # Project lifecycle
    PROJECT_CREATED = "project_created"
    SCHEDULE_RECALCULATED = "schedule_recalculated"

    # Holiday calendar
    HOLIDAY_CREATED = "holiday_created"
    HOLIDAY_DELETED = "holiday_deleted"
    HOLIDAYS_IMPORTED = "holidays_imported"


class AuditEvent(Base):
    """
    Audit event with hash chain for tamper evidence.

    Guarantees:
        - seq is unique and strictly increasing.
        - prev_hash is None only for the genesis event.

    Non-goals:
        - This model does NOT enforce hash correctness at INSERT time;
          that is the responsibility of AuditorService.
    """

    __tablename__ = "audit_events"

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_action", "action"),
    )

    seq: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)

    # e.g. "Project", "Holiday"
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    actor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    payload_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    # Hash of the previous audit event (null for first event)
    prev_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    hash: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"<AuditEvent {self.action} on {self.entity_type}:{self.entity_id}>"

    @property
    def is_genesis(self) -> bool:
        return self.prev_hash is None
