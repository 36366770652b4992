"""
AuditorService -- tamper-evident audit trail and hash chain maintenance.

Responsibility:
    Creates hash-chained audit events for schedule-affecting operations
    (project creation, date recalculation, holiday changes) and validates
    the chain.

Architecture position:
    Kernel > Services -- imperative shell, called by ProjectScheduleService
    and HolidayService after their main work has been flushed.

Invariants enforced:
    - Audit chain integrity: ``hash = H(entity_type | entity_id | action |
      payload_hash | prev_hash)``.
    - Fire-and-forget: ``record_audit`` writes inside a SAVEPOINT; a
      database failure rolls back only the audit row, is logged, and never
      aborts the operation being audited.

Failure modes:
    - AuditChainBrokenError from ``validate_chain`` when a stored hash does
      not match its recomputation or its predecessor.
"""

import json
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from schedule_kernel.domain.clock import Clock
from schedule_kernel.exceptions import AuditChainBrokenError
from schedule_kernel.logging_config import get_logger
from schedule_kernel.models.audit_event import AuditAction, AuditEvent
from schedule_kernel.services.base import BaseService
from schedule_kernel.utils.hashing import canonicalize_json, hash_audit_event, hash_payload

logger = get_logger("services.auditor")


@dataclass(frozen=True)
class AuditTraceEntry:
    """A single entry in an audit trace."""

    seq: int
    action: AuditAction
    actor_id: str
    payload: dict[str, Any]
    hash: str


class AuditorService(BaseService):
    """
    Service for creating and validating tamper-evident audit events.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session, clock)

    def _last_event(self) -> AuditEvent | None:
        return self.session.execute(
            select(AuditEvent).order_by(AuditEvent.seq.desc()).limit(1)
        ).scalar_one_or_none()

    def _create_audit_event(
        self,
        entity_type: str,
        entity_id: str,
        action: AuditAction,
        actor_id: str,
        payload: dict[str, Any] | None = None,
    ) -> AuditEvent:
        """
        Create and flush a new audit event linked to its predecessor.

        Postconditions:
            - ``event.hash == H(entity_type, entity_id, action, payload_hash, prev_hash)``.
        """
        last = self._last_event()
        prev_hash = last.hash if last else None
        seq = (last.seq if last else 0) + 1

        # Round-trip through canonical JSON so dates and enums are stored as text
        payload_data = _json_safe(payload or {})
        payload_hash = hash_payload(payload_data)

        event_hash = hash_audit_event(
            entity_type=entity_type,
            entity_id=str(entity_id),
            action=action.value,
            payload_hash=payload_hash,
            prev_hash=prev_hash,
        )

        audit_event = AuditEvent(
            seq=seq,
            entity_type=entity_type,
            entity_id=str(entity_id),
            action=action.value,
            actor_id=actor_id,
            occurred_at=self.clock.now(),
            payload=payload_data,
            payload_hash=payload_hash,
            prev_hash=prev_hash,
            hash=event_hash,
        )
        self.session.add(audit_event)
        self.session.flush()
        return audit_event

    def record_audit(
        self,
        entity_type: str,
        entity_id: str,
        action: AuditAction,
        actor_id: str,
        payload: dict[str, Any] | None = None,
    ) -> AuditEvent | None:
        """
        Record an audit event without risking the surrounding operation.

        Returns:
            The flushed AuditEvent, or None if the write failed.
        """
        try:
            with self.session.begin_nested():
                audit_event = self._create_audit_event(
                    entity_type, entity_id, action, actor_id, payload
                )
        except (SQLAlchemyError, TypeError, ValueError):
            # TypeError/ValueError: payload has no JSON form
            logger.warning(
                "audit_record_failed",
                extra={
                    "entity_type": entity_type,
                    "entity_id": str(entity_id),
                    "action": action.value,
                },
                exc_info=True,
            )
            return None

        logger.info(
            "audit_recorded",
            extra={
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "action": action.value,
                "seq": audit_event.seq,
            },
        )
        return audit_event

    def get_trace(self, entity_type: str, entity_id: str) -> tuple[AuditTraceEntry, ...]:
        """All audit entries for one entity, in sequence order."""
        events = self.session.execute(
            select(AuditEvent)
            .where(AuditEvent.entity_type == entity_type)
            .where(AuditEvent.entity_id == str(entity_id))
            .order_by(AuditEvent.seq)
        ).scalars().all()
        return tuple(
            AuditTraceEntry(
                seq=e.seq,
                action=AuditAction(e.action),
                actor_id=e.actor_id,
                payload=e.payload or {},
                hash=e.hash,
            )
            for e in events
        )

    def validate_chain(self) -> bool:
        """
        Recompute every hash in sequence order.

        Raises:
            AuditChainBrokenError: On the first mismatching event.
        """
        events = self.session.execute(
            select(AuditEvent).order_by(AuditEvent.seq)
        ).scalars().all()

        prev_hash: str | None = None
        for e in events:
            if e.prev_hash != prev_hash:
                raise AuditChainBrokenError(str(e.id), prev_hash or "GENESIS", e.prev_hash or "GENESIS")
            expected = hash_audit_event(
                entity_type=e.entity_type,
                entity_id=e.entity_id,
                action=e.action,
                payload_hash=hash_payload(e.payload or {}),
                prev_hash=e.prev_hash,
            )
            if expected != e.hash:
                raise AuditChainBrokenError(str(e.id), expected, e.hash)
            prev_hash = e.hash
        return True


def _json_safe(payload: dict[str, Any]) -> dict[str, Any]:
    return json.loads(canonicalize_json(payload))
