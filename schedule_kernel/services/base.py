"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service in the kernel layer.  Services receive a SQLAlchemy
    ``Session`` and a ``Clock``; they persist with ``session.flush()`` --
    never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback themselves.  The caller
      (``session_scope`` or a test harness) owns commit/rollback, so a
      failed schedule build persists nothing.

Failure modes:
    - If a subclass calls ``session.commit()``, a later failure in the
      same operation could leave a partial schedule behind.
"""

from abc import ABC

from sqlalchemy.orm import Session

from schedule_kernel.domain.clock import Clock, SystemClock


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``; the caller controls transaction boundaries.
        - "Today" is always taken from the injected clock.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
            clock: Time source. Defaults to SystemClock.
        """
        self.session = session
        self.clock = clock or SystemClock()
