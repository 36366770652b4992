"""
Authorization gate for schedule-affecting operations.

Responsibility:
    Closed set of application roles, the acting user's context, and the
    ``require_role`` gate every mutating service operation calls first.

Architecture position:
    Kernel > Services -- pure check, no I/O beyond a log record.

Invariants enforced:
    - The gate runs before any holiday fetch or schedule computation, so a
      denied actor leaves no partial state behind.

Failure modes:
    - AuthorizationError when the actor's role is not in the allowed set.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from schedule_kernel.exceptions import AuthorizationError
from schedule_kernel.logging_config import get_logger

logger = get_logger("services.authorization")


class Role(str, Enum):
    """Application roles."""

    MANAGER = "MANAGER"
    ARQUITECTO_RPA = "ARQUITECTO_RPA"
    ANALISTA_FUNCIONAL = "ANALISTA_FUNCIONAL"
    CONSULTOR = "CONSULTOR"


SCHEDULE_EDITOR_ROLES: frozenset[Role] = frozenset({Role.MANAGER, Role.ARQUITECTO_RPA})
HOLIDAY_ADMIN_ROLES: frozenset[Role] = frozenset({Role.MANAGER})


@dataclass(frozen=True)
class ActorContext:
    """Who is performing an operation."""

    actor_id: str
    role: Role


def require_role(actor: ActorContext, allowed_roles: Iterable[Role]) -> ActorContext:
    """
    Pass the actor through if its role is allowed.

    Raises:
        AuthorizationError: The actor's role is not in ``allowed_roles``.
    """
    allowed = frozenset(allowed_roles)
    if actor.role not in allowed:
        allowed_codes = sorted(r.value for r in allowed)
        logger.warning(
            "authorization_denied",
            extra={
                "actor_id": actor.actor_id,
                "role": actor.role.value,
                "allowed_roles": allowed_codes,
            },
        )
        raise AuthorizationError(
            actor_id=actor.actor_id,
            role=actor.role.value,
            allowed_roles=allowed_codes,
        )
    return actor
