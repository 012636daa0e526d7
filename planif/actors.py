from __future__ import annotations

from dataclasses import dataclass

from .models import Module, Session


ADMIN = "ADMIN"
COORDINATOR = "COORDINATOR"
INSTRUCTOR = "INSTRUCTOR"

ROLES = (ADMIN, COORDINATOR, INSTRUCTOR)
COORDINATING_ROLES = frozenset({ADMIN, COORDINATOR})


@dataclass(frozen=True)
class Actor:
    """Caller identity, as supplied by the authentication layer."""

    user_id: str | None
    role: str = INSTRUCTOR
    email: str | None = None

    @property
    def is_coordinator(self) -> bool:
        return self.role in COORDINATING_ROLES


def owns_module(module: Module, actor: Actor) -> bool:
    if module.owner_id is None:
        return actor.role == ADMIN
    return module.owner_id == actor.user_id or actor.role == ADMIN


def can_complete(session: Session, actor: Actor) -> bool:
    if actor.is_coordinator:
        return True
    instructor = session.instructor
    if instructor is None or not instructor.email or not actor.email:
        return False
    return instructor.email.strip().lower() == actor.email.strip().lower()


def can_change_status(session: Session, actor: Actor) -> bool:
    # Same rule as completion: coordinators, or the session's own instructor.
    return can_complete(session, actor)
