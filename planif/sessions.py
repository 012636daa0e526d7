"""Direct creation of a session and forward status changes."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from flask import current_app, has_app_context

from .actors import Actor, can_change_status
from .booking import find_conflicts
from .errors import BookingConflict, Forbidden, InvalidDuration, NotFound, SchedulingError
from .locks import KeyedLockRegistry, booking_keys, lock_registry
from .models import COMPLETE, CONFIRMED, PLANNED, SESSION_CATEGORIES, Session
from .progression import complete_session
from .repository import SchedulingRepository
from .timeutils import duration_minutes, format_time, parse_time
from .validation import require_module


INITIAL_STATUSES = (PLANNED, CONFIRMED)


@dataclass
class SessionDraft:
    module_id: int
    instructor_id: int
    date: date
    start: str
    end: str
    category: str
    room: str | None = None
    building: str | None = None
    status: str = PLANNED
    notes: str | None = None


def create_session(
    repository: SchedulingRepository,
    draft: SessionDraft,
    actor: Actor,
    locks: KeyedLockRegistry = lock_registry,
) -> Session:
    if draft.category not in SESSION_CATEGORIES:
        raise SchedulingError(f"Type de séance inconnu : {draft.category}", field="category")
    if draft.status not in INITIAL_STATUSES:
        raise SchedulingError(f"Statut initial invalide : {draft.status}", field="status")
    start = format_time(parse_time(draft.start, field="heureDebut"))
    end = format_time(parse_time(draft.end, field="heureFin"))
    duration = duration_minutes(start, end)
    if duration <= 0:
        raise InvalidDuration("L'heure de fin doit suivre l'heure de début", field="heureFin")

    module = require_module(repository, draft.module_id, actor)
    instructor = repository.get_instructor(draft.instructor_id)
    if instructor is None:
        raise NotFound("Intervenant non trouvé", field="instructorId")

    with locks.hold(*booking_keys(instructor.id, draft.room)):
        with repository.transaction():
            conflicts = find_conflicts(repository, instructor.id, draft.date, start, end, draft.room)
            if conflicts:
                raise BookingConflict(conflicts)
            session = Session(
                module_id=module.id,
                instructor_id=instructor.id,
                date=draft.date,
                start_time=parse_time(start),
                end_time=parse_time(end),
                duration=duration,
                category=draft.category,
                status=draft.status,
                room=draft.room,
                building=draft.building,
                notes=draft.notes,
            )
            repository.add(session)
            repository.flush()
    if has_app_context():
        current_app.logger.info(
            "Session %s created for module %s on %s %s-%s", session.id, module.code, draft.date, start, end
        )
    return session


def change_status(
    repository: SchedulingRepository, session_id: int, status: str, actor: Actor
) -> Session:
    session = repository.get_session(session_id)
    if session is None:
        raise NotFound("Séance introuvable", field="sessionId")
    if not can_change_status(session, actor):
        raise Forbidden("Non autorisé à modifier cette séance")
    if status == COMPLETE:
        # Completion always goes through the progression cascade.
        return complete_session(repository, session_id, actor).session
    with repository.transaction():
        session.transition_to(status)
    return session
