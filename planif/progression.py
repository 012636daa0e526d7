"""Completion of a session and the module/program progression cascade."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from flask import current_app, has_app_context

from .actors import Actor, can_complete
from .booking import find_conflicts
from .errors import AlreadyComplete, BookingConflict, Forbidden, InvalidDuration, InvalidTransition, NotFound
from .locks import KeyedLockRegistry, booking_keys, lock_registry, module_key, program_key
from .models import CANCELLED, COMPLETE, Module, Program, Session, next_progress_status
from .repository import SchedulingRepository
from .timeutils import add_minutes, parse_time


def module_progression(completed_minutes: int, required_hours: float) -> int:
    if required_hours <= 0:
        return 0
    completed_hours = completed_minutes / 60
    return min(100, round(completed_hours / required_hours * 100))


def program_progression(progressions: Iterable[int]) -> int:
    values = list(progressions)
    if not values:
        return 0
    return round(sum(values) / len(values))


@dataclass
class CompletionResult:
    session: Session
    module: Module
    program: Program
    hours_completed: float

    def as_dict(self) -> dict[str, object]:
        return {
            "session": self.session.as_dict(),
            "module": {
                "id": self.module.id,
                "code": self.module.code,
                "progression": self.module.progression,
                "status": self.module.status,
                "hoursCompleted": self.hours_completed,
                "hoursTotal": self.module.total_required_hours,
            },
            "program": {
                "id": self.program.id,
                "progression": self.program.progression,
                "status": self.program.status,
            },
        }


def refresh_module(repository: SchedulingRepository, module: Module, today: date) -> float:
    """Recompute progression and status of ``module``; return its completed hours."""

    completed_minutes = repository.completed_minutes(module.id)
    progression = module_progression(completed_minutes, module.total_required_hours)
    module.progression = progression
    module.status = next_progress_status(module.status, progression, complete=progression >= 100)
    if module.start_date is None:
        module.start_date = today
    if progression >= 100:
        module.end_date = today
    return completed_minutes / 60


def refresh_program(repository: SchedulingRepository, program: Program) -> None:
    modules = repository.program_modules(program.id)
    progression = program_progression(module.progression for module in modules)
    all_complete = bool(modules) and all(module.progression >= 100 for module in modules)
    program.progression = progression
    program.status = next_progress_status(program.status, progression, complete=all_complete)


def complete_session(
    repository: SchedulingRepository,
    session_id: int,
    actor: Actor,
    *,
    notes: str | None = None,
    real_duration: int | None = None,
    locks: KeyedLockRegistry = lock_registry,
) -> CompletionResult:
    session = repository.get_session(session_id)
    if session is None:
        raise NotFound("Séance introuvable", field="sessionId")
    if not can_complete(session, actor):
        raise Forbidden("Non autorisé à compléter cette séance")

    module = session.module
    program = module.program
    keys = [module_key(module.id), program_key(program.id)]
    if real_duration is not None:
        # A longer session may run into other bookings of the instructor or room.
        keys.extend(booking_keys(session.instructor_id, session.room))
    with locks.hold(*keys):
        with repository.transaction():
            repository.refresh(session)
            if session.status == COMPLETE:
                raise AlreadyComplete(field="sessionId")
            if session.status == CANCELLED:
                raise InvalidTransition("Une séance annulée ne peut pas être terminée", field="sessionId")
            if real_duration is not None and real_duration <= 0:
                raise InvalidDuration(field="realDuration")
            if real_duration is not None and real_duration > session.duration:
                conflicts = find_conflicts(
                    repository,
                    session.instructor_id,
                    session.date,
                    session.start_time,
                    add_minutes(session.start_time, real_duration),
                    session.room,
                    exclude_id=session.id,
                )
                if conflicts:
                    raise BookingConflict(conflicts)
            session.transition_to(COMPLETE)
            if notes:
                session.notes = notes
            if real_duration is not None:
                # The end time follows the effective duration.
                session.end_time = parse_time(add_minutes(session.start_time, real_duration))
                session.duration = real_duration
            repository.flush()

            hours_completed = refresh_module(repository, module, date.today())
            repository.flush()
            refresh_program(repository, program)

    if has_app_context():
        current_app.logger.info(
            "Session %s complete: module %s at %s%% (%s), program %s at %s%% (%s)",
            session.id,
            module.code,
            module.progression,
            module.status,
            program.code,
            program.progression,
            program.status,
        )
    return CompletionResult(session=session, module=module, program=program, hours_completed=hours_completed)
