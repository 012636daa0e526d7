"""Automatic allocation of a module's required hours across sessions."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List

from flask import current_app, has_app_context
from sqlalchemy.exc import IntegrityError

from .actors import Actor
from .booking import BookingIndex, find_conflicts
from .errors import BookingConflict, NothingToPlan, SchedulingError
from .locks import KeyedLockRegistry, booking_keys, lock_registry
from .models import HOUR_BUCKETS, PLANNED, Instructor, Module, Session
from .reporting import PlanningReporter
from .repository import SchedulingRepository
from .settings import SchedulingSettings, current_settings
from .slots import first_free_slot
from .timeutils import parse_time
from .validation import check_duration, check_range, require_available_instructor, require_module
from .workdays import CalendarWalker, week_bounds


@dataclass
class PlanRequest:
    module_id: int
    instructor_id: int
    start_date: date
    end_date: date | None = None
    session_duration: int | None = None
    room: str | None = None
    strategy: str = "sequential"
    dry_run: bool = False


@dataclass
class PendingSession:
    module_id: int
    instructor_id: int
    date: date
    start: str
    end: str
    duration: int
    category: str
    status: str = PLANNED
    room: str | None = None

    def to_model(self) -> Session:
        return Session(
            module_id=self.module_id,
            instructor_id=self.instructor_id,
            date=self.date,
            start_time=parse_time(self.start),
            end_time=parse_time(self.end),
            duration=self.duration,
            category=self.category,
            status=self.status,
            room=self.room,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "moduleId": self.module_id,
            "instructorId": self.instructor_id,
            "date": self.date.isoformat(),
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "category": self.category,
            "status": self.status,
            "room": self.room,
        }


@dataclass
class ModulePlan:
    hours_required: float
    sessions: List[PendingSession] = field(default_factory=list)
    hours_planned: float = 0.0
    conflicts_avoided: int = 0

    @property
    def hours_remaining(self) -> float:
        return max(self.hours_required - self.hours_planned, 0.0)

    @property
    def no_capacity(self) -> bool:
        return not self.sessions


@dataclass
class PlanningContext:
    module: Module
    instructor: Instructor
    walker: CalendarWalker
    index: BookingIndex
    duration: int
    buckets: Dict[str, int]
    reporter: PlanningReporter
    room: str | None = None


class PlanningStrategy:
    """Turns a planning context into pending sessions."""

    name = "abstract"

    def plan(self, context: PlanningContext) -> ModulePlan:  # pragma: no cover - interface
        raise NotImplementedError


def within_caps(index: BookingIndex, instructor: Instructor, day: date, duration: int) -> bool:
    if instructor.max_hours_day and index.booked_minutes(day) + duration > instructor.max_hours_day * 60:
        return False
    if (
        instructor.max_hours_week
        and index.booked_minutes_in_week(day) + duration > instructor.max_hours_week * 60
    ):
        return False
    return True


class SequentialBucketStrategy(PlanningStrategy):
    """First-fit planning of CM, then TD, then TP hours.

    Each bucket walks the whole range again and books at most one session a
    day; sessions planned earlier in the run stay in the booking index so
    later buckets cannot overlap them.
    """

    name = "sequential"

    def plan(self, context: PlanningContext) -> ModulePlan:
        required = float(sum(hours for hours in context.buckets.values() if hours > 0))
        plan = ModulePlan(hours_required=required)
        session_hours = context.duration / 60
        for category in HOUR_BUCKETS:
            hours = context.buckets.get(category, 0)
            if hours <= 0:
                continue
            remaining = float(hours)
            for day in context.walker:
                if remaining <= 0:
                    break
                slot = None
                if within_caps(context.index, context.instructor, day, context.duration):
                    slot = first_free_slot(context.index, day, context.duration)
                if slot is None:
                    plan.conflicts_avoided += 1
                    continue
                context.index.book(day, slot.start, slot.end, label=category)
                plan.sessions.append(
                    PendingSession(
                        module_id=context.module.id,
                        instructor_id=context.instructor.id,
                        date=day,
                        start=slot.start,
                        end=slot.end,
                        duration=context.duration,
                        category=category,
                        room=context.room,
                    )
                )
                context.reporter.session_planned(category, day, slot.start, slot.end)
                plan.hours_planned += session_hours
                remaining -= session_hours
            if remaining > 0:
                context.reporter.warning(
                    f"{category} : {remaining:g} h restent sans créneau sur la période"
                )
        return plan


PLANNING_STRATEGIES: Dict[str, type[PlanningStrategy]] = {
    SequentialBucketStrategy.name: SequentialBucketStrategy,
}


def get_strategy(name: str) -> PlanningStrategy:
    try:
        return PLANNING_STRATEGIES[name]()
    except KeyError:
        raise SchedulingError(f"Stratégie de planification inconnue : {name}", field="strategy") from None


@dataclass
class PlanOutcome:
    plan: ModulePlan
    committed: List[Session] = field(default_factory=list)
    rejected: List[dict[str, object]] = field(default_factory=list)
    messages: List[dict[str, str]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def hours_planned(self) -> float:
        if self.dry_run:
            return self.plan.hours_planned
        return sum(session.duration for session in self.committed) / 60

    @property
    def hours_remaining(self) -> float:
        return max(self.plan.hours_required - self.hours_planned, 0.0)

    def as_dict(self) -> dict[str, object]:
        if self.dry_run:
            sessions = [pending.as_dict() for pending in self.plan.sessions]
        else:
            sessions = [session.as_dict() for session in self.committed]
        return {
            "sessions": sessions,
            "hoursPlanned": self.hours_planned,
            "hoursRemaining": self.hours_remaining,
            "conflictsAvoided": self.plan.conflicts_avoided,
            "committed": len(self.committed),
            "rejected": list(self.rejected),
            "noCapacity": self.plan.no_capacity,
            "dryRun": self.dry_run,
            "messages": list(self.messages),
        }


def persist_plan(
    repository: SchedulingRepository, plan: ModulePlan, reporter: PlanningReporter
) -> PlanOutcome:
    """Store pending sessions one by one.

    Every session is its own transaction: a rejected insert is reported and
    the sessions committed before it are kept.
    """

    outcome = PlanOutcome(plan=plan)
    for position, pending in enumerate(plan.sessions, start=1):
        try:
            with repository.transaction():
                conflicts = find_conflicts(
                    repository, pending.instructor_id, pending.date, pending.start, pending.end, pending.room
                )
                if conflicts:
                    raise BookingConflict(conflicts)
                session = pending.to_model()
                repository.add(session)
                repository.flush()
        except (SchedulingError, IntegrityError) as exc:
            if isinstance(exc, BookingConflict):
                reason = "; ".join(exc.conflicts)
            elif isinstance(exc, SchedulingError):
                reason = exc.message
            else:
                reason = "Contrainte d'unicité violée"
            outcome.rejected.append({"position": position, **pending.as_dict(), "reason": reason})
            reporter.warning(
                f"Séance {position}/{len(plan.sessions)} du {pending.date:%d/%m/%Y} non enregistrée : {reason}"
            )
            continue
        outcome.committed.append(session)
    return outcome


def plan_module(
    repository: SchedulingRepository,
    request: PlanRequest,
    actor: Actor,
    settings: SchedulingSettings | None = None,
    locks: KeyedLockRegistry = lock_registry,
    strategy: PlanningStrategy | None = None,
) -> PlanOutcome:
    settings = settings or current_settings()
    strategy = strategy or get_strategy(request.strategy)
    duration = check_duration(
        request.session_duration if request.session_duration is not None else settings.default_session_minutes,
        settings.max_session_minutes,
        field="sessionDuration",
    )

    module = require_module(repository, request.module_id, actor)
    buckets = module.bucket_hours()
    if sum(buckets.values()) <= 0:
        raise NothingToPlan(field="moduleId")
    instructor = require_available_instructor(repository, request.instructor_id)

    start = request.start_date
    end = request.end_date or start + timedelta(days=settings.planning_window_days)
    check_range(start, end)

    reporter = PlanningReporter(module.code)
    reporter.set_window(start, end)

    # The booking index is read, extended and written back under one lock.
    with locks.hold(*booking_keys(instructor.id, request.room)):
        load_start, _ = week_bounds(start)
        _, load_end = week_bounds(end)
        index = BookingIndex.from_sessions(
            repository.instructor_sessions(instructor.id, load_start, load_end),
            repository.room_sessions(request.room, start, end) if request.room else (),
        )
        context = PlanningContext(
            module=module,
            instructor=instructor,
            walker=CalendarWalker(start, end, repository.active_period(), settings.working_weekdays),
            index=index,
            duration=duration,
            buckets=buckets,
            reporter=reporter,
            room=request.room,
        )
        plan = strategy.plan(context)
        if plan.no_capacity:
            reporter.warning("Aucun créneau libre sur la période demandée")

        if request.dry_run:
            outcome = PlanOutcome(plan=plan, dry_run=True)
        else:
            outcome = persist_plan(repository, plan, reporter)

    reporter.info(reporter.summary(len(plan.sessions) if request.dry_run else len(outcome.committed)))
    outcome.messages = reporter.messages()
    if has_app_context():
        current_app.logger.info(
            "Planning %s: %s session(s) planned, %s committed, %s rejected, %s conflict(s) avoided",
            module.code,
            len(plan.sessions),
            len(outcome.committed),
            len(outcome.rejected),
            plan.conflicts_avoided,
        )
    return outcome
