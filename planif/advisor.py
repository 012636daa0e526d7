"""Read-only advice: free, scored slots for one session of a module."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List

from .actors import Actor
from .booking import BookingIndex
from .models import Instructor, Module, SESSION_CATEGORIES
from .errors import SchedulingError
from .repository import SchedulingRepository
from .scoring import ScoredSlot, rank_slots
from .settings import SchedulingSettings, current_settings
from .slots import generate_slots
from .validation import check_duration, check_range, require_available_instructor, require_module
from .workdays import CalendarWalker, week_bounds


@dataclass
class SuggestionQuery:
    module_id: int
    instructor_id: int
    category: str = "CM"
    duration: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    room: str | None = None
    limit: int | None = None


@dataclass
class SuggestionResult:
    module: Module
    instructor: Instructor
    start_date: date
    end_date: date
    suggestions: List[ScoredSlot] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        return {
            "suggestions": [suggestion.as_dict() for suggestion in self.suggestions],
            "metadata": {
                "module": {"id": self.module.id, "name": self.module.name},
                "instructor": {"id": self.instructor.id, "name": self.instructor.full_name},
                "period": {"start": self.start_date.isoformat(), "end": self.end_date.isoformat()},
                "total": len(self.suggestions),
            },
        }


def suggest_slots(
    repository: SchedulingRepository,
    query: SuggestionQuery,
    actor: Actor,
    settings: SchedulingSettings | None = None,
) -> SuggestionResult:
    settings = settings or current_settings()

    if query.category not in SESSION_CATEGORIES:
        raise SchedulingError(f"Type de séance inconnu : {query.category}", field="category")
    duration = check_duration(
        query.duration if query.duration is not None else settings.default_session_minutes,
        settings.max_session_minutes,
    )
    limit = query.limit if query.limit is not None else settings.suggestion_limit
    if limit <= 0:
        raise SchedulingError("La limite doit être strictement positive", field="limit")

    module = require_module(repository, query.module_id, actor)
    instructor = require_available_instructor(repository, query.instructor_id)

    start = query.start_date or date.today()
    end = query.end_date or start + timedelta(days=settings.suggestion_window_days)
    check_range(start, end)

    # Whole weeks are loaded so the weekly load of the first and last week is exact.
    load_start, _ = week_bounds(start)
    _, load_end = week_bounds(end)
    index = BookingIndex.from_sessions(
        repository.instructor_sessions(instructor.id, load_start, load_end),
        repository.room_sessions(query.room, start, end) if query.room else (),
    )

    walker = CalendarWalker(start, end, repository.active_period(), settings.working_weekdays)
    candidates = generate_slots(index, walker, duration, limit)
    ranked = rank_slots(
        candidates,
        lambda slot: index.sessions_in_week(slot.date),
        module.start_date,
    )
    return SuggestionResult(
        module=module,
        instructor=instructor,
        start_date=start,
        end_date=end,
        suggestions=ranked[:limit],
    )
