from __future__ import annotations

from datetime import date

from .actors import Actor, owns_module
from .errors import InvalidDateRange, InvalidDuration, NotFound, Unavailable
from .models import Instructor, Module
from .repository import SchedulingRepository


def require_module(repository: SchedulingRepository, module_id: int, actor: Actor) -> Module:
    module = repository.get_module(module_id)
    if module is None or not owns_module(module, actor):
        raise NotFound("Module non trouvé", field="moduleId")
    return module


def require_available_instructor(repository: SchedulingRepository, instructor_id: int) -> Instructor:
    instructor = repository.get_instructor(instructor_id)
    if instructor is None:
        raise NotFound("Intervenant non trouvé", field="instructorId")
    if not instructor.available:
        raise Unavailable(f"Intervenant non disponible : {instructor.full_name}", field="instructorId")
    return instructor


def check_duration(duration: int, maximum: int, *, field: str = "duration") -> int:
    if duration <= 0:
        raise InvalidDuration(field=field)
    if duration > maximum:
        raise InvalidDuration(f"La durée ne peut pas dépasser {maximum} minutes", field=field)
    return duration


def check_range(start: date, end: date) -> None:
    if end < start:
        raise InvalidDateRange(field="endDate")
