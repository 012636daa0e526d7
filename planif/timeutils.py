from __future__ import annotations

import re
from datetime import time

from .errors import InvalidTimeFormat, TimeOutOfRange


MINUTES_PER_DAY = 24 * 60
TIME_FORMAT = "%H:%M"

_TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")

TimeLike = str | time


def to_minutes(value: TimeLike, *, field: str = "heure") -> int:
    """Return the number of minutes elapsed since midnight for ``value``.

    ``value`` is either a ``datetime.time`` or a zero padded ``HH:MM`` string.
    """

    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise InvalidTimeFormat(field=field)
    match = _TIME_PATTERN.match(value.strip())
    if match is None:
        raise InvalidTimeFormat(f"Heure invalide : {value!r} (format HH:MM)", field=field)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(f"Heure invalide : {value!r} (format HH:MM)", field=field)
    return hours * 60 + minutes


def from_minutes(total: int) -> str:
    if total < 0 or total >= MINUTES_PER_DAY:
        raise TimeOutOfRange()
    return f"{total // 60:02d}:{total % 60:02d}"


def parse_time(value: TimeLike, *, field: str = "heure") -> time:
    total = to_minutes(value, field=field)
    return time(total // 60, total % 60)


def format_time(value: TimeLike) -> str:
    return from_minutes(to_minutes(value))


def duration_minutes(start: TimeLike, end: TimeLike) -> int:
    return to_minutes(end, field="heureFin") - to_minutes(start, field="heureDebut")


def add_minutes(start: TimeLike, minutes: int) -> str:
    # Crossing midnight is rejected rather than wrapped.
    return from_minutes(to_minutes(start, field="heureDebut") + int(minutes))


def overlaps(start_a: TimeLike, end_a: TimeLike, start_b: TimeLike, end_b: TimeLike) -> bool:
    return to_minutes(start_a) < to_minutes(end_b) and to_minutes(end_a) > to_minutes(start_b)
