from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Iterator, List

from .booking import BookingIndex
from .timeutils import add_minutes, duration_minutes, to_minutes
from .workdays import WEEKDAY_NAMES


MORNING = "morning"
AFTERNOON = "afternoon"

# Canonical day windows; the 12:00-14:00 lunch break is never offered.
CANONICAL_WINDOWS: List[tuple[str, str]] = [
    ("08:00", "10:00"),
    ("10:15", "12:00"),
    ("14:00", "16:00"),
    ("16:15", "18:00"),
]

NOON = to_minutes("12:00")


@dataclass
class Slot:
    date: date
    start: str
    end: str
    duration: int
    period: str

    @property
    def weekday(self) -> str:
        return WEEKDAY_NAMES[self.date.weekday()]

    @property
    def is_morning(self) -> bool:
        return self.period == MORNING

    def as_dict(self) -> dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "weekday": self.weekday,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "period": self.period,
        }


def period_of(start: str) -> str:
    return MORNING if to_minutes(start) < NOON else AFTERNOON


def day_slots(index: BookingIndex, day: date, duration: int) -> list[Slot]:
    """Return every free canonical window of ``day`` long enough for ``duration``.

    The whole window has to be free, the returned slot is then truncated to the
    requested duration.
    """

    slots: list[Slot] = []
    for window_start, window_end in CANONICAL_WINDOWS:
        if duration_minutes(window_start, window_end) < duration:
            continue
        if not index.is_free(day, window_start, window_end):
            continue
        slots.append(
            Slot(
                date=day,
                start=window_start,
                end=add_minutes(window_start, duration),
                duration=duration,
                period=period_of(window_start),
            )
        )
    return slots


def generate_slots(
    index: BookingIndex, days: Iterable[date], duration: int, limit: int | None = None
) -> list[Slot]:
    slots: list[Slot] = []
    if limit is not None and limit <= 0:
        return slots
    for slot in iter_slots(index, days, duration):
        slots.append(slot)
        if limit is not None and len(slots) >= limit:
            break
    return slots


def iter_slots(index: BookingIndex, days: Iterable[date], duration: int) -> Iterator[Slot]:
    for day in days:
        yield from day_slots(index, day, duration)


def first_free_slot(index: BookingIndex, day: date, duration: int) -> Slot | None:
    for slot in day_slots(index, day, duration):
        return slot
    return None
