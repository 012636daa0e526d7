"""Per-day index of booked intervals used to reject conflicting slots."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, Protocol

from .models import CANCELLED
from .repository import SchedulingRepository
from .timeutils import TimeLike, from_minutes, to_minutes
from .workdays import week_bounds


class BookedSession(Protocol):
    date: date
    start_time: time
    end_time: time
    status: str


@dataclass(frozen=True)
class Booking:
    start: int
    end: int
    label: str | None = None

    @property
    def minutes(self) -> int:
        return self.end - self.start

    def overlaps(self, start: int, end: int) -> bool:
        return self.start < end and self.end > start

    def describe(self) -> str:
        span = f"{from_minutes(self.start)} à {from_minutes(self.end)}"
        return f"{self.label} de {span}" if self.label else span


class BookingIndex:
    """Booked intervals of one instructor and, optionally, one room.

    Cancelled sessions never enter the index. Only the instructor's own
    bookings count towards the daily and weekly load.
    """

    def __init__(self) -> None:
        self._instructor: dict[date, list[Booking]] = defaultdict(list)
        self._room: dict[date, list[Booking]] = defaultdict(list)

    @classmethod
    def from_sessions(
        cls,
        instructor_sessions: Iterable[BookedSession],
        room_sessions: Iterable[BookedSession] = (),
    ) -> "BookingIndex":
        index = cls()
        for session in instructor_sessions:
            if session.status == CANCELLED:
                continue
            index.book(session.date, session.start_time, session.end_time)
        for session in room_sessions:
            if session.status == CANCELLED:
                continue
            index.book_room(session.date, session.start_time, session.end_time)
        return index

    def book(self, day: date, start: TimeLike, end: TimeLike, label: str | None = None) -> Booking:
        booking = Booking(to_minutes(start), to_minutes(end), label)
        self._instructor[day].append(booking)
        return booking

    def book_room(self, day: date, start: TimeLike, end: TimeLike, label: str | None = None) -> Booking:
        booking = Booking(to_minutes(start), to_minutes(end), label)
        self._room[day].append(booking)
        return booking

    def bookings_on(self, day: date) -> list[Booking]:
        return [*self._instructor.get(day, ()), *self._room.get(day, ())]

    def conflicts(self, day: date, start: TimeLike, end: TimeLike) -> list[Booking]:
        start_min, end_min = to_minutes(start), to_minutes(end)
        return [booking for booking in self.bookings_on(day) if booking.overlaps(start_min, end_min)]

    def is_free(self, day: date, start: TimeLike, end: TimeLike) -> bool:
        start_min, end_min = to_minutes(start), to_minutes(end)
        for booking in self.bookings_on(day):
            if booking.overlaps(start_min, end_min):
                return False
        return True

    def booked_minutes(self, day: date) -> int:
        return sum(booking.minutes for booking in self._instructor.get(day, ()))

    def booked_minutes_in_week(self, day: date) -> int:
        week_start, week_end = week_bounds(day)
        return sum(
            booking.minutes
            for booked_day, bookings in self._instructor.items()
            if week_start <= booked_day <= week_end
            for booking in bookings
        )

    def sessions_in_week(self, day: date) -> int:
        week_start, week_end = week_bounds(day)
        return sum(
            len(bookings)
            for booked_day, bookings in self._instructor.items()
            if week_start <= booked_day <= week_end
        )


def find_conflicts(
    repository: SchedulingRepository,
    instructor_id: int,
    day: date,
    start: TimeLike,
    end: TimeLike,
    room: str | None = None,
    *,
    exclude_id: int | None = None,
) -> list[str]:
    """French descriptions of the stored bookings overlapping ``start``-``end``.

    ``exclude_id`` leaves one session out, so a session can be checked against
    everything but itself.
    """

    def others(sessions):
        return [session for session in sessions if exclude_id is None or session.id != exclude_id]

    instructor_index = BookingIndex.from_sessions(others(repository.instructor_sessions(instructor_id, day, day)))
    messages = [
        f"Conflit avec l'intervenant de {booking.describe()}"
        for booking in instructor_index.conflicts(day, start, end)
    ]
    if room:
        room_index = BookingIndex.from_sessions((), others(repository.room_sessions(room, day, day)))
        messages.extend(
            f"Conflit avec la salle {room} de {booking.describe()}"
            for booking in room_index.conflicts(day, start, end)
        )
    return messages
