from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Iterator, Protocol, Sequence


DEFAULT_WORKING_WEEKDAYS: tuple[int, ...] = (0, 1, 2, 3, 4)

WEEKDAY_NAMES = ("Lundi", "Mardi", "Mercredi", "Jeudi", "Vendredi", "Samedi", "Dimanche")


class RecessCalendar(Protocol):
    def is_recess(self, day: date) -> bool:  # pragma: no cover - interface
        ...


def daterange(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_bounds(day: date) -> tuple[date, date]:
    """Return the Monday and Sunday of the ISO week containing ``day``."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


class CalendarWalker:
    """Working days between two dates, outside the recess windows of a period.

    The walker is restartable: every call to ``iter()`` walks the range again
    from the first day.
    """

    def __init__(
        self,
        range_start: date,
        range_end: date,
        period: RecessCalendar | None = None,
        weekdays: Sequence[int] = DEFAULT_WORKING_WEEKDAYS,
    ) -> None:
        self.range_start = range_start
        self.range_end = range_end
        self.period = period
        self.weekdays = frozenset(weekdays)

    def allows(self, day: date) -> bool:
        if day.weekday() not in self.weekdays:
            return False
        if self.period is not None and self.period.is_recess(day):
            return False
        return True

    def __iter__(self) -> Iterator[date]:
        for day in daterange(self.range_start, self.range_end):
            if self.allows(day):
                yield day

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"CalendarWalker<{self.range_start}→{self.range_end}>"
