from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator

from flask import current_app, has_app_context


class KeyedLockRegistry:
    """In-memory registry of re-entrant locks, one per key.

    ``hold`` acquires several keys in a canonical order so two callers asking
    for overlapping key sets cannot deadlock.
    """

    def __init__(self) -> None:
        self._locks: Dict[Hashable, threading.RLock] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> threading.RLock:
        with self._lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        ordered = sorted(set(keys), key=repr)
        acquired: list[threading.RLock] = []
        try:
            for key in ordered:
                lock = self.get(key)
                if not lock.acquire(blocking=False):
                    if has_app_context():
                        current_app.logger.warning("Waiting for lock %r", key)
                    lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)


def instructor_key(instructor_id: int) -> tuple[str, int]:
    return ("instructor", instructor_id)


def module_key(module_id: int) -> tuple[str, int]:
    return ("module", module_id)


def program_key(program_id: int) -> tuple[str, int]:
    return ("program", program_id)


def room_key(room: str) -> tuple[str, str]:
    return ("room", room)


def booking_keys(instructor_id: int, room: str | None = None) -> tuple[tuple[str, object], ...]:
    """Keys guarding the bookings of an instructor and, when given, a room."""
    if room:
        return (instructor_key(instructor_id), room_key(room))
    return (instructor_key(instructor_id),)


lock_registry = KeyedLockRegistry()
