"""Persistence port used by the scheduling components."""
from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session as OrmSession

from .models import (
    CANCELLED,
    COMPLETE,
    AcademicPeriod,
    Instructor,
    Module,
    Program,
    Session,
)


class SchedulingRepository:
    """Interface through which the engine reads and writes its records."""

    def get_module(self, module_id: int) -> Optional[Module]:  # pragma: no cover - interface
        raise NotImplementedError

    def get_instructor(self, instructor_id: int) -> Optional[Instructor]:  # pragma: no cover - interface
        raise NotImplementedError

    def get_session(self, session_id: int) -> Optional[Session]:  # pragma: no cover - interface
        raise NotImplementedError

    def active_period(self) -> Optional[AcademicPeriod]:  # pragma: no cover - interface
        raise NotImplementedError

    def instructor_sessions(
        self, instructor_id: int, start: date, end: date
    ) -> List[Session]:  # pragma: no cover - interface
        """Non cancelled sessions of an instructor between two days (inclusive)."""
        raise NotImplementedError

    def room_sessions(self, room: str, start: date, end: date) -> List[Session]:  # pragma: no cover - interface
        """Non cancelled sessions held in ``room`` between two days (inclusive)."""
        raise NotImplementedError

    def completed_minutes(self, module_id: int) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    def program_modules(self, program_id: int) -> List[Module]:  # pragma: no cover - interface
        raise NotImplementedError

    def get_program(self, program_id: int) -> Optional[Program]:  # pragma: no cover - interface
        raise NotImplementedError

    def add(self, record: object) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def flush(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def refresh(self, record: object) -> None:  # pragma: no cover - interface
        """Reload ``record`` from storage."""
        raise NotImplementedError

    def transaction(self):  # pragma: no cover - interface
        """Context manager committing on success and rolling back on error."""
        raise NotImplementedError


class SqlAlchemyRepository(SchedulingRepository):
    def __init__(self, session: OrmSession) -> None:
        self.session = session

    def get_module(self, module_id: int) -> Optional[Module]:
        return self.session.get(Module, module_id)

    def get_instructor(self, instructor_id: int) -> Optional[Instructor]:
        return self.session.get(Instructor, instructor_id)

    def get_session(self, session_id: int) -> Optional[Session]:
        return self.session.get(Session, session_id)

    def get_program(self, program_id: int) -> Optional[Program]:
        return self.session.get(Program, program_id)

    def active_period(self) -> Optional[AcademicPeriod]:
        statement = (
            select(AcademicPeriod)
            .where(AcademicPeriod.active.is_(True))
            .order_by(AcademicPeriod.id.desc())
        )
        return self.session.scalars(statement).first()

    def instructor_sessions(self, instructor_id: int, start: date, end: date) -> List[Session]:
        statement = (
            select(Session)
            .where(
                Session.instructor_id == instructor_id,
                Session.date >= start,
                Session.date <= end,
                Session.status != CANCELLED,
            )
            .order_by(Session.date, Session.start_time)
        )
        return list(self.session.scalars(statement))

    def room_sessions(self, room: str, start: date, end: date) -> List[Session]:
        statement = (
            select(Session)
            .where(
                Session.room == room,
                Session.date >= start,
                Session.date <= end,
                Session.status != CANCELLED,
            )
            .order_by(Session.date, Session.start_time)
        )
        return list(self.session.scalars(statement))

    def completed_minutes(self, module_id: int) -> int:
        statement = select(func.coalesce(func.sum(Session.duration), 0)).where(
            Session.module_id == module_id, Session.status == COMPLETE
        )
        return int(self.session.scalar(statement) or 0)

    def program_modules(self, program_id: int) -> List[Module]:
        statement = select(Module).where(Module.program_id == program_id).order_by(Module.id)
        return list(self.session.scalars(statement))

    def add(self, record: object) -> None:
        self.session.add(record)

    def flush(self) -> None:
        self.session.flush()

    def refresh(self, record: object) -> None:
        self.session.refresh(record)

    @contextmanager
    def transaction(self) -> Iterator[OrmSession]:
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
