from __future__ import annotations

import datetime as dt
from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from . import db
from .errors import InvalidTransition
from .timeutils import format_time


SESSION_CATEGORIES = ("CM", "TD", "TP", "EXAM", "MAKEUP")
HOUR_BUCKETS = ("CM", "TD", "TP")

PLANNED = "PLANNED"
CONFIRMED = "CONFIRMED"
IN_PROGRESS = "IN_PROGRESS"
COMPLETE = "COMPLETE"
POSTPONED = "POSTPONED"
CANCELLED = "CANCELLED"

SESSION_STATUSES = (PLANNED, CONFIRMED, IN_PROGRESS, COMPLETE, POSTPONED, CANCELLED)
PROGRESS_STATUSES = (PLANNED, IN_PROGRESS, COMPLETE)

SESSION_TRANSITIONS: dict[str, frozenset[str]] = {
    PLANNED: frozenset({CONFIRMED, IN_PROGRESS, COMPLETE, POSTPONED, CANCELLED}),
    CONFIRMED: frozenset({IN_PROGRESS, COMPLETE, POSTPONED, CANCELLED}),
    POSTPONED: frozenset({CONFIRMED, IN_PROGRESS, COMPLETE, CANCELLED}),
    IN_PROGRESS: frozenset({COMPLETE, CANCELLED}),
    COMPLETE: frozenset(),
    CANCELLED: frozenset(),
}

STATUS_LABELS = {
    PLANNED: "Planifié",
    CONFIRMED: "Confirmé",
    IN_PROGRESS: "En cours",
    COMPLETE: "Terminé",
    POSTPONED: "Reporté",
    CANCELLED: "Annulé",
}


class TimeStampedModel:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


def next_progress_status(current: str, progression: int, *, complete: bool) -> str:
    """Return the lifecycle status matching a freshly computed progression."""

    if complete:
        return COMPLETE
    if progression > 0 and current == PLANNED:
        return IN_PROGRESS
    return current


class AcademicPeriod(db.Model, TimeStampedModel):
    __tablename__ = "academic_period"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    year: Mapped[Optional[str]] = mapped_column(String(20))
    winter_break_start: Mapped[Optional[date]] = mapped_column(Date)
    winter_break_end: Mapped[Optional[date]] = mapped_column(Date)
    spring_break_start: Mapped[Optional[date]] = mapped_column(Date)
    spring_break_end: Mapped[Optional[date]] = mapped_column(Date)
    active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @classmethod
    def current(cls) -> Optional["AcademicPeriod"]:
        return cls.query.filter_by(active=True).order_by(cls.id.desc()).first()

    def activate(self) -> None:
        """Mark this period active; any other active period is deactivated."""

        query = AcademicPeriod.query.filter(AcademicPeriod.active.is_(True))
        if self.id is not None:
            query = query.filter(AcademicPeriod.id != self.id)
        for other in query.all():
            other.active = False
        self.active = True

    def recess_windows(self) -> list[tuple[date, date]]:
        windows: list[tuple[date, date]] = []
        for start, end in (
            (self.winter_break_start, self.winter_break_end),
            (self.spring_break_start, self.spring_break_end),
        ):
            if start is None or end is None:
                continue
            windows.append((start, end) if start <= end else (end, start))
        return windows

    def is_recess(self, day: date) -> bool:
        return any(start <= day <= end for start, end in self.recess_windows())

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"AcademicPeriod<{self.name}{' active' if self.active else ''}>"


class Program(db.Model, TimeStampedModel):
    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[Optional[str]] = mapped_column(String(64))
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    progression: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=PLANNED, nullable=False)

    modules: Mapped[List["Module"]] = relationship(
        back_populates="program", cascade="all, delete-orphan", order_by="Module.code"
    )

    __table_args__ = (
        CheckConstraint("progression >= 0 AND progression <= 100", name="chk_program_progression"),
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Program<{self.code}>"


class Instructor(db.Model, TimeStampedModel):
    id: Mapped[int] = mapped_column(primary_key=True)
    civility: Mapped[Optional[str]] = mapped_column(String(10))
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    max_hours_week: Mapped[Optional[int]] = mapped_column(Integer, default=20)
    max_hours_day: Mapped[Optional[int]] = mapped_column(Integer, default=6)

    sessions: Mapped[List["Session"]] = relationship(back_populates="instructor")
    modules: Mapped[List["Module"]] = relationship(back_populates="instructor")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Instructor<{self.full_name}>"


class Room(db.Model, TimeStampedModel):
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=30)
    building: Mapped[Optional[str]] = mapped_column(String(120))

    def __repr__(self) -> str:  # pragma: no cover
        return f"Room<{self.id} {self.name}>"


class Module(db.Model, TimeStampedModel):
    id: Mapped[int] = mapped_column(primary_key=True)
    program_id: Mapped[int] = mapped_column(ForeignKey("program.id"), nullable=False)
    instructor_id: Mapped[Optional[int]] = mapped_column(ForeignKey("instructor.id"))
    owner_id: Mapped[Optional[str]] = mapped_column(String(64))
    code: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cm: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    td: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tpe: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    progression: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=PLANNED, nullable=False)

    program: Mapped[Program] = relationship(back_populates="modules")
    instructor: Mapped[Optional[Instructor]] = relationship(back_populates="modules")
    sessions: Mapped[List["Session"]] = relationship(
        back_populates="module", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("cm >= 0 AND td >= 0 AND tp >= 0 AND tpe >= 0", name="chk_module_hours"),
        CheckConstraint("progression >= 0 AND progression <= 100", name="chk_module_progression"),
    )

    @property
    def total_required_hours(self) -> int:
        """VHT: lecture, tutorial, lab and independent study hours."""
        return (self.cm or 0) + (self.td or 0) + (self.tp or 0) + (self.tpe or 0)

    def bucket_hours(self) -> dict[str, int]:
        return {"CM": self.cm or 0, "TD": self.td or 0, "TP": self.tp or 0}

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Module<{self.code}>"


_ACTIVE_BOOKING = text("status != 'CANCELLED'")


class Session(db.Model, TimeStampedModel):
    id: Mapped[int] = mapped_column(primary_key=True)
    module_id: Mapped[int] = mapped_column(ForeignKey("module.id"), nullable=False)
    instructor_id: Mapped[int] = mapped_column(ForeignKey("instructor.id"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(10), nullable=False, default="CM")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=PLANNED)
    # Loose reference to Room.name
    room: Mapped[Optional[str]] = mapped_column(String(120))
    building: Mapped[Optional[str]] = mapped_column(String(120))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    module: Mapped[Module] = relationship(back_populates="sessions")
    instructor: Mapped[Instructor] = relationship(back_populates="sessions")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="chk_session_time_order"),
        CheckConstraint("duration > 0", name="chk_session_duration_positive"),
        Index(
            "uq_session_instructor_start",
            "instructor_id",
            "date",
            "start_time",
            unique=True,
            sqlite_where=_ACTIVE_BOOKING,
            postgresql_where=_ACTIVE_BOOKING,
        ),
        Index("ix_session_room_date", "room", "date"),
    )

    @property
    def is_active(self) -> bool:
        return self.status != CANCELLED

    def transition_to(self, status: str) -> None:
        if status not in SESSION_STATUSES:
            raise InvalidTransition(f"Statut inconnu : {status}", field="status")
        if status == self.status:
            return
        if status not in SESSION_TRANSITIONS.get(self.status, frozenset()):
            raise InvalidTransition(
                f"Impossible de passer de {STATUS_LABELS[self.status]} à {STATUS_LABELS[status]}",
                field="status",
            )
        self.status = status

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "moduleId": self.module_id,
            "instructorId": self.instructor_id,
            "date": self.date.isoformat(),
            "start": format_time(self.start_time),
            "end": format_time(self.end_time),
            "duration": self.duration,
            "category": self.category,
            "status": self.status,
            "room": self.room,
            "building": self.building,
            "notes": self.notes,
        }

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Session {self.category} {self.date:%Y-%m-%d} {self.start_time:%H:%M}>"
