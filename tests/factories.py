import unittest
import uuid
from datetime import date, time

from config import TestConfig
from planif import create_app, db
from planif.actors import ADMIN, COORDINATOR, Actor
from planif.locks import KeyedLockRegistry
from planif.models import PLANNED, Instructor, Module, Program, Session
from planif.repository import SqlAlchemyRepository


OWNER = Actor(user_id="coordinateur", role=COORDINATOR, email="coordination@example.com")
ADMINISTRATOR = Actor(user_id="admin", role=ADMIN)


class RecordingLockRegistry(KeyedLockRegistry):
    """Lock registry remembering every key set it was asked to hold."""

    def __init__(self) -> None:
        super().__init__()
        self.held: list[tuple] = []

    def hold(self, *keys):
        self.held.append(keys)
        return super().hold(*keys)


class DatabaseTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.app = create_app(TestConfig)
        self.app_context = self.app.app_context()
        self.app_context.push()
        db.create_all()
        self.repository = SqlAlchemyRepository(db.session)

    def tearDown(self) -> None:
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def make_program(self, **overrides) -> Program:
        values = {"code": f"P-{uuid.uuid4().hex[:8]}", "name": "Licence", "owner_id": OWNER.user_id}
        values.update(overrides)
        program = Program(**values)
        db.session.add(program)
        db.session.commit()
        return program

    def make_instructor(self, **overrides) -> Instructor:
        suffix = uuid.uuid4().hex[:8]
        values = {
            "first_name": "Awa",
            "last_name": f"Fall-{suffix}",
            "email": f"awa.{suffix}@example.com",
        }
        values.update(overrides)
        instructor = Instructor(**values)
        db.session.add(instructor)
        db.session.commit()
        return instructor

    def make_module(self, program: Program, instructor: Instructor | None = None, **overrides) -> Module:
        values = {
            "code": f"M-{uuid.uuid4().hex[:8]}",
            "name": "Algorithmique",
            "program_id": program.id,
            "instructor_id": instructor.id if instructor else None,
            "owner_id": OWNER.user_id,
        }
        values.update(overrides)
        module = Module(**values)
        db.session.add(module)
        db.session.commit()
        return module

    def make_session(
        self,
        module: Module,
        instructor: Instructor,
        day: date,
        start: time,
        end: time,
        **overrides,
    ) -> Session:
        values = {
            "module_id": module.id,
            "instructor_id": instructor.id,
            "date": day,
            "start_time": start,
            "end_time": end,
            "duration": (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute),
            "category": "CM",
            "status": PLANNED,
        }
        values.update(overrides)
        session = Session(**values)
        db.session.add(session)
        db.session.commit()
        return session
