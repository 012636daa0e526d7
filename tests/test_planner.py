import unittest
from datetime import date, time
from itertools import combinations

from factories import OWNER, DatabaseTestCase, RecordingLockRegistry
from planif import db
from planif.errors import NothingToPlan, SchedulingError
from planif.locks import instructor_key, room_key
from planif.models import PLANNED, AcademicPeriod
from planif.planner import ModulePlan, PlanningStrategy, PlanRequest, plan_module
from planif.repository import SqlAlchemyRepository
from planif.settings import SchedulingSettings
from planif.timeutils import overlaps


MONDAY = date(2024, 3, 4)
MON_WED_FRI = SchedulingSettings(working_weekdays=(0, 2, 4))
WEEKDAYS = SchedulingSettings()


class StaleReadRepository(SqlAlchemyRepository):
    """Hides existing bookings on the first read, as a concurrent writer would."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.stale = True

    def instructor_sessions(self, instructor_id, start, end):
        if self.stale:
            self.stale = False
            return []
        return super().instructor_sessions(instructor_id, start, end)


class PlanModuleTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.program = self.make_program()
        self.instructor = self.make_instructor()

    def request(self, module, **overrides) -> PlanRequest:
        values = {"module_id": module.id, "instructor_id": self.instructor.id, "start_date": MONDAY}
        values.update(overrides)
        return PlanRequest(**values)

    def test_twenty_lecture_hours_in_ten_sessions(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=20)
        outcome = plan_module(
            self.repository,
            self.request(module, end_date=date(2024, 3, 31), session_duration=120),
            OWNER,
            settings=MON_WED_FRI,
        )
        self.assertEqual(len(outcome.plan.sessions), 10)
        self.assertEqual(outcome.plan.hours_planned, 20)
        self.assertEqual(outcome.plan.hours_remaining, 0)
        self.assertEqual(len(outcome.committed), 10)
        self.assertEqual(outcome.rejected, [])
        self.assertTrue(all(pending.date.weekday() in (0, 2, 4) for pending in outcome.plan.sessions))

        stored = self.repository.instructor_sessions(self.instructor.id, MONDAY, date(2024, 3, 31))
        self.assertEqual(len(stored), 10)
        self.assertTrue(all(session.status == PLANNED and session.category == "CM" for session in stored))

    def test_buckets_never_overlap_each_other(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=2, td=2, tp=2)
        outcome = plan_module(
            self.repository,
            self.request(module, end_date=date(2024, 3, 5), session_duration=60),
            OWNER,
            settings=WEEKDAYS,
        )
        self.assertEqual(
            sorted((pending.category, pending.date, pending.start) for pending in outcome.plan.sessions),
            [
                ("CM", date(2024, 3, 4), "08:00"),
                ("CM", date(2024, 3, 5), "08:00"),
                ("TD", date(2024, 3, 4), "10:15"),
                ("TD", date(2024, 3, 5), "10:15"),
                ("TP", date(2024, 3, 4), "14:00"),
                ("TP", date(2024, 3, 5), "14:00"),
            ],
        )
        for first, second in combinations(outcome.plan.sessions, 2):
            if first.date == second.date:
                self.assertFalse(overlaps(first.start, first.end, second.start, second.end))

    def test_existing_sessions_are_avoided(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=2)
        self.make_session(module, self.instructor, MONDAY, time(8, 0), time(10, 0))
        outcome = plan_module(
            self.repository,
            self.request(module, end_date=MONDAY),
            OWNER,
            settings=WEEKDAYS,
        )
        [pending] = outcome.plan.sessions
        self.assertEqual((pending.start, pending.end), ("14:00", "16:00"))

    def test_instructor_caps(self) -> None:
        self.instructor.max_hours_day = 2
        self.instructor.max_hours_week = 4
        db.session.commit()
        module = self.make_module(self.program, self.instructor, cm=10)
        outcome = plan_module(
            self.repository,
            self.request(module, end_date=date(2024, 3, 8)),
            OWNER,
            settings=WEEKDAYS,
        )
        self.assertEqual([pending.date for pending in outcome.plan.sessions], [MONDAY, date(2024, 3, 5)])
        self.assertEqual(outcome.plan.hours_planned, 4)
        self.assertEqual(outcome.plan.hours_remaining, 6)
        self.assertEqual(outcome.plan.conflicts_avoided, 3)

    def test_recess_days_are_skipped(self) -> None:
        period = AcademicPeriod(
            name="2023-2024",
            spring_break_start=date(2024, 3, 5),
            spring_break_end=date(2024, 3, 7),
        )
        db.session.add(period)
        db.session.flush()
        period.activate()
        db.session.commit()
        module = self.make_module(self.program, self.instructor, cm=4)
        outcome = plan_module(
            self.repository,
            self.request(module, end_date=date(2024, 3, 8)),
            OWNER,
            settings=WEEKDAYS,
        )
        self.assertEqual([pending.date for pending in outcome.plan.sessions], [MONDAY, date(2024, 3, 8)])

    def test_dry_run_stores_nothing(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=4)
        outcome = plan_module(
            self.repository,
            self.request(module, end_date=date(2024, 3, 8), dry_run=True),
            OWNER,
            settings=WEEKDAYS,
        )
        payload = outcome.as_dict()
        self.assertTrue(payload["dryRun"])
        self.assertEqual(len(payload["sessions"]), 2)
        self.assertEqual(payload["committed"], 0)
        self.assertEqual(
            self.repository.instructor_sessions(self.instructor.id, MONDAY, date(2024, 3, 8)), []
        )

    def test_conflicting_insert_is_rejected_and_the_rest_kept(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=4)
        self.make_session(module, self.instructor, MONDAY, time(8, 0), time(10, 0))
        repository = StaleReadRepository(db.session)
        outcome = plan_module(
            repository,
            self.request(module, end_date=date(2024, 3, 5)),
            OWNER,
            settings=WEEKDAYS,
        )
        self.assertEqual(len(outcome.plan.sessions), 2)
        self.assertEqual(len(outcome.committed), 1)
        [rejected] = outcome.rejected
        self.assertEqual(rejected["position"], 1)
        self.assertEqual(rejected["date"], "2024-03-04")
        self.assertIn("Conflit avec l'intervenant", rejected["reason"])
        self.assertEqual(outcome.committed[0].date, date(2024, 3, 5))
        self.assertEqual(outcome.hours_planned, 2)
        self.assertEqual(outcome.hours_remaining, 2)
        payload = outcome.as_dict()
        self.assertEqual((payload["hoursPlanned"], payload["hoursRemaining"]), (2, 2))
        self.assertTrue(any(message["level"] == "warning" for message in outcome.messages))

    def test_no_capacity_over_a_weekend(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=4, td=2)
        outcome = plan_module(
            self.repository,
            self.request(module, start_date=date(2024, 3, 9), end_date=date(2024, 3, 10)),
            OWNER,
            settings=WEEKDAYS,
        )
        payload = outcome.as_dict()
        self.assertTrue(payload["noCapacity"])
        self.assertEqual(payload["sessions"], [])
        self.assertEqual(payload["hoursRemaining"], 6)

    def test_default_window_is_ninety_days(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=2)
        outcome = plan_module(self.repository, self.request(module), OWNER, settings=WEEKDAYS)
        self.assertIn("2024-06-02", outcome.messages[0]["message"])

    def test_nothing_to_plan(self) -> None:
        module = self.make_module(self.program, self.instructor, tpe=10)
        with self.assertRaises(NothingToPlan):
            plan_module(self.repository, self.request(module), OWNER, settings=WEEKDAYS)

    def test_strategy_can_be_substituted(self) -> None:
        class IdleStrategy(PlanningStrategy):
            name = "idle"

            def plan(self, context):
                return ModulePlan(hours_required=sum(context.buckets.values()))

        module = self.make_module(self.program, self.instructor, cm=2)
        outcome = plan_module(
            self.repository, self.request(module), OWNER, settings=WEEKDAYS, strategy=IdleStrategy()
        )
        self.assertTrue(outcome.plan.no_capacity)
        self.assertEqual(outcome.plan.hours_remaining, 2)

    def test_room_is_locked_with_the_instructor(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=2)
        locks = RecordingLockRegistry()
        plan_module(
            self.repository,
            self.request(module, end_date=MONDAY, room="Salle 101"),
            OWNER,
            settings=WEEKDAYS,
            locks=locks,
        )
        self.assertEqual(locks.held, [(instructor_key(self.instructor.id), room_key("Salle 101"))])

    def test_unknown_strategy(self) -> None:
        module = self.make_module(self.program, self.instructor, cm=2)
        with self.assertRaises(SchedulingError) as ctx:
            plan_module(self.repository, self.request(module, strategy="solver"), OWNER, settings=WEEKDAYS)
        self.assertEqual(ctx.exception.field, "strategy")


if __name__ == "__main__":
    unittest.main()
