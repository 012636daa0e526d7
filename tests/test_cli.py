import unittest

from factories import DatabaseTestCase
from planif.models import AcademicPeriod, Instructor, Module, Session


class CliTestCase(DatabaseTestCase):
    def test_seed_is_idempotent(self) -> None:
        runner = self.app.test_cli_runner()
        first = runner.invoke(args=["seed"])
        self.assertEqual(first.exit_code, 0, first.output)
        self.assertIn("initialisée", first.output)
        self.assertEqual(Instructor.query.count(), 3)
        self.assertEqual(Module.query.count(), 3)
        self.assertEqual(Session.query.count(), 3)
        self.assertIsNotNone(AcademicPeriod.current())

        second = runner.invoke(args=["seed"])
        self.assertIn("rien à faire", second.output)
        self.assertEqual(Instructor.query.count(), 3)

    def test_activate_period(self) -> None:
        runner = self.app.test_cli_runner()
        runner.invoke(args=["seed"])
        other = AcademicPeriod(name="Rattrapage")
        self.repository.add(other)
        self.repository.flush()
        self.repository.session.commit()

        result = runner.invoke(args=["activate-period", str(other.id)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(AcademicPeriod.current().id, other.id)
        self.assertEqual(AcademicPeriod.query.filter_by(active=True).count(), 1)

        missing = runner.invoke(args=["activate-period", "9999"])
        self.assertNotEqual(missing.exit_code, 0)


if __name__ == "__main__":
    unittest.main()
