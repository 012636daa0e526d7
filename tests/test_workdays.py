import unittest
from datetime import date

from planif.models import AcademicPeriod
from planif.workdays import CalendarWalker, daterange, week_bounds


class CalendarWalkerTestCase(unittest.TestCase):
    def test_skips_weekends_by_default(self) -> None:
        # 2024-03-04 is a Monday
        days = list(CalendarWalker(date(2024, 3, 4), date(2024, 3, 17)))
        self.assertEqual(len(days), 10)
        self.assertTrue(all(day.weekday() < 5 for day in days))

    def test_custom_weekdays(self) -> None:
        walker = CalendarWalker(date(2024, 3, 4), date(2024, 3, 10), weekdays=(0, 2, 4))
        self.assertEqual(list(walker), [date(2024, 3, 4), date(2024, 3, 6), date(2024, 3, 8)])

    def test_skips_recess_windows_of_the_period(self) -> None:
        period = AcademicPeriod(
            name="2023-2024",
            winter_break_start=date(2023, 12, 22),
            winter_break_end=date(2024, 1, 5),
            spring_break_start=date(2024, 3, 12),
            spring_break_end=date(2024, 3, 14),
        )
        walker = CalendarWalker(date(2024, 3, 11), date(2024, 3, 15), period)
        self.assertEqual(list(walker), [date(2024, 3, 11), date(2024, 3, 15)])
        self.assertFalse(walker.allows(date(2024, 3, 13)))

    def test_reversed_recess_bounds_are_tolerated(self) -> None:
        period = AcademicPeriod(
            name="inversée",
            spring_break_start=date(2024, 3, 14),
            spring_break_end=date(2024, 3, 12),
        )
        self.assertTrue(period.is_recess(date(2024, 3, 13)))
        self.assertFalse(period.is_recess(date(2024, 3, 15)))

    def test_walker_can_be_iterated_again(self) -> None:
        walker = CalendarWalker(date(2024, 3, 4), date(2024, 3, 8))
        first = list(walker)
        second = list(walker)
        self.assertEqual(first, second)
        self.assertEqual(len(first), 5)

    def test_empty_when_range_is_reversed(self) -> None:
        self.assertEqual(list(CalendarWalker(date(2024, 3, 8), date(2024, 3, 4))), [])


class CalendarHelpersTestCase(unittest.TestCase):
    def test_daterange_is_inclusive(self) -> None:
        self.assertEqual(len(list(daterange(date(2024, 2, 27), date(2024, 3, 1)))), 4)

    def test_week_bounds(self) -> None:
        self.assertEqual(week_bounds(date(2024, 3, 6)), (date(2024, 3, 4), date(2024, 3, 10)))
        self.assertEqual(week_bounds(date(2024, 3, 10)), (date(2024, 3, 4), date(2024, 3, 10)))


if __name__ == "__main__":
    unittest.main()
