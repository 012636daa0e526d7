import unittest
from datetime import time

from planif.errors import InvalidTimeFormat, TimeOutOfRange
from planif.timeutils import (
    add_minutes,
    duration_minutes,
    format_time,
    from_minutes,
    overlaps,
    parse_time,
    to_minutes,
)


class TimeConversionTestCase(unittest.TestCase):
    def test_to_minutes_accepts_strings_and_times(self) -> None:
        self.assertEqual(to_minutes("00:00"), 0)
        self.assertEqual(to_minutes("10:15"), 615)
        self.assertEqual(to_minutes(time(23, 59)), 1439)

    def test_rejects_malformed_values(self) -> None:
        for value in ("8:00", "24:00", "12:60", "midi", "", "12h30", None):
            with self.subTest(value=value):
                with self.assertRaises(InvalidTimeFormat):
                    to_minutes(value)

    def test_from_minutes_is_zero_padded(self) -> None:
        self.assertEqual(from_minutes(485), "08:05")
        self.assertEqual(format_time(time(14, 0)), "14:00")
        self.assertEqual(parse_time("16:15"), time(16, 15))

    def test_from_minutes_outside_the_day(self) -> None:
        with self.assertRaises(TimeOutOfRange):
            from_minutes(-1)
        with self.assertRaises(TimeOutOfRange):
            from_minutes(24 * 60)


class TimeArithmeticTestCase(unittest.TestCase):
    def test_add_then_measure_gives_back_the_duration(self) -> None:
        for duration in (0, 1, 45, 105, 120, 240, 359):
            with self.subTest(duration=duration):
                self.assertEqual(duration_minutes("18:00", add_minutes("18:00", duration)), duration)
        self.assertEqual(duration_minutes("00:00", add_minutes("00:00", 1439)), 1439)

    def test_add_minutes_refuses_to_wrap_past_midnight(self) -> None:
        self.assertEqual(add_minutes("22:00", 119), "23:59")
        with self.assertRaises(TimeOutOfRange):
            add_minutes("22:00", 120)
        with self.assertRaises(TimeOutOfRange):
            add_minutes("23:30", 45)

    def test_duration_can_be_negative(self) -> None:
        self.assertEqual(duration_minutes("12:00", "10:00"), -120)

    def test_overlaps_is_symmetric(self) -> None:
        pairs = [
            (("08:00", "10:00"), ("10:00", "12:00")),
            (("08:00", "10:00"), ("09:59", "12:00")),
            (("10:15", "12:00"), ("10:00", "12:00")),
            (("14:00", "16:00"), ("08:00", "18:00")),
            (("08:00", "09:00"), ("16:00", "17:00")),
        ]
        for (a_start, a_end), (b_start, b_end) in pairs:
            with self.subTest(a=(a_start, a_end), b=(b_start, b_end)):
                self.assertEqual(
                    overlaps(a_start, a_end, b_start, b_end),
                    overlaps(b_start, b_end, a_start, a_end),
                )

    def test_touching_intervals_do_not_overlap(self) -> None:
        self.assertFalse(overlaps("08:00", "10:00", "10:00", "12:00"))
        self.assertTrue(overlaps("10:15", "12:00", "10:00", "12:00"))
        self.assertTrue(overlaps("08:00", "18:00", "12:00", "12:30"))


if __name__ == "__main__":
    unittest.main()
