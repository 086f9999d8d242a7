from __future__ import annotations

import unittest

from sleepformula.errors import InvalidFormat
from sleepformula.timeutil import (
    add_minutes,
    circular_mean,
    elapsed_hours,
    format_duration,
    format_time,
    parse_time,
    round_half_up,
    subtract_minutes,
)


class TimeUtilTests(unittest.TestCase):
    def test_parse_time_accepts_hh_mm(self):
        self.assertEqual(parse_time("07:05"), (7, 5))
        self.assertEqual(parse_time("23:59"), (23, 59))

    def test_parse_time_rejects_malformed_and_out_of_range(self):
        for bad in ("7", "ab:cd", "07:00:00", "24:00", "12:60", ""):
            with self.assertRaises(InvalidFormat):
                parse_time(bad)

    def test_add_and_subtract_wrap_around_midnight(self):
        self.assertEqual(add_minutes("23:30", 45), "00:15")
        self.assertEqual(subtract_minutes("00:10", 30), "23:40")
        self.assertEqual(subtract_minutes("07:00", 555), "21:45")

    def test_subtract_then_add_returns_the_same_time(self):
        for minute in range(1440):
            t = format_time(minute)
            for m in (-3000, -1441, -90, -1, 0, 1, 15, 555, 1439, 1440, 1441, 4321):
                self.assertEqual(add_minutes(subtract_minutes(t, m), m), t, msg=f"{t} {m}")

    def test_elapsed_hours_crosses_midnight(self):
        self.assertEqual(elapsed_hours("23:00", "07:00"), 8.0)
        self.assertEqual(elapsed_hours("22:30", "06:45"), 8.25)
        self.assertEqual(elapsed_hours("13:00", "15:30"), 2.5)
        self.assertEqual(elapsed_hours("07:00", "23:00"), 16.0)

    def test_equal_bedtime_and_wake_is_a_full_day(self):
        self.assertEqual(elapsed_hours("07:00", "07:00"), 24.0)

    def test_circular_mean_around_midnight(self):
        self.assertEqual(circular_mean(["23:30", "00:30"]), "00:00")
        self.assertEqual(circular_mean(["22:00", "23:00"]), "22:30")
        self.assertEqual(circular_mean([]), "00:00")

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3.0)
        self.assertEqual(round_half_up(0.125, 2), 0.13)
        self.assertEqual(round_half_up(7.44, 1), 7.4)

    def test_format_duration(self):
        self.assertEqual(format_duration(90), "1시간 30분")
        self.assertEqual(format_duration(45), "45분")
        self.assertEqual(format_duration(120), "2시간")


if __name__ == "__main__":
    unittest.main()
