from __future__ import annotations

import datetime as dt
import unittest
from zoneinfo import ZoneInfo

from shared.weekly_metrics import entries_on_day, records_in_window, total_mg, week_start
from sleepformula.engine import CaffeineEntry, make_sleep_record

KST = ZoneInfo("Asia/Seoul")


class WeeklyMetricsTests(unittest.TestCase):
    def test_window_includes_today_and_six_days_back(self):
        today = dt.date(2026, 10, 18)
        self.assertEqual(week_start(today), dt.date(2026, 10, 12))

        records = [
            make_sleep_record("2026-10-11", "23:00", "07:00", record_id="too-old"),
            make_sleep_record("2026-10-12", "23:00", "07:00", record_id="first-day"),
            make_sleep_record("2026-10-18", "23:00", "07:00", record_id="today"),
            make_sleep_record("2026-10-19", "23:00", "07:00", record_id="future"),
        ]
        out = records_in_window(records, today)
        self.assertEqual([r.id for r in out], ["first-day", "today"])

    def test_entries_on_day_uses_local_date(self):
        utc_late = dt.datetime(2026, 10, 17, 16, 0, tzinfo=dt.timezone.utc)  # 01:00 KST on the 18th
        entries = [
            CaffeineEntry(id="a", timestamp=utc_late, amount_mg=95.0),
            CaffeineEntry(id="b", timestamp=dt.datetime(2026, 10, 17, 9, 0, tzinfo=KST), amount_mg=30.0),
        ]
        out = entries_on_day(entries, dt.date(2026, 10, 18), tz=KST)
        self.assertEqual([e.id for e in out], ["a"])
        self.assertAlmostEqual(total_mg(entries), 125.0, places=6)


if __name__ == "__main__":
    unittest.main()
