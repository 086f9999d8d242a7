from __future__ import annotations

import datetime as dt
import unittest
from zoneinfo import ZoneInfo

from data.state_io import (
    add_caffeine_entry,
    add_sleep_record,
    clear_caffeine_entries,
    remove_caffeine_entry,
    remove_sleep_record,
    set_recommended_hours,
)
from storage.memory import MemoryStore
from storage.repo import CAFFEINE_KEY, RECORDS_KEY, SleepRepo

KST = ZoneInfo("Asia/Seoul")


class _FlakyReadStore(MemoryStore):
    """Reads fail while `fail_reads` is set; writes always succeed."""
    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_reads = False
        self.writes = 0

    def get_value(self, key):
        if self.fail_reads:
            raise RuntimeError("GSheets operation failed: get_all_records(kv): 503")
        return super().get_value(key)

    def set_value(self, key, value):
        self.writes += 1
        super().set_value(key, value)


class StateIoTests(unittest.TestCase):
    def setUp(self):
        self.repo = SleepRepo(MemoryStore(), tz=KST)

    def test_add_and_remove_sleep_records(self):
        first = add_sleep_record(self.repo, dt.date(2026, 10, 18), "23:00", "07:00")
        second = add_sleep_record(self.repo, dt.date(2026, 10, 18), "13:00", "14:30")

        records = self.repo.load_sleep_records()
        self.assertEqual([r.id for r in records], [first.id, second.id])
        self.assertEqual(records[1].hours_slept, 1.5)

        self.assertTrue(remove_sleep_record(self.repo, first.id))
        self.assertFalse(remove_sleep_record(self.repo, "missing"))
        self.assertEqual([r.id for r in self.repo.load_sleep_records()], [second.id])

    def test_caffeine_entries_lifecycle(self):
        now = dt.datetime(2026, 10, 18, 9, 0, tzinfo=KST)
        a = add_caffeine_entry(self.repo, 95, "coffee", "", now)
        b = add_caffeine_entry(self.repo, 30, "tea", "녹차", now + dt.timedelta(hours=2))

        self.assertEqual(len(self.repo.load_caffeine_entries()), 2)
        self.assertTrue(remove_caffeine_entry(self.repo, a.id))
        self.assertEqual([e.id for e in self.repo.load_caffeine_entries()], [b.id])

        clear_caffeine_entries(self.repo)
        self.assertEqual(self.repo.load_caffeine_entries(), [])

    def test_set_recommended_hours_returns_saved_value(self):
        self.assertEqual(set_recommended_hours(self.repo, 9.5), 9.5)
        self.assertEqual(self.repo.load_recommended_hours(), 9.5)


class FailedReadTests(unittest.TestCase):
    def setUp(self):
        self.store = _FlakyReadStore()
        self.repo = SleepRepo(self.store, tz=KST)
        for day in range(10, 18):
            add_sleep_record(self.repo, dt.date(2026, 10, day), "23:00", "07:00")
        add_caffeine_entry(self.repo, 95, "coffee", "", dt.datetime(2026, 10, 18, 9, 0, tzinfo=KST))
        self.writes_before = self.store.writes

    def test_failed_read_keeps_existing_sleep_records(self):
        self.store.fail_reads = True
        with self.assertRaises(RuntimeError):
            add_sleep_record(self.repo, dt.date(2026, 10, 18), "23:00", "07:00")
        with self.assertRaises(RuntimeError):
            remove_sleep_record(self.repo, "any")
        self.store.fail_reads = False

        self.assertEqual(self.store.writes, self.writes_before)
        self.assertEqual(len(self.repo.load_sleep_records()), 8)

        add_sleep_record(self.repo, dt.date(2026, 10, 18), "23:00", "07:00")
        self.assertEqual(len(self.repo.load_sleep_records()), 9)

    def test_failed_read_keeps_existing_caffeine_entries(self):
        self.store.fail_reads = True
        with self.assertRaises(RuntimeError):
            add_caffeine_entry(self.repo, 63, "espresso", "", dt.datetime(2026, 10, 18, 10, 0, tzinfo=KST))
        self.store.fail_reads = False

        self.assertEqual(self.store.writes, self.writes_before)
        self.assertEqual(len(self.repo.load_caffeine_entries()), 1)

    def test_failed_read_is_audited(self):
        self.store.fail_reads = True
        with self.assertRaises(RuntimeError):
            add_sleep_record(self.repo, dt.date(2026, 10, 18), "23:00", "07:00")
        self.assertEqual(self.store.audit_logs[-1]["action"], "load_sleep_records")

    def test_corrupt_payload_is_not_overwritten(self):
        self.store.set_value(RECORDS_KEY, "{truncated")
        self.store.set_value(CAFFEINE_KEY, "[{")
        with self.assertRaises(RuntimeError):
            add_sleep_record(self.repo, dt.date(2026, 10, 18), "23:00", "07:00")
        with self.assertRaises(RuntimeError):
            add_caffeine_entry(self.repo, 30, "tea", "", dt.datetime(2026, 10, 18, 10, 0, tzinfo=KST))
        self.assertEqual(self.store.get_value(RECORDS_KEY), "{truncated")
        self.assertEqual(self.store.get_value(CAFFEINE_KEY), "[{")


if __name__ == "__main__":
    unittest.main()
