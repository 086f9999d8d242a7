from __future__ import annotations

import datetime as dt
import unittest
from zoneinfo import ZoneInfo

from shared.record_input import make_caffeine_entry
from sleepformula.engine import make_sleep_record
from storage.memory import MemoryStore
from storage.repo import (
    ANALYTICS_UNLOCK_KEY,
    RECOMMENDED_KEY,
    RECORDS_KEY,
    SleepRepo,
    clamp_recommended_hours,
)

KST = ZoneInfo("Asia/Seoul")


class _BrokenStore(MemoryStore):
    def get_value(self, key):
        raise RuntimeError("sheet unavailable")

    def set_value(self, key, value):
        raise RuntimeError("quota exceeded")


class SleepRepoTests(unittest.TestCase):
    def test_defaults_when_nothing_stored(self):
        repo = SleepRepo(MemoryStore(), tz=KST)
        self.assertEqual(repo.load_sleep_records(), [])
        self.assertEqual(repo.load_caffeine_entries(), [])
        self.assertEqual(repo.load_recommended_hours(), 8.0)
        self.assertEqual(repo.get_unlock_date(), "")

    def test_records_and_entries_persist(self):
        store = MemoryStore()
        repo = SleepRepo(store, tz=KST)
        record = make_sleep_record("2026-10-18", "23:00", "07:00", record_id="r1")
        entry = make_caffeine_entry(95, "coffee", "", dt.datetime(2026, 10, 18, 9, 0, tzinfo=KST), entry_id="e1")

        repo.save_sleep_records([record])
        repo.save_caffeine_entries([entry])

        self.assertIn(RECORDS_KEY, store._values)
        self.assertEqual(repo.load_sleep_records(), [record])
        self.assertEqual(repo.load_caffeine_entries(), [entry])

    def test_recommended_hours_are_clamped(self):
        repo = SleepRepo(MemoryStore(), tz=KST)
        self.assertEqual(repo.save_recommended_hours(30), 24.0)
        self.assertEqual(repo.load_recommended_hours(), 24.0)
        self.assertEqual(repo.save_recommended_hours(7.5), 7.5)
        self.assertEqual(repo.load_recommended_hours(), 7.5)

    def test_clamp_recommended_hours(self):
        self.assertEqual(clamp_recommended_hours(0), 1.0)
        self.assertEqual(clamp_recommended_hours("abc"), 8.0)
        self.assertEqual(clamp_recommended_hours(float("nan")), 8.0)
        self.assertEqual(clamp_recommended_hours(None), 8.0)

    def test_corrupt_recommended_hours_fall_back_and_audit(self):
        store = MemoryStore({RECOMMENDED_KEY: "{bad"})
        repo = SleepRepo(store, tz=KST)
        self.assertEqual(repo.load_recommended_hours(), 8.0)
        self.assertEqual(store.audit_logs[-1]["action"], "load_recommended_hours")

    def test_corrupt_records_load_as_empty(self):
        repo = SleepRepo(MemoryStore({RECORDS_KEY: "not json"}), tz=KST)
        self.assertEqual(repo.load_sleep_records(), [])

    def test_read_failures_resolve_to_defaults(self):
        store = _BrokenStore()
        repo = SleepRepo(store, tz=KST)

        self.assertEqual(repo.load_sleep_records(), [])
        self.assertEqual(repo.load_caffeine_entries(), [])
        self.assertEqual(repo.load_recommended_hours(), 8.0)

        actions = [row["action"] for row in store.audit_logs]
        self.assertIn("load_sleep_records", actions)
        self.assertIn("load_caffeine_entries", actions)
        self.assertEqual(store.audit_logs[0]["level"], "error")

    def test_strict_loads_raise_on_read_failure(self):
        store = _BrokenStore()
        repo = SleepRepo(store, tz=KST)
        with self.assertRaises(RuntimeError):
            repo.load_sleep_records(strict=True)
        with self.assertRaises(RuntimeError):
            repo.load_caffeine_entries(strict=True)
        self.assertEqual(store.audit_logs[-1]["action"], "load_caffeine_entries")

    def test_strict_loads_raise_on_corrupt_payload(self):
        repo = SleepRepo(MemoryStore({RECORDS_KEY: "not json"}), tz=KST)
        self.assertEqual(repo.load_sleep_records(), [])
        with self.assertRaises(RuntimeError):
            repo.load_sleep_records(strict=True)

    def test_strict_load_of_missing_key_is_empty(self):
        repo = SleepRepo(MemoryStore(), tz=KST)
        self.assertEqual(repo.load_sleep_records(strict=True), [])
        self.assertEqual(repo.load_caffeine_entries(strict=True), [])

    def test_write_failures_raise_runtime_error(self):
        store = _BrokenStore()
        repo = SleepRepo(store, tz=KST)
        with self.assertRaises(RuntimeError):
            repo.save_sleep_records([])
        self.assertEqual(store.audit_logs[-1]["action"], "save_sleep_records")

    def test_unlock_date_is_stored_as_iso(self):
        store = MemoryStore()
        repo = SleepRepo(store, tz=KST)
        repo.set_unlock_date(dt.date(2026, 10, 18))
        self.assertEqual(store.get_value(ANALYTICS_UNLOCK_KEY), "2026-10-18")
        self.assertEqual(repo.get_unlock_date(), "2026-10-18")


class MemoryStoreTests(unittest.TestCase):
    def test_recent_audit_logs_newest_first(self):
        store = MemoryStore()
        store.append_audit_log("error", "first", "a")
        store.append_audit_log("error", "second", "b")
        logs = store.get_recent_audit_logs(limit=1)
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0]["action"], "second")


if __name__ == "__main__":
    unittest.main()
