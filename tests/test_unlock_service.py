from __future__ import annotations

import datetime as dt
import unittest

from services.unlock_service import (
    UNLOCK_SUCCESS,
    UNLOCK_UNAVAILABLE,
    ConfirmUnlockGate,
    DailyUnlock,
    UnavailableUnlockGate,
)
from storage.memory import MemoryStore
from storage.repo import SleepRepo


class DailyUnlockTests(unittest.TestCase):
    def test_unlock_lasts_for_the_calendar_day(self):
        today = dt.date(2026, 10, 18)
        unlock = DailyUnlock(SleepRepo(MemoryStore()))
        self.assertFalse(unlock.is_unlocked(today))

        self.assertEqual(unlock.unlock(ConfirmUnlockGate(), today), UNLOCK_SUCCESS)
        self.assertTrue(unlock.is_unlocked(today))
        self.assertFalse(unlock.is_unlocked(today + dt.timedelta(days=1)))

    def test_unavailable_gate_leaves_state_unchanged(self):
        today = dt.date(2026, 10, 18)
        unlock = DailyUnlock(SleepRepo(MemoryStore()))

        self.assertEqual(unlock.unlock(UnavailableUnlockGate(), today), UNLOCK_UNAVAILABLE)
        self.assertEqual(unlock.unlock(ConfirmUnlockGate(confirmed=False), today), UNLOCK_UNAVAILABLE)
        self.assertFalse(unlock.is_unlocked(today))


if __name__ == "__main__":
    unittest.main()
