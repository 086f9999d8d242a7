from __future__ import annotations

from typing import Protocol
import datetime as dt


UNLOCK_SUCCESS = "success"
UNLOCK_UNAVAILABLE = "unavailable"


class UnlockGate(Protocol):
    def request_unlock(self) -> str:
        """Returns UNLOCK_SUCCESS or UNLOCK_UNAVAILABLE."""
        ...


class ConfirmUnlockGate:
    """
    Unlock granted by an explicit user confirmation (stands in for the
    rewarded view the mobile host showed).
    """
    def __init__(self, confirmed: bool = True):
        self.confirmed = confirmed

    def request_unlock(self) -> str:
        return UNLOCK_SUCCESS if self.confirmed else UNLOCK_UNAVAILABLE


class UnavailableUnlockGate:
    def request_unlock(self) -> str:
        return UNLOCK_UNAVAILABLE


class DailyUnlock:
    """
    Unlock state keyed by calendar date; it resets when the date changes.
    `repo` needs get_unlock_date() / set_unlock_date(date).
    """
    def __init__(self, repo):
        self.repo = repo

    def is_unlocked(self, today: dt.date) -> bool:
        return self.repo.get_unlock_date() == today.isoformat()

    def unlock(self, gate: UnlockGate, today: dt.date) -> str:
        result = gate.request_unlock()
        if result == UNLOCK_SUCCESS:
            self.repo.set_unlock_date(today)
        return result
