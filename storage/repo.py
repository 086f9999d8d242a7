# storage/repo.py
from __future__ import annotations

from typing import Optional, Dict, Any, List, Sequence
import datetime as dt
import json
import math

from sleepformula.engine import CaffeineEntry, SleepRecord
from shared.record_input import entries_from_json, entries_to_json, records_from_json, records_to_json


RECORDS_KEY = "sleep-formula-records"
CAFFEINE_KEY = "sleep-formula-caffeine"
RECOMMENDED_KEY = "sleep-formula-recommended"
ANALYTICS_UNLOCK_KEY = "sleep-formula-analytics-unlock"

DEFAULT_RECOMMENDED_HOURS = 8.0
MIN_RECOMMENDED_HOURS = 1.0
MAX_RECOMMENDED_HOURS = 24.0


def clamp_recommended_hours(hours: Any) -> float:
    try:
        h = float(hours)
    except (TypeError, ValueError):
        return DEFAULT_RECOMMENDED_HOURS
    if math.isnan(h):
        return DEFAULT_RECOMMENDED_HOURS
    return max(MIN_RECOMMENDED_HOURS, min(MAX_RECOMMENDED_HOURS, h))


class SleepRepo:
    """
    App-level persistence interface (backend-agnostic).
    `db` is any key/value store exposing get_value / set_value / append_audit_log
    (SleepGSheets or MemoryStore).

    Display loads never raise: missing or unreadable data resolves to the
    defaults (no records, no caffeine entries, 8 recommended hours).
    Loads feeding a write pass strict=True, so a failed read raises
    RuntimeError instead of saving over the stored collection.
    """
    def __init__(self, db, tz: Optional[dt.tzinfo] = None):
        self.db = db
        self.tz = tz

    def _audit_error(self, action: str, err: Exception) -> None:
        try:
            self.db.append_audit_log("error", action, str(err))
        except Exception:
            return

    def _get(self, action: str, key: str, strict: bool = False) -> Optional[str]:
        try:
            return self.db.get_value(key)
        except Exception as e:
            self._audit_error(action, e)
            if strict:
                raise RuntimeError(f"{key} 불러오기 실패: {e}") from e
            return None

    def _get_strict_json(self, action: str, key: str) -> Optional[str]:
        raw = self._get(action, key, strict=True)
        if raw is None or str(raw).strip() == "":
            return raw
        try:
            json.loads(str(raw))
        except ValueError as e:
            # unreadable payload must not be overwritten by a partial list
            self._audit_error(action, e)
            raise RuntimeError(f"{key} 데이터 손상: {e}") from e
        return raw

    def _load(self, action: str, key: str, strict: bool) -> Optional[str]:
        return self._get_strict_json(action, key) if strict else self._get(action, key)

    def _set(self, action: str, key: str, value: str) -> None:
        try:
            self.db.set_value(key, value)
        except Exception as e:
            self._audit_error(action, e)
            raise RuntimeError(f"{key} 저장 실패: {e}") from e

    # ---- sleep records ----
    def load_sleep_records(self, strict: bool = False) -> List[SleepRecord]:
        return records_from_json(self._load("load_sleep_records", RECORDS_KEY, strict))

    def save_sleep_records(self, records: Sequence[SleepRecord]) -> None:
        self._set("save_sleep_records", RECORDS_KEY, records_to_json(records))

    # ---- caffeine entries ----
    def load_caffeine_entries(self, strict: bool = False) -> List[CaffeineEntry]:
        return entries_from_json(self._load("load_caffeine_entries", CAFFEINE_KEY, strict), tz=self.tz)

    def save_caffeine_entries(self, entries: Sequence[CaffeineEntry]) -> None:
        self._set("save_caffeine_entries", CAFFEINE_KEY, entries_to_json(entries))

    # ---- settings ----
    def load_recommended_hours(self) -> float:
        raw = self._get("load_recommended_hours", RECOMMENDED_KEY)
        if raw is None or str(raw).strip() == "":
            return DEFAULT_RECOMMENDED_HOURS
        try:
            value = json.loads(str(raw))
        except ValueError as e:
            self._audit_error("load_recommended_hours", e)
            return DEFAULT_RECOMMENDED_HOURS
        return clamp_recommended_hours(value)

    def save_recommended_hours(self, hours: float) -> float:
        h = clamp_recommended_hours(hours)
        self._set("save_recommended_hours", RECOMMENDED_KEY, json.dumps(h))
        return h

    # ---- analytics unlock (keyed by calendar date) ----
    def get_unlock_date(self) -> str:
        return str(self._get("get_unlock_date", ANALYTICS_UNLOCK_KEY) or "").strip()

    def set_unlock_date(self, date: dt.date) -> None:
        self._set("set_unlock_date", ANALYTICS_UNLOCK_KEY, date.isoformat())

    def get_recent_audit_logs(self, limit: int = 50) -> List[Dict[str, Any]]:
        try:
            return self.db.get_recent_audit_logs(limit=limit)
        except Exception:
            return []
