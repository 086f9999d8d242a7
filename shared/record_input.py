# shared/record_input.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import datetime as dt
import json
import math

from sleepformula.engine import (
    CAFFEINE_CATEGORIES,
    CaffeineEntry,
    SleepRecord,
    make_sleep_record,
    new_id,
)
from sleepformula.errors import OutOfRange, SleepFormulaError


CATEGORY_LABELS: Dict[str, str] = {
    "coffee": "커피",
    "espresso": "에스프레소",
    "tea": "차",
    "energy": "에너지음료",
    "other": "기타",
}


@dataclass(frozen=True)
class QuickAddItem:
    category: str
    label: str
    amount_mg: float
    icon: str


QUICK_ADD_ITEMS: List[QuickAddItem] = [
    QuickAddItem("coffee", "커피", 95.0, "☕"),
    QuickAddItem("espresso", "에스프레소", 63.0, "💧"),
    QuickAddItem("tea", "녹차", 30.0, "🍵"),
    QuickAddItem("energy", "에너지음료", 80.0, "⚡"),
]


def normalize_category(v: Any) -> str:
    raw = str(v or "other").strip().lower().replace("-", "_")
    if raw in ("energy_drink", "energydrink"):
        return "energy"
    if raw in CAFFEINE_CATEGORIES:
        return raw
    return "other"


def make_caffeine_entry(
    amount_mg: float,
    category: str,
    label: str,
    now: dt.datetime,
    entry_id: Optional[str] = None,
) -> CaffeineEntry:
    """
    New entry stamped at `now` (logging time, not a user-chosen time).
    Empty label falls back to the category name.
    """
    amount = float(amount_mg)
    if math.isnan(amount) or math.isinf(amount) or amount <= 0:
        raise OutOfRange(f"Caffeine amount must be > 0 mg, got {amount_mg!r}.")
    cat = normalize_category(category)
    return CaffeineEntry(
        id=entry_id or new_id(),
        timestamp=now,
        amount_mg=amount,
        category=cat,
        label=(label or "").strip() or CATEGORY_LABELS[cat],
    )


# ----------------------------
# JSON (storage format)
# ----------------------------

def records_to_json(records: Sequence[SleepRecord]) -> str:
    """
    Example:
      [{"id":"…","date":"2026-10-18","bedtime":"23:00","wake_time":"07:00","hours_slept":8.0}]
    """
    data = [
        {
            "id": r.id,
            "date": r.date,
            "bedtime": r.bedtime,
            "wake_time": r.wake_time,
            "hours_slept": float(r.hours_slept),
        }
        for r in records
    ]
    return json.dumps(data, ensure_ascii=False)


def records_from_json(s: Optional[str]) -> List[SleepRecord]:
    if not s:
        return []
    try:
        arr = json.loads(s)
    except (TypeError, ValueError):
        return []
    if not isinstance(arr, list):
        return []

    out: List[SleepRecord] = []
    for item in arr:
        if not isinstance(item, dict):
            continue
        try:
            # canonical YYYY-MM-DD; 3.11+ also parses "20261018" and week dates
            date_s = dt.date.fromisoformat(str(item.get("date", "")).strip()).isoformat()
            # hours_slept is recomputed; stored value is ignored
            rec = make_sleep_record(
                date=date_s,
                bedtime=str(item.get("bedtime", "")),
                wake_time=str(item.get("wake_time", item.get("wakeTime", ""))),
                record_id=str(item.get("id", "") or "") or None,
            )
        except (ValueError, SleepFormulaError):
            continue
        out.append(rec)
    return out


def entries_to_json(entries: Sequence[CaffeineEntry]) -> str:
    """
    Timestamps are ISO-8601 strings.
    Example:
      [{"id":"…","timestamp":"2026-10-18T09:00:00+09:00","amount_mg":95.0,"category":"coffee","label":"커피"}]
    """
    data = [
        {
            "id": e.id,
            "timestamp": e.timestamp.isoformat(),
            "amount_mg": float(e.amount_mg),
            "category": e.category,
            "label": e.label,
        }
        for e in entries
    ]
    return json.dumps(data, ensure_ascii=False)


def _parse_timestamp(v: Any, tz: Optional[dt.tzinfo]) -> dt.datetime:
    # Legacy rows carry epoch milliseconds
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return dt.datetime.fromtimestamp(float(v) / 1000.0, tz=tz)
    parsed = dt.datetime.fromisoformat(str(v))
    if parsed.tzinfo is None and tz is not None:
        return parsed.replace(tzinfo=tz)
    if parsed.tzinfo is not None and tz is not None:
        return parsed.astimezone(tz)
    return parsed


def entries_from_json(s: Optional[str], tz: Optional[dt.tzinfo] = None) -> List[CaffeineEntry]:
    if not s:
        return []
    try:
        arr = json.loads(s)
    except (TypeError, ValueError):
        return []
    if not isinstance(arr, list):
        return []

    out: List[CaffeineEntry] = []
    for item in arr:
        if not isinstance(item, dict):
            continue
        # Legacy compatibility: amountMg / type keys
        amount = item.get("amount_mg", item.get("amountMg", 0.0))
        category = item.get("category", item.get("type", "other"))
        try:
            ts = _parse_timestamp(item.get("timestamp"), tz)
            entry = make_caffeine_entry(
                amount_mg=float(amount),
                category=category,
                label=str(item.get("label", "") or ""),
                now=ts,
                entry_id=str(item.get("id", "") or "") or None,
            )
        except (TypeError, ValueError, OverflowError, OSError):
            continue
        out.append(entry)
    return out
