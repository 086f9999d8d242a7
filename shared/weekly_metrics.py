from __future__ import annotations

from typing import List, Optional, Sequence
import datetime as dt

from sleepformula.engine import CaffeineEntry, SleepRecord


def week_start(today: dt.date, days: int = 7) -> dt.date:
    return today - dt.timedelta(days=max(1, days) - 1)


def records_in_window(records: Sequence[SleepRecord], today: dt.date, days: int = 7) -> List[SleepRecord]:
    """Records whose date falls within the trailing `days` calendar days, today included."""
    start_s = week_start(today, days).isoformat()
    end_s = today.isoformat()
    # ISO dates compare correctly as strings
    return [r for r in records if start_s <= r.date <= end_s]


def local_time(ts: dt.datetime, tz: Optional[dt.tzinfo]) -> dt.datetime:
    if tz is not None and ts.tzinfo is not None:
        return ts.astimezone(tz)
    return ts


def entries_on_day(entries: Sequence[CaffeineEntry], day: dt.date, tz: Optional[dt.tzinfo] = None) -> List[CaffeineEntry]:
    return [e for e in entries if local_time(e.timestamp, tz).date() == day]


def total_mg(entries: Sequence[CaffeineEntry]) -> float:
    return sum(max(0.0, float(e.amount_mg)) for e in entries)
