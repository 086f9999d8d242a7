from __future__ import annotations

from typing import List
import datetime as dt

from sleepformula.engine import CaffeineEntry, SleepRecord, make_sleep_record
from shared.record_input import make_caffeine_entry

from .cache import _invalidate_repo_read_caches


# Every mutation reads the stored collection strictly (a failed read raises
# RuntimeError and nothing is written), writes the whole collection back,
# then drops the read caches so the next rerun recomputes from it.

def add_sleep_record(repo, date: dt.date, bedtime: str, wake_time: str) -> SleepRecord:
    """One record per submission; records sharing a date are kept side by side."""
    record = make_sleep_record(date.isoformat(), bedtime, wake_time)
    records: List[SleepRecord] = repo.load_sleep_records(strict=True)
    records.append(record)
    repo.save_sleep_records(records)
    _invalidate_repo_read_caches()
    return record


def remove_sleep_record(repo, record_id: str) -> bool:
    records = repo.load_sleep_records(strict=True)
    kept = [r for r in records if r.id != record_id]
    if len(kept) == len(records):
        return False
    repo.save_sleep_records(kept)
    _invalidate_repo_read_caches()
    return True


def add_caffeine_entry(repo, amount_mg: float, category: str, label: str, now: dt.datetime) -> CaffeineEntry:
    entry = make_caffeine_entry(amount_mg, category, label, now)
    entries: List[CaffeineEntry] = repo.load_caffeine_entries(strict=True)
    entries.append(entry)
    repo.save_caffeine_entries(entries)
    _invalidate_repo_read_caches()
    return entry


def remove_caffeine_entry(repo, entry_id: str) -> bool:
    entries = repo.load_caffeine_entries(strict=True)
    kept = [e for e in entries if e.id != entry_id]
    if len(kept) == len(entries):
        return False
    repo.save_caffeine_entries(kept)
    _invalidate_repo_read_caches()
    return True


def clear_caffeine_entries(repo) -> None:
    repo.save_caffeine_entries([])
    _invalidate_repo_read_caches()


def set_recommended_hours(repo, hours: float) -> float:
    saved = repo.save_recommended_hours(hours)
    _invalidate_repo_read_caches()
    return saved
