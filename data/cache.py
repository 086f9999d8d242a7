from __future__ import annotations

from typing import List

import streamlit as st

from sleepformula.engine import CaffeineEntry, SleepRecord


def repo_cache_key(repo) -> str:
    return f"{type(repo.db).__name__}:{id(repo)}"


@st.cache_data(ttl=30, show_spinner=False)
def _cached_sleep_records(_repo, repo_key: str) -> List[SleepRecord]:
    return _repo.load_sleep_records()


@st.cache_data(ttl=30, show_spinner=False)
def _cached_caffeine_entries(_repo, repo_key: str) -> List[CaffeineEntry]:
    return _repo.load_caffeine_entries()


@st.cache_data(ttl=30, show_spinner=False)
def _cached_recommended_hours(_repo, repo_key: str) -> float:
    return _repo.load_recommended_hours()


def _invalidate_repo_read_caches() -> None:
    _cached_sleep_records.clear()
    _cached_caffeine_entries.clear()
    _cached_recommended_hours.clear()


def load_snapshot(repo):
    """(records, entries, recommended_hours) as read-only snapshots for the engine."""
    key = repo_cache_key(repo)
    return (
        tuple(_cached_sleep_records(repo, key)),
        tuple(_cached_caffeine_entries(repo, key)),
        _cached_recommended_hours(repo, key),
    )
