# sleepformula/engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import datetime as dt
import math
import uuid

from .errors import OutOfRange
from .timeutil import add_minutes, elapsed_hours, round_half_up, subtract_minutes


# ----------------------------
# Constants
# ----------------------------

SLEEP_CYCLE_MINUTES = 90
FALL_ASLEEP_MINUTES = 15
MIN_CYCLES = 1
MAX_CYCLES = 6

CAFFEINE_HALF_LIFE_HOURS = 5.0
TIMELINE_POINTS = 49  # 24h at 30-minute steps, both ends included
TIMELINE_STEP_MINUTES = 30

DEBT_WINDOW_DAYS = 7

MODE_BEDTIME = "bedtime"  # target is the wake time -> suggest bedtimes
MODE_WAKEUP = "wakeup"    # target is the bedtime -> suggest wake times

QUALITY_RANK: Dict[str, int] = {"poor": 1, "fair": 2, "good": 3, "great": 4}

CAFFEINE_CATEGORIES: Tuple[str, ...] = ("coffee", "espresso", "tea", "energy", "other")

# Indexed by date.weekday() (Monday=0).
DAY_LABELS: Tuple[str, ...] = ("월", "화", "수", "목", "금", "토", "일")


# ----------------------------
# Data models
# ----------------------------

@dataclass(frozen=True)
class SleepRecord:
    """One logged sleep interval. hours_slept is derived from bedtime/wake_time."""
    id: str
    date: str        # YYYY-MM-DD
    bedtime: str     # HH:mm
    wake_time: str   # HH:mm
    hours_slept: float


@dataclass(frozen=True)
class CaffeineEntry:
    """Single caffeine intake event."""
    id: str
    timestamp: dt.datetime
    amount_mg: float
    category: str = "coffee"  # coffee | espresso | tea | energy | other
    label: str = ""


@dataclass
class OptimalTime:
    time: str
    cycles: int
    hours: float
    quality: str  # poor | fair | good | great


@dataclass
class TimelinePoint:
    hour: float   # offset from the timeline origin
    level: float  # mg


@dataclass
class DebtDay:
    day: str
    day_label: str
    hours: float
    debt: float


@dataclass
class SleepDebtResult:
    daily: List[DebtDay] = field(default_factory=list)
    total_debt: float = 0.0
    avg_hours: float = 0.0


@dataclass
class SleepStats:
    total_records: int
    avg_hours_this_week: float
    total_debt_hours: float
    longest_sleep: float
    shortest_sleep: float
    avg_bedtime: str
    avg_wake_time: str
    current_caffeine_mg: float


@dataclass
class SleepTip:
    icon: str
    title: str
    description: str


# ----------------------------
# Helpers
# ----------------------------

def new_id() -> str:
    return uuid.uuid4().hex


def _check_finite(value: float, what: str) -> float:
    v = float(value)
    if math.isnan(v) or math.isinf(v):
        raise OutOfRange(f"{what} must be a finite number, got {value!r}.")
    return v


def _check_amount(entry: CaffeineEntry) -> float:
    amount = _check_finite(entry.amount_mg, "amount_mg")
    if amount <= 0:
        raise OutOfRange(f"amount_mg must be > 0, got {entry.amount_mg!r}.")
    return amount


def quality_from_cycles(cycles: int) -> str:
    if cycles <= 2:
        return "poor"
    if cycles == 3:
        return "fair"
    if cycles == 4:
        return "good"
    return "great"


def day_label(d: dt.date) -> str:
    return DAY_LABELS[d.weekday()]


def make_sleep_record(
    date: str,
    bedtime: str,
    wake_time: str,
    record_id: Optional[str] = None,
) -> SleepRecord:
    """Build a record; hours_slept always comes from bedtime/wake_time."""
    return SleepRecord(
        id=record_id or new_id(),
        date=str(date),
        bedtime=bedtime,
        wake_time=wake_time,
        hours_slept=elapsed_hours(bedtime, wake_time),
    )


# ----------------------------
# Sleep cycles
# ----------------------------

def compute_optimal_times(target_time: str, mode: str) -> List[OptimalTime]:
    """
    Six candidate times built from whole 90-minute cycles plus 15 minutes to fall asleep.
    - MODE_BEDTIME: target_time is the wake time; bedtimes for 6 -> 1 cycles (earliest first).
    - MODE_WAKEUP: target_time is the bedtime; wake times for 1 -> 6 cycles (earliest first).
    """
    if mode == MODE_BEDTIME:
        cycle_range = range(MAX_CYCLES, MIN_CYCLES - 1, -1)
    elif mode == MODE_WAKEUP:
        cycle_range = range(MIN_CYCLES, MAX_CYCLES + 1)
    else:
        raise ValueError(f"Unknown mode: {mode!r}")

    results: List[OptimalTime] = []
    for cycles in cycle_range:
        sleep_minutes = cycles * SLEEP_CYCLE_MINUTES
        total_minutes = sleep_minutes + FALL_ASLEEP_MINUTES
        if mode == MODE_BEDTIME:
            t = subtract_minutes(target_time, total_minutes)
        else:
            t = add_minutes(target_time, total_minutes)
        results.append(
            OptimalTime(
                time=t,
                cycles=cycles,
                hours=round_half_up(sleep_minutes / 60.0, 2),
                quality=quality_from_cycles(cycles),
            )
        )
    return results


def best_quality_index(results: Sequence[OptimalTime]) -> int:
    """Index of the first highest-quality candidate, -1 if empty."""
    best_idx = -1
    best_rank = 0
    for i, r in enumerate(results):
        rank = QUALITY_RANK.get(r.quality, 0)
        if rank > best_rank:
            best_rank = rank
            best_idx = i
    return best_idx


# ----------------------------
# Caffeine decay
# ----------------------------

def _remaining_mg(entry: CaffeineEntry, instant: dt.datetime, half_life_hours: float) -> float:
    amount = _check_amount(entry)
    elapsed_h = (instant - entry.timestamp).total_seconds() / 3600.0
    if elapsed_h < 0:
        return 0.0
    return amount * math.pow(0.5, elapsed_h / half_life_hours)


def caffeine_level_at(
    entries: Sequence[CaffeineEntry],
    instant: dt.datetime,
    half_life_hours: float = CAFFEINE_HALF_LIFE_HOURS,
) -> float:
    """
    Residual caffeine (mg) at `instant`.
    Each entry decays independently; entries after `instant` contribute nothing.
    """
    total = sum(_remaining_mg(e, instant, half_life_hours) for e in entries)
    return round_half_up(max(0.0, total), 1)


def caffeine_timeline(entries: Sequence[CaffeineEntry]) -> List[TimelinePoint]:
    """
    49 samples, 30 minutes apart, starting at the top of the hour of the earliest entry.
    """
    if not entries:
        return []
    earliest = min(e.timestamp for e in entries)
    origin = earliest.replace(minute=0, second=0, microsecond=0)
    step = dt.timedelta(minutes=TIMELINE_STEP_MINUTES)

    out: List[TimelinePoint] = []
    for i in range(TIMELINE_POINTS):
        level = caffeine_level_at(entries, origin + i * step)
        out.append(TimelinePoint(hour=round_half_up(i * 0.5, 2), level=level))
    return out


# ----------------------------
# Sleep debt
# ----------------------------

def compute_sleep_debt(
    records: Sequence[SleepRecord],
    recommended_hours: float,
    today: dt.date,
) -> SleepDebtResult:
    """
    7-day window ending on `today` (included), oldest first.
    Only the first record matching a date is used. Days without a record
    count as 0 hours for debt but are left out of the average.
    """
    target = _check_finite(recommended_hours, "recommended_hours")

    daily: List[DebtDay] = []
    for offset in range(DEBT_WINDOW_DAYS - 1, -1, -1):
        d = today - dt.timedelta(days=offset)
        date_s = d.isoformat()
        record = next((r for r in records if r.date == date_s), None)
        hours = record.hours_slept if record is not None else 0.0
        debt = max(0.0, target - hours)
        daily.append(DebtDay(day=date_s, day_label=day_label(d), hours=hours, debt=debt))

    total_debt = sum(x.debt for x in daily)
    tracked = [x.hours for x in daily if x.hours > 0]
    avg_hours = round_half_up(sum(tracked) / len(tracked), 2) if tracked else 0.0

    return SleepDebtResult(
        daily=daily,
        total_debt=round_half_up(total_debt, 2),
        avg_hours=avg_hours,
    )
