# sleepformula/timeutil.py
from __future__ import annotations

from typing import Iterable, Tuple
import math

from .errors import InvalidFormat

MINUTES_PER_DAY = 1440


def round_half_up(x: float, places: int = 0) -> float:
    # Python's round() is banker's rounding; displayed values use half-up.
    factor = 10 ** places
    return math.floor(x * factor + 0.5) / factor


def parse_time(s: str) -> Tuple[int, int]:
    """
    Parse "HH:mm" into (hour, minute).
    Raises InvalidFormat unless there are exactly two numeric components
    within 00:00..23:59.
    """
    parts = str(s).strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise InvalidFormat(f"Time '{s}' must be in HH:mm format.")
    hh, mm = int(parts[0]), int(parts[1])
    if not (0 <= hh < 24) or not (0 <= mm < 60):
        raise InvalidFormat(f"Time '{s}' out of range.")
    return hh, mm


def time_to_minutes(s: str) -> int:
    hh, mm = parse_time(s)
    return hh * 60 + mm


def format_time(minutes_of_day: int) -> str:
    m = int(minutes_of_day) % MINUTES_PER_DAY
    return f"{m // 60:02d}:{m % 60:02d}"


def add_minutes(time_str: str, delta: int) -> str:
    return format_time(time_to_minutes(time_str) + int(delta))


def subtract_minutes(time_str: str, delta: int) -> str:
    return add_minutes(time_str, -int(delta))


def elapsed_hours(bedtime: str, wake_time: str) -> float:
    """
    Hours between bedtime and wake time.
    A wake time at or before the bedtime is on the following day.
    """
    diff = time_to_minutes(wake_time) - time_to_minutes(bedtime)
    if diff <= 0:
        diff += MINUTES_PER_DAY
    return round_half_up(diff / 60.0, 2)


def circular_mean(times: Iterable[str]) -> str:
    """
    Average clock times on the 24h circle.
    23:30 and 00:30 average to 00:00, not 12:00.
    """
    angles = [time_to_minutes(t) / MINUTES_PER_DAY * 2 * math.pi for t in times]
    if not angles:
        return "00:00"
    n = len(angles)
    sin_avg = sum(math.sin(a) for a in angles) / n
    cos_avg = sum(math.cos(a) for a in angles) / n
    avg = math.atan2(sin_avg, cos_avg)
    if avg < 0:
        avg += 2 * math.pi
    return format_time(int(round_half_up(avg / (2 * math.pi) * MINUTES_PER_DAY)))


def format_duration(total_minutes: float) -> str:
    mins = int(round_half_up(abs(total_minutes)))
    h, m = divmod(mins, 60)
    if h == 0:
        return f"{m}분"
    if m == 0:
        return f"{h}시간"
    return f"{h}시간 {m}분"


def format_hours(hours: float) -> str:
    return format_duration(hours * 60.0)
