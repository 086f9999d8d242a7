# sleepformula/coach.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple
import datetime as dt
import math

from shared.weekly_metrics import entries_on_day, local_time, records_in_window, total_mg

from .engine import (
    CaffeineEntry,
    SleepRecord,
    SleepStats,
    SleepTip,
    caffeine_level_at,
    compute_sleep_debt,
)
from .timeutil import circular_mean, round_half_up

MAX_TIPS = 8
FREE_TIPS = 1  # shown while analytics are locked
LATE_CAFFEINE_HOUR = 16
IDEAL_SLEEP_HOURS = 7.5


# ----------------------------
# Stats
# ----------------------------

def compute_sleep_stats(
    records: Sequence[SleepRecord],
    entries: Sequence[CaffeineEntry],
    recommended_hours: float,
    now: dt.datetime,
) -> SleepStats:
    """
    Rollup over the whole history.
    The weekly average covers every record dated today-6..today, zero-hour
    records included (unlike the debt average, which skips empty days).
    """
    today = now.date()
    week = records_in_window(records, today, days=7)
    avg_week = round_half_up(sum(r.hours_slept for r in week) / len(week), 2) if week else 0.0

    debt = compute_sleep_debt(records, recommended_hours, today)

    all_hours = [r.hours_slept for r in records]
    return SleepStats(
        total_records=len(records),
        avg_hours_this_week=avg_week,
        total_debt_hours=debt.total_debt,
        longest_sleep=max(all_hours) if all_hours else 0.0,
        shortest_sleep=min(all_hours) if all_hours else 0.0,
        avg_bedtime=circular_mean(r.bedtime for r in records),
        avg_wake_time=circular_mean(r.wake_time for r in records),
        current_caffeine_mg=caffeine_level_at(entries, now),
    )


# ----------------------------
# Tips
# ----------------------------

def _has_late_caffeine(entries: Sequence[CaffeineEntry], now: dt.datetime) -> bool:
    for e in entries_on_day(entries, now.date(), tz=now.tzinfo):
        if local_time(e.timestamp, now.tzinfo).hour >= LATE_CAFFEINE_HOUR:
            return True
    return False


def generate_sleep_tips(
    stats: SleepStats,
    entries: Sequence[CaffeineEntry],
    now: dt.datetime,
) -> List[SleepTip]:
    """
    Ordered rule cascade. Order is meaningful; the list is cut at MAX_TIPS, never re-sorted.
    """
    tips: List[SleepTip] = []

    caffeine = stats.current_caffeine_mg
    if caffeine > 200:
        tips.append(SleepTip(
            icon="☕",
            title="카페인 주의",
            description=f"현재 체내 카페인이 {round_half_up(caffeine):.0f}mg으로 높습니다. 취침 6시간 전부터는 카페인 섭취를 피하세요.",
        ))
    elif caffeine > 100:
        tips.append(SleepTip(
            icon="☕",
            title="카페인 잔여량 확인",
            description=f"체내 카페인이 약 {round_half_up(caffeine):.0f}mg 남아있습니다. 취침 전까지 충분히 분해될 수 있도록 추가 섭취를 자제하세요.",
        ))

    debt = stats.total_debt_hours
    if debt > 10:
        tips.append(SleepTip(
            icon="🚨",
            title="심각한 수면 부족",
            description=f"이번 주 수면 부채가 {round_half_up(debt):.0f}시간입니다. 주말에 한번에 몰아자는 것보다 매일 30분씩 일찍 잠드는 것이 효과적입니다.",
        ))
    elif debt > 5:
        tips.append(SleepTip(
            icon="⏰",
            title="수면 부족 누적",
            description=f"이번 주 수면 부채가 {round_half_up(debt):.0f}시간입니다. 오늘 30분 일찍 잠자리에 들어보세요.",
        ))

    if 0 < stats.avg_hours_this_week < 6:
        tips.append(SleepTip(
            icon="🌫️",
            title="수면 시간 부족",
            description=f"이번 주 평균 수면 시간이 {stats.avg_hours_this_week:.1f}시간입니다. 성인 기준 최소 7시간의 수면이 권장됩니다.",
        ))

    if stats.total_records >= 3:
        tips.append(SleepTip(
            icon="🕒",
            title="규칙적 취침 시간",
            description="매일 같은 시간에 잠드는 습관이 수면의 질을 크게 향상시킵니다. 주말에도 30분 이내의 차이를 유지하세요.",
        ))

    if _has_late_caffeine(entries, now):
        tips.append(SleepTip(
            icon="🚫",
            title="늦은 카페인 섭취",
            description="오후 4시 이후의 카페인 섭취는 수면의 질을 떨어뜨릴 수 있습니다. 디카페인이나 허브티로 대체해 보세요.",
        ))

    tips.append(SleepTip(
        icon="📱",
        title="블루라이트 차단",
        description="취침 1시간 전부터 스마트폰, 태블릿 등 전자기기 사용을 줄이세요. 블루라이트가 멜라토닌 분비를 억제합니다.",
    ))
    tips.append(SleepTip(
        icon="🌡️",
        title="적절한 실내 온도",
        description="수면에 이상적인 실내 온도는 18-20도입니다. 너무 덥거나 추운 환경은 깊은 수면을 방해합니다.",
    ))

    if stats.longest_sleep - stats.shortest_sleep > 3 and stats.shortest_sleep > 0:
        tips.append(SleepTip(
            icon="📊",
            title="수면 편차 큼",
            description=(
                f"가장 긴 수면({stats.longest_sleep:.1f}시간)과 짧은 수면({stats.shortest_sleep:.1f}시간)의 "
                "차이가 큽니다. 일정한 수면 패턴이 건강에 좋습니다."
            ),
        ))

    tips.append(SleepTip(
        icon="🏃",
        title="규칙적 운동",
        description="규칙적인 운동은 수면의 질을 높여줍니다. 다만 취침 2-3시간 전에는 격한 운동을 피하세요.",
    ))
    tips.append(SleepTip(
        icon="🍽️",
        title="취침 전 식사 주의",
        description="취침 2-3시간 전에는 과식을 피하세요. 가벼운 간식은 괜찮지만, 무거운 식사는 수면을 방해합니다.",
    ))

    return tips[:MAX_TIPS]


def visible_tips(tips: Sequence[SleepTip], unlocked: bool) -> List[SleepTip]:
    return list(tips) if unlocked else list(tips[:FREE_TIPS])


# ----------------------------
# Analytics heuristics
# ----------------------------

def sleep_score(stats: SleepStats, records: Sequence[SleepRecord]) -> int:
    """
    Heuristic 0..100 score, not a clinical metric.
    - duration (0-40): distance of the weekly average from 7.5h
    - debt (0-30): 3 points off per debt hour
    - consistency (0-30): std-dev of the last 7 records
    """
    if not records:
        return 0

    duration_score = max(0.0, 40 - abs(stats.avg_hours_this_week - IDEAL_SLEEP_HOURS) * 10)
    debt_score = max(0.0, 30 - min(stats.total_debt_hours * 3, 30))

    hours = [r.hours_slept for r in records[-7:]]
    if len(hours) < 2:
        return int(round_half_up(min(duration_score + debt_score + 15, 100)))

    mean = sum(hours) / len(hours)
    variance = sum((h - mean) ** 2 for h in hours) / len(hours)
    consistency_score = max(0.0, 30 - math.sqrt(variance) * 10)
    return int(round_half_up(min(duration_score + debt_score + consistency_score, 100)))


def score_grade(score: float) -> Tuple[str, str]:
    if score >= 80:
        return "우수", "great"
    if score >= 60:
        return "양호", "good"
    if score >= 40:
        return "보통", "fair"
    return "개선 필요", "poor"


def weekly_trend(records: Sequence[SleepRecord]) -> Tuple[str, str]:
    """Compare the two halves of the last 7 records. Returns (direction, label)."""
    recent = list(records[-7:])
    if len(recent) < 3:
        return "stable", "데이터 부족"

    mid = len(recent) // 2
    first = recent[:mid]
    second = recent[mid:]
    first_avg = sum(r.hours_slept for r in first) / len(first)
    second_avg = sum(r.hours_slept for r in second) / len(second)

    diff = second_avg - first_avg
    if diff > 0.3:
        return "up", "수면 시간 증가 추세"
    if diff < -0.3:
        return "down", "수면 시간 감소 추세"
    return "stable", "안정적인 수면 패턴"


def caffeine_impact_text(current_mg: float, entries: Sequence[CaffeineEntry], now: dt.datetime) -> str:
    total_today = total_mg(entries_on_day(entries, now.date(), tz=now.tzinfo))
    if total_today == 0:
        return "오늘 카페인 섭취 없음"
    amount = f"{total_today:g}mg"
    if current_mg < 50:
        return f"오늘 {amount} 섭취, 현재 안전 수준"
    if current_mg < 100:
        return f"오늘 {amount} 섭취, 수면에 약간의 영향 가능"
    return f"오늘 {amount} 섭취, 수면에 영향을 줄 수 있음"


def ideal_schedule(stats: SleepStats) -> Tuple[str, str]:
    if stats.total_records == 0:
        return "23:00", "07:00"
    return stats.avg_bedtime or "23:00", stats.avg_wake_time or "07:00"


def debt_status(total_debt: float) -> Tuple[str, str]:
    """(label, level) for the weekly debt badge."""
    if total_debt > 5:
        return "심각한 수면 부채", "high"
    if total_debt > 2:
        return "수면 부채 주의", "medium"
    if total_debt > 0:
        return "양호", "low"
    return "충분한 수면", "low"


def recovery_suggestion(total_debt: float, recovery_days: int = 7) -> Optional[str]:
    if total_debt <= 0:
        return None
    extra = math.ceil(total_debt * 60 / recovery_days)
    h, m = divmod(extra, 60)
    extra_s = f"{h}시간 {m}분" if h > 0 else f"{m}분"
    return f"부족한 {total_debt:.1f}시간을 보충하려면 {recovery_days}일간 매일 {extra_s} 더 주무세요"


def caffeine_level_status(mg: float) -> Tuple[str, str]:
    if mg < 50:
        return "수면 안전", "safe"
    if mg < 100:
        return "주의", "caution"
    return "수면 영향", "danger"
