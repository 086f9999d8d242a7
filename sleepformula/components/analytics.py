# sleepformula/components/analytics.py
import datetime as dt
from typing import Sequence
import streamlit as st

from services.unlock_service import UNLOCK_SUCCESS, DailyUnlock, UnlockGate
from sleepformula.coach import (
    caffeine_impact_text,
    compute_sleep_stats,
    generate_sleep_tips,
    ideal_schedule,
    score_grade,
    sleep_score,
    visible_tips,
    weekly_trend,
)
from sleepformula.engine import CaffeineEntry, SleepRecord, SleepTip

TREND_ICONS = {"up": "📈", "down": "📉", "stable": "➖"}


def _render_tip(tip: SleepTip) -> None:
    with st.container(border=True):
        st.markdown(f"{tip.icon} **{tip.title}**")
        st.caption(tip.description)


def render_sleep_analytics(
    repo,
    records: Sequence[SleepRecord],
    entries: Sequence[CaffeineEntry],
    recommended_hours: float,
    now: dt.datetime,
    gate: UnlockGate,
):
    st.subheader("분석")

    stats = compute_sleep_stats(records, entries, recommended_hours, now)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("총 기록", f"{stats.total_records}회")
    c2.metric("이번 주 평균", f"{stats.avg_hours_this_week:.1f}h")
    c3.metric("수면 부채", f"{stats.total_debt_hours:.1f}h")
    c4.metric("현재 카페인", f"{stats.current_caffeine_mg:.0f}mg")

    tips = generate_sleep_tips(stats, entries, now)

    unlock = DailyUnlock(repo)
    today = now.date()
    if not unlock.is_unlocked(today):
        preview = visible_tips(tips, unlocked=False)
        if preview:
            st.markdown("### 맞춤 수면 팁")
            for tip in preview:
                _render_tip(tip)
        st.info("🔒 수면 점수와 맞춤 팁은 오늘 하루 동안 잠금 해제하여 볼 수 있습니다.")
        if st.button("🔓 분석 잠금 해제", type="primary", use_container_width=True, key="unlock_analytics"):
            try:
                result = unlock.unlock(gate, today)
            except RuntimeError as e:
                st.error(f"잠금 해제 상태를 저장하지 못했습니다: {e}")
                return
            if result == UNLOCK_SUCCESS:
                st.toast("수면 분석이 잠금 해제되었어요!")
                st.rerun()
            else:
                st.warning("지금은 잠금 해제를 할 수 없습니다. 잠시 후 다시 시도해주세요.")
        return

    score = sleep_score(stats, records)
    grade, _ = score_grade(score)
    st.markdown(f"### 수면 점수 {score}/100 · {grade}")
    st.progress(score / 100.0)

    direction, trend_label = weekly_trend(records)
    bedtime, wake = ideal_schedule(stats)
    st.write(f"- {TREND_ICONS[direction]} {trend_label}")
    st.write(f"- 평균 취침 **{stats.avg_bedtime}** · 평균 기상 **{stats.avg_wake_time}**")
    st.write(f"- 최장 {stats.longest_sleep:.1f}h · 최단 {stats.shortest_sleep:.1f}h")
    st.write(f"- ☕ {caffeine_impact_text(stats.current_caffeine_mg, entries, now)}")
    st.write(f"- 추천 일정: **{bedtime}** 취침 → **{wake}** 기상")

    st.markdown("### 맞춤 수면 팁")
    for tip in visible_tips(tips, unlocked=True):
        _render_tip(tip)
