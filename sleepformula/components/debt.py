# sleepformula/components/debt.py
import datetime as dt
from typing import Sequence
import streamlit as st

from data.state_io import add_sleep_record, remove_sleep_record, set_recommended_hours
from sleepformula.coach import debt_status, recovery_suggestion
from sleepformula.engine import SleepRecord, compute_sleep_debt
from sleepformula.errors import InvalidFormat
from sleepformula.components.feedback import try_save
from sleepformula.plots import plot_sleep_debt

RECOMMENDED_MIN = 6.0
RECOMMENDED_MAX = 10.0


def _format_date(date_s: str) -> str:
    parts = date_s.split("-")
    if len(parts) != 3:
        return date_s
    return f"{parts[1]}/{parts[2]}"


def render_sleep_debt(repo, records: Sequence[SleepRecord], recommended_hours: float, today: dt.date):
    st.subheader("수면 기록")

    # Recommended hours (the UI offers 6..10h; storage accepts 1..24h)
    st.markdown("**권장 수면 시간**")
    c1, c2, c3 = st.columns([1, 2, 1])
    if c1.button("−", use_container_width=True, key="rec_minus") and recommended_hours - 0.5 >= RECOMMENDED_MIN:
        if try_save(set_recommended_hours, repo, recommended_hours - 0.5):
            st.rerun()
    c2.markdown(f"<div style='text-align:center;font-size:1.4rem;font-weight:700'>{recommended_hours:g}시간</div>", unsafe_allow_html=True)
    if c3.button("+", use_container_width=True, key="rec_plus") and recommended_hours + 0.5 <= RECOMMENDED_MAX:
        if try_save(set_recommended_hours, repo, recommended_hours + 0.5):
            st.rerun()

    result = compute_sleep_debt(records, recommended_hours, today)
    label, level = debt_status(result.total_debt)
    m1, m2 = st.columns(2)
    m1.metric("주간 수면 부채", f"{result.total_debt:.1f}h")
    m2.metric("평균 수면", f"{result.avg_hours:.1f}h")
    if level == "high":
        st.error(label)
    elif level == "medium":
        st.warning(label)
    else:
        st.success(label)

    suggestion = recovery_suggestion(result.total_debt)
    if suggestion:
        st.info(suggestion)

    st.pyplot(plot_sleep_debt(result, recommended_hours), clear_figure=True)

    st.divider()
    st.markdown("**수면 기록 추가**")
    d1, d2, d3 = st.columns(3)
    record_date = d1.date_input("날짜", value=today, key="record_date")
    bedtime = d2.time_input("취침", value=dt.time(23, 0), step=300, key="record_bedtime")
    wake_time = d3.time_input("기상", value=dt.time(7, 0), step=300, key="record_wake")
    if st.button("기록 추가", type="primary", use_container_width=True, key="record_add"):
        try:
            rec = add_sleep_record(repo, record_date, bedtime.strftime("%H:%M"), wake_time.strftime("%H:%M"))
        except InvalidFormat as e:
            st.error(str(e))
        except RuntimeError as e:
            st.error(f"저장하지 못했습니다: {e}")
        else:
            st.toast(f"{_format_date(rec.date)} {rec.hours_slept:.1f}시간 기록")
            st.rerun()

    recent = sorted(records, key=lambda r: r.date, reverse=True)[:7]
    if recent:
        st.markdown("**최근 기록**")
    for r in recent:
        c1, c2 = st.columns([5, 1])
        c1.write(f"{_format_date(r.date)} · {r.bedtime} → {r.wake_time} · {r.hours_slept:.1f}시간")
        if c2.button("삭제", key=f"del_record_{r.id}"):
            if try_save(remove_sleep_record, repo, r.id):
                st.rerun()
