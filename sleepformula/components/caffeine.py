# sleepformula/components/caffeine.py
import datetime as dt
from typing import Sequence
import streamlit as st

from data.state_io import add_caffeine_entry, clear_caffeine_entries, remove_caffeine_entry
from shared.record_input import CATEGORY_LABELS, QUICK_ADD_ITEMS
from shared.weekly_metrics import entries_on_day, local_time
from sleepformula.coach import caffeine_level_status
from sleepformula.engine import CAFFEINE_CATEGORIES, CaffeineEntry, caffeine_level_at, caffeine_timeline
from sleepformula.errors import OutOfRange
from sleepformula.components.feedback import try_save
from sleepformula.plots import plot_caffeine_timeline


def _add(repo, amount: float, category: str, label: str, now: dt.datetime) -> None:
    try:
        add_caffeine_entry(repo, amount, category, label, now)
    except OutOfRange as e:
        st.error(str(e))
        return
    except RuntimeError as e:
        st.error(f"저장하지 못했습니다: {e}")
        return
    st.toast(f"{label or CATEGORY_LABELS.get(category, '')} {amount:g}mg 추가")
    st.rerun()


def render_caffeine_tracker(repo, entries: Sequence[CaffeineEntry], now: dt.datetime):
    st.subheader("카페인")

    current = caffeine_level_at(entries, now)
    status, _level = caffeine_level_status(current)
    st.metric("현재 체내 카페인", f"{current:.1f}mg", help="반감기 5시간 기준 추정치")
    st.caption(f"상태: **{status}**")

    st.markdown("**빠른 추가**")
    cols = st.columns(len(QUICK_ADD_ITEMS))
    for col, item in zip(cols, QUICK_ADD_ITEMS):
        with col:
            if st.button(f"{item.icon} {item.label}\n{item.amount_mg:g}mg", use_container_width=True, key=f"quick_{item.category}"):
                _add(repo, item.amount_mg, item.category, item.label, now)

    with st.expander("직접 입력", expanded=False):
        amount = st.number_input("카페인 양 (mg)", min_value=0.0, max_value=1000.0, value=0.0, step=5.0, key="custom_mg")
        category = st.selectbox(
            "종류",
            list(CAFFEINE_CATEGORIES),
            format_func=lambda c: CATEGORY_LABELS[c],
            key="custom_category",
        )
        label = st.text_input("메모 (선택)", key="custom_label")
        if st.button("추가", type="primary", use_container_width=True, key="custom_add"):
            if amount <= 0:
                st.warning("카페인 양을 입력해주세요.")
            else:
                _add(repo, float(amount), category, label, now)

    points = caffeine_timeline(entries)
    if points:
        st.pyplot(plot_caffeine_timeline(points), clear_figure=True)

    today_entries = entries_on_day(entries, now.date(), tz=now.tzinfo)
    st.markdown(f"**오늘 섭취 기록** ({len(today_entries)}건)")
    if not today_entries:
        st.caption("아직 기록이 없습니다.")
    for e in sorted(today_entries, key=lambda x: x.timestamp, reverse=True):
        c1, c2 = st.columns([5, 1])
        c1.write(f"{e.label} · {local_time(e.timestamp, now.tzinfo).strftime('%H:%M')} · {e.amount_mg:g}mg")
        if c2.button("삭제", key=f"del_caffeine_{e.id}"):
            if try_save(remove_caffeine_entry, repo, e.id):
                st.rerun()

    if entries and st.button("전체 기록 삭제", key="clear_caffeine"):
        if try_save(clear_caffeine_entries, repo):
            st.rerun()
