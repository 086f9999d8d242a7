# sleepformula_app.py
from __future__ import annotations

import datetime as dt

import streamlit as st

from settings import get_repo, load_settings

from sleepformula.components.analytics import render_sleep_analytics
from sleepformula.components.caffeine import render_caffeine_tracker
from sleepformula.components.calculator import render_sleep_calculator
from sleepformula.components.debt import render_sleep_debt
from services.unlock_service import ConfirmUnlockGate
from data.cache import _invalidate_repo_read_caches, load_snapshot

PAGES = ["수면 계산", "카페인", "수면 기록", "분석"]


def render_sidebar(repo, settings):
    st.sidebar.header("수면 공식")
    if settings.uses_gsheets:
        st.sidebar.caption(f"저장소: Google Sheets (`{settings.spreadsheet_name}`)")
    else:
        st.sidebar.warning("서비스 계정이 설정되지 않아 기록이 이 세션에만 저장됩니다.")
    st.sidebar.caption(f"시간대: {settings.timezone_name}")

    if st.sidebar.button("기록 다시 불러오기", use_container_width=True):
        _invalidate_repo_read_caches()
        st.rerun()

    with st.sidebar.expander("최근 오류 로그", expanded=False):
        logs = repo.get_recent_audit_logs(limit=10)
        if not logs:
            st.caption("없음")
        for row in logs:
            st.caption(f"{row.get('timestamp', '')} · {row.get('action', '')} · {row.get('detail', '')}")

    st.sidebar.divider()
    st.sidebar.caption("면책: 본 계산은 참고용 추정치이며 의료 조언이 아닙니다.")


def main():
    st.set_page_config(page_title="수면 공식", page_icon="🌙")

    settings = load_settings()
    repo = get_repo(settings)
    now = dt.datetime.now(settings.tz)

    page = st.sidebar.radio("메뉴", PAGES, index=0, key="page")
    render_sidebar(repo, settings)

    if page == "수면 계산":
        # calculator needs no stored data
        render_sleep_calculator(now)
        return

    records, entries, recommended_hours = load_snapshot(repo)
    if page == "카페인":
        render_caffeine_tracker(repo, entries, now)
    elif page == "수면 기록":
        render_sleep_debt(repo, records, recommended_hours, now.date())
    else:
        render_sleep_analytics(repo, records, entries, recommended_hours, now, ConfirmUnlockGate())


if __name__ == "__main__":
    main()
