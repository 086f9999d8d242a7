# sleepformula/components/calculator.py
import datetime as dt
import streamlit as st

from sleepformula.engine import MODE_BEDTIME, MODE_WAKEUP, best_quality_index, compute_optimal_times
from sleepformula.errors import InvalidFormat
from sleepformula.timeutil import format_hours

QUALITY_LABELS = {
    "poor": "부족",
    "fair": "보통",
    "good": "좋음",
    "great": "최적",
}

SLEEP_FACTS = [
    "🌙 수면 주기 1회 = 약 90분",
    "🕒 잠들기까지 평균 약 15분 소요",
    "❤️ 성인 권장 수면 시간: 7~9시간",
    "🧠 깊은 수면은 처음 3시간에 집중됩니다",
]


def _set_target_now(mode: str, now: dt.datetime) -> None:
    # going to bed now -> add the time it takes to fall asleep
    base = now + dt.timedelta(minutes=15) if mode == MODE_WAKEUP else now
    st.session_state["calc_target"] = base.time().replace(second=0, microsecond=0)


def render_sleep_calculator(now: dt.datetime):
    st.subheader("수면 계산")

    mode_label = st.radio(
        "계산 방식",
        ["기상 시간 계산", "취침 시간 계산"],
        horizontal=True,
        key="calc_mode",
    )
    mode = MODE_WAKEUP if mode_label == "기상 시간 계산" else MODE_BEDTIME
    input_label = "몇 시에 잠들 예정인가요?" if mode == MODE_WAKEUP else "몇 시에 일어나야 하나요?"
    result_label = "추천 기상 시간" if mode == MODE_WAKEUP else "추천 취침 시간"

    st.session_state.setdefault("calc_target", dt.time(7, 0))
    c1, c2 = st.columns([3, 1])
    with c1:
        target = st.time_input(input_label, step=300, key="calc_target")
    with c2:
        st.write("")
        st.button("지금", use_container_width=True, key="calc_now", on_click=_set_target_now, args=(mode, now))

    try:
        results = compute_optimal_times(target.strftime("%H:%M"), mode)
    except InvalidFormat as e:
        st.error(str(e))
        return

    best = best_quality_index(results)
    st.markdown(f"**{result_label}**")
    for i, r in enumerate(results):
        mark = " ⭐ 추천" if i == best else ""
        st.write(f"- **{r.time}** · {r.cycles}주기 · {format_hours(r.hours)} · {QUALITY_LABELS[r.quality]}{mark}")

    with st.expander("수면 상식", expanded=False):
        for fact in SLEEP_FACTS:
            st.caption(fact)
