# sleepformula/components/feedback.py
import streamlit as st


def try_save(fn, *args, **kwargs) -> bool:
    """Run a state_io mutation; on a failed read/save show st.error and return False."""
    try:
        fn(*args, **kwargs)
    except RuntimeError as e:
        st.error(f"저장하지 못했습니다: {e}")
        return False
    return True
