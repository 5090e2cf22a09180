# allowance_tracker/core/state.py
import streamlit as st


def init_session_state():
    if "show_add_tx" not in st.session_state:
        st.session_state.show_add_tx = False
    if "show_budget" not in st.session_state:
        st.session_state.show_budget = False
    # flash support after rerun
    if st.session_state.get("_flash_success"):
        st.success(st.session_state._flash_success)
        del st.session_state["_flash_success"]


def flash(message: str) -> None:
    """Queue a success message for the next rerun."""
    st.session_state._flash_success = message
