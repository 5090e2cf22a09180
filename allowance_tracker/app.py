# allowance_tracker/app.py
import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import streamlit as st

from allowance_tracker.core.insights import build_insights
from allowance_tracker.core.log import configure_logging
from allowance_tracker.core.state import init_session_state
from allowance_tracker.services.settings import load_settings
from allowance_tracker.services.storage import LocalStore
from allowance_tracker.ui.insights import render_insights
from allowance_tracker.ui.modals import show_add_tx, show_budget_planner
from allowance_tracker.ui.reports import render_reports
from allowance_tracker.ui.summary import render_summary
from allowance_tracker.ui.table import render_table

# -----------------------
# Bootstrap
# -----------------------
st.set_page_config(page_title="My Budget", layout="wide")
configure_logging()
_settings_file = load_settings()
currency = _settings_file.get("currency_symbol", "₱")
store = LocalStore(os.getenv("STORAGE_PATH") or _settings_file.get("storage_path"))
if not store.has_launched():
    store.mark_launched()

# session state defaults + flash handler
init_session_state()

# Modal support
DIALOG_DECORATOR = getattr(st, "dialog", None) or getattr(st, "experimental_dialog", None)
HAS_MODAL = DIALOG_DECORATOR is not None

# -----------------------
# Top bar
# -----------------------
col_left, col_right = st.columns([3, 1])
with col_left:
    st.title("💰 My Budget")
    st.caption("SHS Student Edition · weekly figures cover the last 7 days")
with col_right:
    # Mutually exclusive buttons -> only one dialog flag at a time
    if st.button("➕ Add entry"):
        st.session_state.show_add_tx = True
        st.session_state.show_budget = False

    if st.button("🎯 Budget planner"):
        st.session_state.show_budget = True
        st.session_state.show_add_tx = False

show_add_tx(store, currency, HAS_MODAL, DIALOG_DECORATOR)
show_budget_planner(store, currency, HAS_MODAL, DIALOG_DECORATOR)

# -----------------------
# Main content
# -----------------------
transactions = store.load_transactions()
budget = store.load_budget()
insights = build_insights(transactions, budget, currency=currency)

tab_home, tab_stats, tab_notes = st.tabs(["🏠 Dashboard", "📊 Statistics", "🔔 Notifications"])

with tab_home:
    left_col, right_col = st.columns([2, 1])
    with left_col:
        render_table(store, transactions, currency)
    with right_col:
        render_summary(insights, currency)

with tab_stats:
    render_reports(transactions, currency)

with tab_notes:
    render_insights(insights)
