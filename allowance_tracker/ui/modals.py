# allowance_tracker/ui/modals.py
import logging

import streamlit as st

from allowance_tracker.core.categories import (
    BUDGET_KEYS,
    CATEGORY_DESCRIPTIONS,
    CATEGORY_LABELS,
    CategoryKey,
)
from allowance_tracker.core.errors import ValidationError
from allowance_tracker.core.state import flash
from allowance_tracker.models.records import BudgetConfig, overcommitted_by

logger = logging.getLogger(__name__)

# Planner labels are more descriptive than the entry-form labels
PLANNER_LABELS = {
    CategoryKey.TRANSPORTATION: "🚌 Transportation (Jeep/Trike)",
    CategoryKey.FOOD: "🍔 Food & Snacks",
    CategoryKey.SUPPLIES: "📚 School Supplies",
    CategoryKey.LOAD: "📱 Load/Internet",
    CategoryKey.PROJECTS: "📝 Projects",
    CategoryKey.SAVINGS: "💰 Savings Goal",
}


def show_add_tx(store, currency, has_modal, DIALOG_DECORATOR):
    """Add Entry modal/expander."""
    def body():
        st.subheader("Add Entry")
        st.caption("Track where your allowance goes")

        with st.form("add_tx_form", clear_on_submit=True):
            c1, c2 = st.columns(2)

            with c1:
                amt = st.number_input(f"💰 How much? ({currency})", min_value=0.0, value=0.0, format="%.2f")
                kind = st.selectbox("Type", ["expense", "income"])

            with c2:
                category = st.selectbox(
                    "Category",
                    options=CATEGORY_LABELS,
                    index=0,
                    format_func=lambda c: f"{c} ({CATEGORY_DESCRIPTIONS.get(c, '')})",
                )
                title = st.text_input("Note", value="", help="Required for the Other category")

            save_tx = st.form_submit_button("Save entry")

        if save_tx:
            try:
                store.add_transaction(title, amt, kind, category)
            except ValidationError as exc:
                st.error(str(exc))
                return
            except Exception:
                logger.exception("Saving transaction failed")
                st.error("Failed to save transaction")
                return

            flash("Transaction saved ✅")
            st.session_state.show_add_tx = False
            st.rerun()

    # Open as dialog only if the other dialog is not open
    if has_modal and st.session_state.show_add_tx and not st.session_state.get("show_budget", False):
        @DIALOG_DECORATOR("➕ Add entry")
        def _dlg():
            body()
        _dlg()
    elif st.session_state.show_add_tx:
        with st.expander("➕ Add entry", expanded=True):
            body()


def show_budget_planner(store, currency, has_modal, DIALOG_DECORATOR):
    """Budget planner modal/expander. All amounts are entered per day."""
    def body():
        st.subheader("Budget Planner")
        st.write("Plan how much you can spend on each category **per day**. "
                 "Weekly limits are the daily figures × 7.")

        current = store.load_budget()
        with st.form("budget_form", clear_on_submit=False):
            allowance = st.number_input(
                f"Daily allowance ({currency})",
                min_value=0.0,
                value=float(current.daily_allowance),
                format="%.2f",
            )
            values = {}
            for key in BUDGET_KEYS:
                values[key] = st.number_input(
                    PLANNER_LABELS[key],
                    min_value=0.0,
                    value=float(current.limit(key)),
                    format="%.2f",
                    key=f"budget_{key.value}",
                )
            save_btn = st.form_submit_button("Save budget plan")

        if save_btn:
            config = BudgetConfig(daily_allowance=allowance)
            for key, value in values.items():
                config = config.with_limit(key, value)

            over = overcommitted_by(config)
            if over > 0:
                st.warning(
                    f"Your planned daily spending exceeds your daily allowance by {currency}{over:.2f}. "
                    "Please adjust your budget to stay within your allowance."
                )
                return
            try:
                store.save_budget(config)
            except Exception:
                logger.exception("Saving budget failed")
                st.error("Failed to save budget")
                return

            flash("Budget plan saved!")
            st.session_state.show_budget = False
            st.rerun()

    if has_modal and st.session_state.show_budget and not st.session_state.get("show_add_tx", False):
        @DIALOG_DECORATOR("🎯 Budget planner")
        def _dlg():
            body()
        _dlg()
    elif st.session_state.show_budget:
        with st.expander("🎯 Budget planner", expanded=True):
            body()
