# allowance_tracker/ui/table.py
import logging

import pandas as pd
import streamlit as st

from allowance_tracker.core.state import flash

logger = logging.getLogger(__name__)


def transactions_frame(transactions) -> pd.DataFrame:
    return pd.DataFrame([{
        "id": t.id,
        "date": t.date,
        "title": t.title,
        "category": t.category,
        "type": t.kind,
        "amount": t.amount,
        "timestamp": t.timestamp,
    } for t in transactions])


def render_table(store, transactions, currency) -> pd.DataFrame:
    st.subheader("Recent transactions")

    all_df = transactions_frame(transactions)
    if all_df.empty:
        st.info("No transactions yet. Add an entry to get started.")
        return all_df

    # Filters
    mf1, mf2 = st.columns([2, 1])
    with mf1:
        txt = st.text_input("Search (title/category)", value="")
    with mf2:
        sel_kind = st.selectbox("Type", options=["all", "expense", "income"], index=0)

    df_filtered = all_df.copy()
    if txt:
        df_filtered = df_filtered[
            df_filtered["title"].str.contains(txt, case=False, na=False)
            | df_filtered["category"].str.contains(txt, case=False, na=False)
        ]
    if sel_kind in ("expense", "income"):
        df_filtered = df_filtered[df_filtered["type"] == sel_kind]

    shown = df_filtered.sort_values("timestamp", ascending=False).reset_index(drop=True)
    shown["amount"] = shown.apply(
        lambda r: f"{'+' if r['type'] == 'income' else '-'}{currency}{r['amount']:,.2f}", axis=1
    )
    st.dataframe(shown.drop(columns=["timestamp"]), hide_index=True)

    with st.expander("🗑️ Delete a transaction", expanded=False):
        labels = {
            r["id"]: f"{r['date']} · {r['title']} · {currency}{r['amount']:,.2f}"
            for _, r in all_df.iterrows()
        }
        target = st.selectbox("Transaction", options=list(labels), format_func=labels.get)
        confirm = st.checkbox("Yes, delete this transaction")
        if st.button("Delete"):
            if not confirm:
                st.warning("Tick the confirmation box first.")
            else:
                try:
                    store.delete_transaction(target)
                except Exception:
                    logger.exception("Deleting transaction %s failed", target)
                    st.error("Failed to delete transaction")
                else:
                    flash("Transaction deleted")
                    st.rerun()
    return all_df
