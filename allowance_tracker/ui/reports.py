# allowance_tracker/ui/reports.py
from datetime import datetime

import pandas as pd
import plotly.express as px
import streamlit as st

from allowance_tracker.core.statistics import PERIOD_LABELS, PERIODS, period_statistics


def render_reports(transactions, currency):
    st.subheader("Statistics")

    period = st.radio(
        "Period", options=list(PERIODS), format_func=lambda p: p.capitalize(), horizontal=True
    )
    stats = period_statistics(transactions, period)

    c1, c2, c3 = st.columns(3)
    c1.metric(f"Spent · {PERIOD_LABELS[period]}", f"{currency}{stats.total_spent:,.2f}")
    c2.metric("Income", f"{currency}{stats.total_income:,.2f}")
    c3.metric("Transactions", stats.transaction_count)

    if not stats.transactions:
        st.info("No transactions in this period.")
        return

    col1, col2 = st.columns(2)

    # Pie: expenses by category
    with col1:
        df_cat = pd.DataFrame(
            [{"category": k, "amount": v} for k, v in stats.by_category.items()]
        )
        if not df_cat.empty and df_cat["amount"].sum() > 0:
            fig_pie = px.pie(
                df_cat,
                values="amount",
                names="category",
                title=f"Spending by category ({currency})",
            )
            st.plotly_chart(fig_pie, use_container_width=True)
        else:
            st.info("No expense data to chart yet.")

    # Daily spending trend
    with col2:
        df_tx = pd.DataFrame([
            {"timestamp": t.timestamp, "amount": t.amount}
            for t in stats.transactions if t.is_expense
        ])
        if not df_tx.empty:
            df_tx["day"] = [datetime.fromtimestamp(ts / 1000).date() for ts in df_tx["timestamp"]]
            df_day = df_tx.groupby("day", as_index=False)["amount"].sum()
            fig_line = px.bar(
                df_day.sort_values("day"),
                x="day",
                y="amount",
                title=f"Daily spending ({currency})",
            )
            st.plotly_chart(fig_line, use_container_width=True)
        else:
            st.info("No expenses in this period.")
