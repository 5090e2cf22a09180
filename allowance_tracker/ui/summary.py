# allowance_tracker/ui/summary.py
import streamlit as st

from allowance_tracker.core.insights import BudgetBand


def render_summary(insights, currency) -> None:
    """Right-side dashboard panel built from the trailing-week Insights."""
    st.subheader("This week")

    st.metric(label=f"Available balance ({currency})", value=f"{insights.available_balance:,.2f}")
    st.write(f"- Weekly allowance: {currency}{insights.weekly_allowance:,.2f}")
    st.write(f"- Spent (last 7 days): {currency}{insights.total_weekly_spent:,.2f}")
    st.write(f"- Saved: {currency}{max(0.0, insights.available_balance):,.2f}")
    if insights.savings_rate is not None:
        st.write(f"- Savings rate: {insights.savings_rate:.0f}% ({insights.savings_band.value})")
    else:
        st.caption("Set a daily allowance in the budget planner to see your savings rate.")

    if not insights.category_statuses:
        return

    st.markdown("**Budget status**")
    for status in insights.category_statuses:
        line = (
            f"{status.label}: {currency}{status.spent:,.2f} of {currency}{status.limit:,.2f} "
            f"({status.percentage:.0f}%)"
        )
        if status.band is BudgetBand.OVER_BUDGET:
            st.error(f"⚠️ {line} · Over budget!")
        elif status.band is BudgetBand.NEAR_LIMIT:
            st.warning(f"⚡ {line} · Almost over")
        else:
            st.write(f"✓ {line}")
        st.progress(min(1.0, status.percentage / 100))
