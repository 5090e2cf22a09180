# allowance_tracker/ui/insights.py
import streamlit as st

from allowance_tracker.core.insights import Severity

ICONS = {
    Severity.ALERT: "⚠️",
    Severity.WARNING: "⚡",
    Severity.INFO: "💸",
    Severity.REMINDER: "📝",
    Severity.TIP: "🎯",
}

MONEY_TIPS = [
    ("Track immediately", "Log expenses right after purchasing so you don't forget"),
    ("50-30-20 Rule", "50% needs (food, transport), 30% wants (snacks, load), 20% savings"),
    ("Avoid impulse buying", "Wait 24 hours before buying non-essential items"),
    ("Share with friends", "Split costs for group projects, snacks, and rides"),
    ("Use student discounts", "Many stores offer student discounts - always ask!"),
]


def render_insights(insights) -> None:
    st.subheader("Notifications")
    if not insights.notifications:
        st.success("All good! No alerts right now.")
    for note in insights.notifications:
        text = f"{ICONS.get(note.severity, '')} **{note.title}** · {note.message}"
        if note.severity is Severity.ALERT:
            st.error(text)
        elif note.severity is Severity.WARNING:
            st.warning(text)
        else:
            st.info(text)

    st.subheader("Insights")
    if not insights.advice:
        st.info("Log a few expenses to get personalised insights.")
    for item in insights.advice:
        with st.container(border=True):
            st.markdown(f"**{item.title}**")
            st.write(item.message)
            if item.action:
                st.caption(f"💡 Tip: {item.action}")

    with st.expander("Money tips for students", expanded=False):
        for i, (head, tip) in enumerate(MONEY_TIPS, start=1):
            st.markdown(f"{i}. **{head}:** {tip}")
