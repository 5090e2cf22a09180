from datetime import datetime, timedelta, timezone

import pytest

from allowance_tracker.core.insights import (
    DAY_MS,
    BudgetBand,
    Priority,
    SavingsBand,
    Severity,
    build_insights,
    classify_savings_rate,
    tracking_streak,
)
from allowance_tracker.models.records import BudgetConfig, TransactionRecord, to_epoch_ms

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
NOW_MS = to_epoch_ms(NOW)
WEEK_MS = 7 * DAY_MS

BAND_ORDER = {
    SavingsBand.OVERSPENDING: 0,
    SavingsBand.LOW: 1,
    SavingsBand.GOOD: 2,
    SavingsBand.EXCELLENT: 3,
}


def tx(amount, category="Food & Snacks", ago_ms=0, kind="expense", tx_id=None):
    ts = NOW_MS - ago_ms
    return TransactionRecord(
        id=tx_id or f"{ts}-{category}-{amount}",
        title=category,
        amount=amount,
        kind=kind,
        category=category,
        timestamp=ts,
    )


def test_allowance_example_is_excellent_band():
    budget = BudgetConfig(daily_allowance=100)
    txns = [
        tx(200, "Food & Snacks", ago_ms=DAY_MS),
        tx(100, "Transportation", ago_ms=2 * DAY_MS),
    ]
    result = build_insights(txns, budget, now=NOW)

    assert result.weekly_allowance == 700
    assert result.total_weekly_spent == 300
    assert result.available_balance == 400
    assert result.savings_rate == pytest.approx(57.142857, rel=1e-4)
    assert result.savings_band is SavingsBand.EXCELLENT


def test_category_over_budget_example():
    budget = BudgetConfig(limits={"food": 50})
    result = build_insights([tx(400, "Food & Snacks", ago_ms=DAY_MS)], budget, now=NOW)

    (status,) = result.category_statuses
    assert status.limit == 350
    assert status.percentage == pytest.approx(114.2857, rel=1e-4)
    assert status.band is BudgetBand.OVER_BUDGET
    assert status.remaining == -50

    alert = result.notifications[0]
    assert alert.id == "budget-food"
    assert alert.severity is Severity.ALERT
    assert "₱50.00" in alert.message


def test_near_limit_warning():
    budget = BudgetConfig(limits={"food": 10})
    result = build_insights([tx(56, ago_ms=DAY_MS)], budget, now=NOW)

    assert result.category_statuses[0].band is BudgetBand.NEAR_LIMIT
    warning = result.notifications[0]
    assert warning.severity is Severity.WARNING
    assert "80%" in warning.message


def test_fine_category_has_status_but_no_alert():
    budget = BudgetConfig(limits={"transportation": 100})
    result = build_insights([tx(10, "Transportation", ago_ms=DAY_MS)], budget, now=NOW)

    assert result.category_statuses[0].band is BudgetBand.FINE
    assert result.warnings == ()
    assert not [n for n in result.notifications if n.id.startswith("budget-")]


def test_window_boundary_is_inclusive_at_cutoff():
    at_cutoff = tx(30, ago_ms=WEEK_MS, tx_id="at-cutoff")
    just_before = tx(70, ago_ms=WEEK_MS + 1, tx_id="just-before")
    result = build_insights([at_cutoff, just_before], BudgetConfig(), now=NOW)

    assert result.window_start == NOW_MS - WEEK_MS
    assert result.total_weekly_spent == 30
    assert result.weekly_spending == {"food": 30}


def test_grouped_spend_sums_to_total():
    txns = [
        tx(12.5, "Food & Snacks", ago_ms=1000),
        tx(40, "Transportation", ago_ms=DAY_MS),
        tx(99.99, "Entertainment", ago_ms=2 * DAY_MS),
        tx(15, "Other", ago_ms=3 * DAY_MS),
        tx(8.25, "Load/Data", ago_ms=4 * DAY_MS),
        tx(500, "Allowance", ago_ms=DAY_MS, kind="income"),
        tx(1000, "Projects", ago_ms=10 * DAY_MS),
    ]
    result = build_insights(txns, BudgetConfig(), now=NOW)

    assert result.weekly_spending["other"] == pytest.approx(114.99)
    assert "projects" not in result.weekly_spending
    assert sum(result.weekly_spending.values()) == pytest.approx(result.total_weekly_spent)
    assert result.total_weekly_spent == pytest.approx(175.74)


def test_savings_band_is_monotonic_in_spend():
    budget = BudgetConfig(daily_allowance=100)
    previous = None
    for spend in range(0, 1001, 25):
        txns = [tx(spend, ago_ms=DAY_MS)] if spend else []
        band = build_insights(txns, budget, now=NOW).savings_band
        if previous is not None:
            assert BAND_ORDER[band] <= BAND_ORDER[previous]
        previous = band
    assert previous is SavingsBand.OVERSPENDING


def test_savings_band_thresholds():
    assert classify_savings_rate(20.01) is SavingsBand.EXCELLENT
    assert classify_savings_rate(20) is SavingsBand.GOOD
    assert classify_savings_rate(10.5) is SavingsBand.GOOD
    assert classify_savings_rate(10) is SavingsBand.LOW
    assert classify_savings_rate(0.1) is SavingsBand.LOW
    assert classify_savings_rate(0) is SavingsBand.OVERSPENDING
    assert classify_savings_rate(-15) is SavingsBand.OVERSPENDING


def test_overspending_raises_alert():
    budget = BudgetConfig(daily_allowance=10)
    result = build_insights([tx(100, ago_ms=DAY_MS)], budget, now=NOW)

    assert result.savings_band is SavingsBand.OVERSPENDING
    assert result.available_balance == -30
    overspend = [n for n in result.notifications if n.id == "savings-rate"]
    assert overspend and "over budget by 43%" in overspend[0].message


def test_same_inputs_give_same_output():
    txns = [tx(50, ago_ms=DAY_MS), tx(20, "Transportation", ago_ms=2 * DAY_MS)]
    snapshot = list(txns)
    budget = BudgetConfig(daily_allowance=100, limits={"food": 5})

    first = build_insights(txns, budget, now=NOW)
    second = build_insights(txns, budget, now=NOW)

    assert first == second
    assert txns == snapshot


def test_missing_budget_skips_budget_messages():
    result = build_insights([tx(50, ago_ms=DAY_MS)], None, now=NOW)

    assert result.savings_rate is None
    assert result.savings_band is None
    assert result.category_statuses == ()
    assert result.available_balance == -50


def test_notifications_ranked_by_priority():
    budget = BudgetConfig(limits={"food": 10})
    txns = [tx(25, ago_ms=i * 60 * 60 * 1000) for i in range(11)]
    result = build_insights(txns, budget, now=NOW)

    assert [n.id for n in result.notifications] == ["budget-food", "no-savings", "high-daily"]
    priorities = [n.priority for n in result.notifications]
    assert priorities == sorted(priorities, reverse=True)
    assert result.today_spent == 275


def test_near_limit_ties_with_medium_tips():
    budget = BudgetConfig(daily_allowance=5, limits={"food": 10})
    txns = [tx(6, ago_ms=i * 60 * 60 * 1000) for i in range(11)]
    result = build_insights(txns, budget, now=NOW)

    assert result.category_statuses[0].band is BudgetBand.NEAR_LIMIT
    assert [n.id for n in result.notifications] == ["savings-rate", "budget-food", "no-savings"]
    assert [n.priority for n in result.notifications] == [Priority.HIGH, Priority.MEDIUM, Priority.MEDIUM]


@pytest.mark.parametrize("hour, minute, expected", [
    (10, 0, False),
    (16, 59, False),
    (17, 0, True),
    (18, 0, True),
])
def test_tracking_reminder_only_late_in_the_day(hour, minute, expected):
    old = [tx(10, ago_ms=2 * DAY_MS)]
    result = build_insights(old, BudgetConfig(), now=NOW.replace(hour=hour, minute=minute))

    assert ("no-tracking" in [n.id for n in result.notifications]) is expected


def test_descriptive_advice():
    txns = [
        tx(300, "Food & Snacks", ago_ms=DAY_MS),
        tx(100, "Transportation", ago_ms=DAY_MS),
        tx(20, "Transportation", ago_ms=0),
    ]
    result = build_insights(txns, BudgetConfig(), now=NOW)
    advice = {a.id: a for a in result.advice}

    assert result.top_category == "Food & Snacks"
    assert advice["top-category"].message == "Food & Snacks: ₱300.00 this week"
    assert advice["top-category"].action.startswith("Bring lunch from home")
    assert result.daily_average == pytest.approx(60)
    assert advice["daily-average"].action == "Great job keeping daily spending low!"
    assert advice["streak"].message == "You've logged entries 2 days in a row"


def test_savings_limit_gets_status_and_goal_advice():
    budget = BudgetConfig(limits={"savings": 20, "food": 100})
    txns = [tx(150, "Savings", ago_ms=DAY_MS)]
    result = build_insights(txns, budget, now=NOW)

    assert [s.key.value for s in result.category_statuses] == ["food", "savings"]
    savings = result.category_statuses[1]
    assert savings.limit == 140
    assert savings.band is BudgetBand.OVER_BUDGET
    assert "budget-savings" in [n.id for n in result.notifications]
    goal = [a for a in result.advice if a.id == "savings-goal"][0]
    assert goal.title == "Savings Goal Reached"
    assert result.weekly_saved == 150


def test_tracking_streak_counts_from_yesterday_when_today_is_empty():
    txns = [
        tx(1, ago_ms=DAY_MS),
        tx(1, ago_ms=2 * DAY_MS),
        tx(1, ago_ms=4 * DAY_MS),
    ]
    assert tracking_streak(txns, NOW) == 2
    assert tracking_streak(txns + [tx(1, ago_ms=0)], NOW) == 3
    assert tracking_streak([], NOW) == 0


def test_priority_and_severity_serialisation():
    result = build_insights([tx(400, ago_ms=DAY_MS)], BudgetConfig(limits={"food": 50}), now=NOW)
    data = result.to_dict()

    assert data["notifications"][0]["type"] == "alert"
    assert data["notifications"][0]["priority"] == Priority.HIGH.name.lower()
    assert data["categories"][0]["percentage"] == "114"
    assert data["windowStart"] == str(NOW_MS - WEEK_MS)
