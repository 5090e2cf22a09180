# allowance_tracker/core/insights.py
"""
Budget-vs-spending aggregation and advice generation.

`build_insights` is the single implementation every surface renders from
(the REST notifications endpoint and the Streamlit pages). It is a pure
function of (transactions, budget, now): it never touches storage and never
mutates its inputs, so calling it twice with the same arguments gives equal
results.

Conventions:
  * The trailing window is the last 7 days relative to `now`. A transaction
    stamped exactly at the cutoff is inside the window; one a millisecond
    earlier is not.
  * Budget figures are daily amounts and are multiplied by 7 before being
    compared with trailing-window spending.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from allowance_tracker.core.categories import (
    BUDGET_KEYS,
    SAVINGS_LABEL,
    CategoryKey,
    category_key,
    category_label,
    spending_tip,
)
from allowance_tracker.models.records import BudgetConfig, TransactionRecord, to_epoch_ms

WINDOW_DAYS = 7
DAY_MS = 24 * 60 * 60 * 1000

NEAR_LIMIT_PCT = 80
OVER_LIMIT_PCT = 100

EXCELLENT_RATE = 20
GOOD_RATE = 10

HIGH_DAILY_SPEND = 200
HIGH_DAILY_AVERAGE = 100
TRACKING_REMINDER_HOUR = 16
NO_SAVINGS_MIN_TRANSACTIONS = 10
MIN_STREAK_DAYS = 2

DEFAULT_CURRENCY = "₱"


class Severity(str, Enum):
    ALERT = "alert"
    WARNING = "warning"
    INFO = "info"
    REMINDER = "reminder"
    TIP = "tip"


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class BudgetBand(str, Enum):
    OVER_BUDGET = "over_budget"
    NEAR_LIMIT = "near_limit"
    FINE = "fine"


class SavingsBand(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    LOW = "low"
    OVERSPENDING = "overspending"


@dataclass(frozen=True)
class Insight:
    id: str
    title: str
    message: str
    severity: Severity
    action: str = ""
    category: Optional[str] = None
    priority: Priority = Priority.LOW

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.severity.value,
            "action": self.action,
            "category": self.category,
            "priority": self.priority.name.lower(),
        }


@dataclass(frozen=True)
class CategoryStatus:
    key: CategoryKey
    label: str
    spent: float
    limit: float  # weekly
    percentage: float
    band: BudgetBand

    @property
    def remaining(self) -> float:
        return self.limit - self.spent

    def to_dict(self) -> dict:
        return {
            "category": self.key.value,
            "label": self.label,
            "spent": self.spent,
            "budget": self.limit,
            "remaining": self.remaining,
            "percentage": f"{self.percentage:.0f}",
            "band": self.band.value,
        }


@dataclass(frozen=True)
class Insights:
    window_start: int
    weekly_spending: Dict[str, float]
    total_weekly_spent: float
    weekly_allowance: float
    available_balance: float
    savings_rate: Optional[float] = None
    savings_band: Optional[SavingsBand] = None
    category_statuses: Tuple[CategoryStatus, ...] = ()
    notifications: Tuple[Insight, ...] = ()
    advice: Tuple[Insight, ...] = ()
    top_category: Optional[str] = None
    daily_average: float = 0.0
    streak_days: int = 0
    today_spent: float = 0.0
    weekly_saved: float = 0.0

    @property
    def warnings(self) -> Tuple[CategoryStatus, ...]:
        """Categories at or past the near-limit threshold."""
        return tuple(s for s in self.category_statuses if s.band is not BudgetBand.FINE)

    def to_dict(self) -> dict:
        return {
            "windowStart": str(self.window_start),
            "weeklySpending": dict(self.weekly_spending),
            "totalSpent": self.total_weekly_spent,
            "weeklyAllowance": self.weekly_allowance,
            "availableBalance": self.available_balance,
            "savingsRate": self.savings_rate,
            "savingsBand": self.savings_band.value if self.savings_band else None,
            "categories": [s.to_dict() for s in self.category_statuses],
            "notifications": [n.to_dict() for n in self.notifications],
            "advice": [a.to_dict() for a in self.advice],
            "topCategory": self.top_category,
            "dailyAverage": self.daily_average,
            "streakDays": self.streak_days,
            "todaySpent": self.today_spent,
        }


# -----------------------
# Building blocks
# -----------------------
def window_cutoff(now_ms: int, days: int = WINDOW_DAYS) -> int:
    return now_ms - days * DAY_MS


def trailing_expenses(transactions: Iterable[TransactionRecord], cutoff_ms: int) -> List[TransactionRecord]:
    return [t for t in transactions if t.is_expense and t.timestamp >= cutoff_ms]


def spending_by_category(expenses: Iterable[TransactionRecord]) -> Dict[str, float]:
    """Sum amounts per category key."""
    totals: Dict[str, float] = defaultdict(float)
    for t in expenses:
        totals[category_key(t.category).value] += t.amount
    return dict(totals)


def classify_budget(percentage: float) -> BudgetBand:
    if percentage >= OVER_LIMIT_PCT:
        return BudgetBand.OVER_BUDGET
    if percentage >= NEAR_LIMIT_PCT:
        return BudgetBand.NEAR_LIMIT
    return BudgetBand.FINE


def classify_savings_rate(rate: float) -> SavingsBand:
    if rate > EXCELLENT_RATE:
        return SavingsBand.EXCELLENT
    if rate > GOOD_RATE:
        return SavingsBand.GOOD
    if rate > 0:
        return SavingsBand.LOW
    return SavingsBand.OVERSPENDING


def tracking_streak(transactions: Iterable[TransactionRecord], now: datetime) -> int:
    """
    Consecutive calendar days with at least one logged entry, ending today
    (or yesterday when nothing has been logged yet today).
    """
    now_ms = to_epoch_ms(now)
    days = {
        datetime.fromtimestamp(t.timestamp / 1000, tz=now.tzinfo).date()
        for t in transactions
        if t.timestamp <= now_ms
    }
    day = now.date()
    if day not in days:
        day -= timedelta(days=1)
    streak = 0
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def _start_of_day_ms(now: datetime) -> int:
    return to_epoch_ms(now.replace(hour=0, minute=0, second=0, microsecond=0))


# -----------------------
# Message builders
# -----------------------
def _category_statuses(budget: BudgetConfig, weekly_spending: Dict[str, float]) -> List[CategoryStatus]:
    statuses = []
    for key in BUDGET_KEYS:
        limit = budget.weekly_limit(key)
        if limit <= 0:
            continue
        spent = weekly_spending.get(key.value, 0.0)
        percentage = spent / limit * 100
        statuses.append(CategoryStatus(
            key=key,
            label=category_label(key),
            spent=spent,
            limit=limit,
            percentage=percentage,
            band=classify_budget(percentage),
        ))
    return statuses


def _budget_alert(status: CategoryStatus, currency: str) -> Optional[Insight]:
    if status.band is BudgetBand.OVER_BUDGET:
        return Insight(
            id=f"budget-{status.key.value}",
            title=f"{status.label} Budget Exceeded",
            message=(
                f"You've exceeded your weekly budget by {currency}{abs(status.remaining):.2f}. "
                "Consider cutting back."
            ),
            severity=Severity.ALERT,
            action=spending_tip(status.label),
            category=status.label,
            priority=Priority.HIGH,
        )
    if status.band is BudgetBand.NEAR_LIMIT:
        return Insight(
            id=f"budget-{status.key.value}",
            title=f"{status.label} Budget Warning",
            message=(
                f"You've used {status.percentage:.0f}% of your budget. "
                f"Only {currency}{status.remaining:.2f} left."
            ),
            severity=Severity.WARNING,
            action=spending_tip(status.label),
            category=status.label,
            priority=Priority.MEDIUM,
        )
    return None


_SAVINGS_TEXT = {
    SavingsBand.EXCELLENT: (
        "Excellent! Keep up the good savings habit!",
        "Move what is left into your savings goal",
    ),
    SavingsBand.GOOD: (
        "Good job! Push a little more to reach 20%",
        "Skip one non-essential purchase this week",
    ),
    SavingsBand.LOW: (
        "Try to save at least 20% of your allowance",
        "Set aside savings as soon as you receive your allowance",
    ),
    SavingsBand.OVERSPENDING: (
        "You need to cut back on spending to stay within budget",
        "Pause non-essential spending until your next allowance",
    ),
}


def _savings_insight(rate: float, band: SavingsBand) -> Insight:
    tip, action = _SAVINGS_TEXT[band]
    if band is SavingsBand.OVERSPENDING:
        title = "Overspending"
        if rate < 0:
            message = f"You're over budget by {abs(rate):.0f}%"
        else:
            message = "You've used up all of your allowance"
    else:
        title = "Savings Rate"
        message = f"You're saving {rate:.0f}% of your allowance"
    return Insight(
        id="savings-rate",
        title=title,
        message=f"{message}. {tip}",
        severity=Severity.ALERT if band is SavingsBand.OVERSPENDING else Severity.INFO,
        action=action,
        priority=Priority.HIGH if band is SavingsBand.OVERSPENDING else Priority.MEDIUM,
    )


def _daily_notifications(
    transactions: Sequence[TransactionRecord],
    now: datetime,
    today_spent: float,
    currency: str,
) -> List[Insight]:
    notes = []
    today_ms = _start_of_day_ms(now)

    if today_spent > HIGH_DAILY_SPEND:
        notes.append(Insight(
            id="high-daily",
            title="High Spending Today",
            message=f"You've spent {currency}{today_spent:.2f} today. That's quite high for a school day!",
            severity=Severity.INFO,
            action="Check whether any of today's purchases could have waited",
            priority=Priority.LOW,
        ))

    logged_today = any(t.timestamp >= today_ms for t in transactions)
    if not logged_today and now.hour > TRACKING_REMINDER_HOUR:
        notes.append(Insight(
            id="no-tracking",
            title="Don't Forget to Track",
            message="You haven't logged any transactions today. Did you spend anything at school?",
            severity=Severity.REMINDER,
            action="Log today's expenses before you forget them",
            priority=Priority.LOW,
        ))

    has_savings = any(t.category == SAVINGS_LABEL for t in transactions)
    if not has_savings and len(transactions) > NO_SAVINGS_MIN_TRANSACTIONS:
        notes.append(Insight(
            id="no-savings",
            title="Start Saving!",
            message="You haven't set aside any savings yet. Try to save at least 10% of your allowance.",
            severity=Severity.TIP,
            action="Record a Savings entry whenever you put money aside",
            priority=Priority.MEDIUM,
        ))
    return notes


def _savings_goal_insight(saved: float, goal: float, currency: str) -> Insight:
    if saved >= goal:
        return Insight(
            id="savings-goal",
            title="Savings Goal Reached",
            message=f"You've saved {currency}{saved:.2f} this week, meeting your {currency}{goal:.2f} goal.",
            severity=Severity.INFO,
            action="Keep the extra in savings instead of spending it",
            category=SAVINGS_LABEL,
            priority=Priority.LOW,
        )
    return Insight(
        id="savings-goal",
        title="Savings Goal",
        message=f"You've saved {currency}{saved:.2f} of your {currency}{goal:.2f} weekly goal.",
        severity=Severity.TIP,
        action=f"Set aside {currency}{goal - saved:.2f} more before the week ends",
        category=SAVINGS_LABEL,
        priority=Priority.LOW,
    )


def rank(notes: Iterable[Insight]) -> List[Insight]:
    """Highest priority first; order within a priority level is preserved."""
    return sorted(notes, key=lambda n: -int(n.priority))


# -----------------------
# Public API
# -----------------------
def build_insights(
    transactions: Sequence[TransactionRecord],
    budget: Optional[BudgetConfig] = None,
    now: Optional[datetime] = None,
    currency: str = DEFAULT_CURRENCY,
) -> Insights:
    """
    Aggregate the trailing week of spending against the budget and derive
    alerts plus descriptive advice.

    Missing or zero inputs simply skip the related messages: no allowance
    means no savings rate, no category limit means no status for it.
    """
    budget = budget or BudgetConfig()
    now = now or datetime.now()
    now_ms = to_epoch_ms(now)
    cutoff = window_cutoff(now_ms)

    expenses = trailing_expenses(transactions, cutoff)
    weekly_spending = spending_by_category(expenses)
    total_spent = sum(t.amount for t in expenses)

    weekly_allowance = budget.weekly_allowance
    available = weekly_allowance - total_spent

    today_ms = _start_of_day_ms(now)
    today_spent = sum(t.amount for t in transactions if t.is_expense and t.timestamp >= today_ms)

    statuses = _category_statuses(budget, weekly_spending)
    notes: List[Insight] = [a for a in (_budget_alert(s, currency) for s in statuses) if a]

    savings_rate = None
    savings_band = None
    if weekly_allowance > 0:
        savings_rate = available / weekly_allowance * 100
        savings_band = classify_savings_rate(savings_rate)
        if savings_band is SavingsBand.OVERSPENDING:
            notes.append(_savings_insight(savings_rate, savings_band))

    notes.extend(_daily_notifications(transactions, now, today_spent, currency))

    advice: List[Insight] = []
    top_category = None
    daily_average = total_spent / WINDOW_DAYS
    if expenses:
        by_label: Dict[str, float] = defaultdict(float)
        for t in expenses:
            by_label[t.category] += t.amount
        top_category, top_amount = max(by_label.items(), key=lambda item: item[1])
        advice.append(Insight(
            id="top-category",
            title="Top Spending Category",
            message=f"{top_category}: {currency}{top_amount:.2f} this week",
            severity=Severity.INFO,
            action=spending_tip(top_category),
            category=top_category,
        ))
        advice.append(Insight(
            id="daily-average",
            title="Daily Average",
            message=f"You spend about {currency}{daily_average:.2f} per day",
            severity=Severity.INFO,
            action=(
                "Try to bring baon to reduce daily expenses"
                if daily_average > HIGH_DAILY_AVERAGE
                else "Great job keeping daily spending low!"
            ),
        ))

    if savings_band is not None:
        advice.append(_savings_insight(savings_rate, savings_band))

    weekly_saved = weekly_spending.get(CategoryKey.SAVINGS.value, 0.0)
    goal = budget.weekly_limit(CategoryKey.SAVINGS)
    if goal > 0:
        advice.append(_savings_goal_insight(weekly_saved, goal, currency))

    streak = tracking_streak(transactions, now)
    if streak >= MIN_STREAK_DAYS:
        advice.append(Insight(
            id="streak",
            title="Tracking Streak",
            message=f"You've logged entries {streak} days in a row",
            severity=Severity.INFO,
            action="Keep logging daily to see where your allowance goes",
        ))

    return Insights(
        window_start=cutoff,
        weekly_spending=weekly_spending,
        total_weekly_spent=total_spent,
        weekly_allowance=weekly_allowance,
        available_balance=available,
        savings_rate=savings_rate,
        savings_band=savings_band,
        category_statuses=tuple(statuses),
        notifications=tuple(rank(notes)),
        advice=tuple(advice),
        top_category=top_category,
        daily_average=daily_average,
        streak_days=streak,
        today_spent=today_spent,
        weekly_saved=weekly_saved,
    )
