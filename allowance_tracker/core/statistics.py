# allowance_tracker/core/statistics.py
from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from allowance_tracker.core.categories import SAVINGS_LABEL
from allowance_tracker.core.errors import ValidationError
from allowance_tracker.models.records import TransactionRecord, to_epoch_ms

PERIODS = ("daily", "weekly", "monthly")
PERIOD_LABELS = {"daily": "Today", "weekly": "This Week", "monthly": "This Month"}


@dataclass(frozen=True)
class PeriodStatistics:
    period: str
    start: int
    total_spent: float = 0.0
    total_income: float = 0.0
    by_category: Dict[str, float] = field(default_factory=dict)
    transactions: List[TransactionRecord] = field(default_factory=list)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def net(self) -> float:
        return self.total_income - self.total_spent

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "totalSpent": self.total_spent,
            "totalIncome": self.total_income,
            "byCategory": dict(self.by_category),
            "transactionCount": self.transaction_count,
            "transactions": [
                {**t.to_dict(), "timestamp": str(t.timestamp)} for t in self.transactions
            ],
        }


@dataclass(frozen=True)
class Summary:
    total_income: float
    total_expense: float
    total_savings: float

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense

    def to_dict(self) -> dict:
        return {
            "totalIncome": self.total_income,
            "totalExpense": self.total_expense,
            "totalSavings": self.total_savings,
            "balance": self.balance,
        }


def _minus_one_month(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """
    daily: midnight today; weekly: the trailing 7 days; monthly: same time one
    calendar month ago (day clamped to the shorter month).
    """
    now = now or datetime.now()
    if period == "daily":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "weekly":
        return now - timedelta(days=7)
    if period == "monthly":
        return _minus_one_month(now)
    raise ValidationError("Invalid period")


def period_statistics(
    transactions: Sequence[TransactionRecord],
    period: str,
    now: Optional[datetime] = None,
) -> PeriodStatistics:
    start_ms = to_epoch_ms(period_start(period, now))
    in_period = sorted(
        (t for t in transactions if t.timestamp >= start_ms),
        key=lambda t: t.timestamp,
        reverse=True,
    )

    spent = 0.0
    income = 0.0
    by_category: Dict[str, float] = defaultdict(float)
    for t in in_period:
        if t.is_expense:
            spent += t.amount
            by_category[t.category] += t.amount
        else:
            income += t.amount

    return PeriodStatistics(
        period=period,
        start=start_ms,
        total_spent=spent,
        total_income=income,
        by_category=dict(by_category),
        transactions=in_period,
    )


def summarize(transactions: Sequence[TransactionRecord]) -> Summary:
    """All-time totals; savings are expenses filed under the Savings category."""
    income = sum(t.amount for t in transactions if not t.is_expense)
    expense = sum(t.amount for t in transactions if t.is_expense)
    savings = sum(t.amount for t in transactions if t.is_expense and t.category == SAVINGS_LABEL)
    return Summary(total_income=income, total_expense=expense, total_savings=savings)
