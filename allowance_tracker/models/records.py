# allowance_tracker/models/records.py
"""
Plain value records passed between the stores, the aggregation code and the
presentation layers. Both persistence shapes (local JSON store and the SQL
tables) convert to and from these.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional

from allowance_tracker.core.categories import (
    BUDGET_KEYS,
    OTHER_LABEL,
    CategoryKey,
    is_category_label,
)
from allowance_tracker.core.errors import ValidationError

KINDS = ("expense", "income")
DAYS_PER_WEEK = 7


def to_number(value: Any) -> float:
    """Lenient numeric parse: anything missing or malformed becomes 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            # currency symbols and thousands separators, e.g. "₱1,200"
            cleaned = re.sub(r"[^\d.\-]", "", value)
            try:
                number = float(cleaned)
            except ValueError:
                return 0.0
    else:
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_epoch_ms(moment: Optional[datetime] = None) -> int:
    moment = moment or datetime.now()
    return int(round(moment.timestamp() * 1000))


def display_date(moment: datetime) -> str:
    """Short en-PH style date, e.g. 3/7/2025."""
    return f"{moment.month}/{moment.day}/{moment.year}"


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    title: str
    amount: float
    kind: str
    category: str
    timestamp: int
    date: str = ""

    @property
    def is_expense(self) -> bool:
        return self.kind == "expense"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransactionRecord":
        """Build from the stored/JSON shape; `type` is the wire name of `kind`."""
        timestamp = int(to_number(data.get("timestamp")))
        return cls(
            id=str(data.get("id") or timestamp),
            title=str(data.get("title") or ""),
            amount=to_number(data.get("amount")),
            kind=str(data.get("type") or data.get("kind") or "expense").lower(),
            category=str(data.get("category") or OTHER_LABEL),
            timestamp=timestamp,
            date=str(data.get("date") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "type": self.kind,
            "category": self.category,
            "date": self.date,
            "timestamp": self.timestamp,
        }


def _text(value: Any, name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be text")
    return value.strip()


def build_transaction(
    title: str,
    amount: Any,
    kind: str,
    category: str,
    now: Optional[datetime] = None,
    existing_ids: Iterable[str] = (),
) -> TransactionRecord:
    """
    Validate form input and create a new record stamped with the creation time.
    Raises ValidationError with a user-facing message on bad input.
    """
    value = to_number(amount)
    if value <= 0:
        raise ValidationError("Please enter a valid amount")

    kind = _text(kind, "Type").lower()
    if kind not in KINDS:
        raise ValidationError("Type must be 'expense' or 'income'")

    category = _text(category, "Category")
    if not category:
        raise ValidationError("Please select a category")
    if not is_category_label(category):
        raise ValidationError(f"Unknown category: {category}")

    title = _text(title, "Title")
    if category == OTHER_LABEL and not title:
        raise ValidationError("Please enter a description for Other category")

    now = now or datetime.now()
    timestamp = to_epoch_ms(now)
    taken = set(existing_ids)
    while str(timestamp) in taken:
        timestamp += 1

    return TransactionRecord(
        id=str(timestamp),
        title=title or category,
        amount=value,
        kind=kind,
        category=category,
        timestamp=timestamp,
        date=display_date(now),
    )


@dataclass(frozen=True)
class BudgetConfig:
    """
    Per-category limits and the allowance. All figures are DAILY amounts;
    weekly figures are derived by multiplying by 7.
    """
    daily_allowance: float = 0.0
    limits: Dict[str, float] = field(default_factory=dict)

    @property
    def weekly_allowance(self) -> float:
        return self.daily_allowance * DAYS_PER_WEEK

    @property
    def savings_goal(self) -> float:
        return self.limit(CategoryKey.SAVINGS)

    def limit(self, key) -> float:
        return self.limits.get(CategoryKey(key).value, 0.0)

    def weekly_limit(self, key) -> float:
        return self.limit(key) * DAYS_PER_WEEK

    def with_limit(self, key, value: Any) -> "BudgetConfig":
        limits = dict(self.limits)
        limits[CategoryKey(key).value] = max(0.0, to_number(value))
        return replace(self, limits=limits)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "BudgetConfig":
        """
        Accepts the local-store shape ({"categories": {...}, "dailyAllowance": ...})
        and the flat REST shape ({"dailyAllowance": ..., "food": ..., ...}).
        A payload with only `weeklyAllowance` is converted to a daily figure.
        """
        if not data:
            return cls()
        source = data.get("categories")
        if not isinstance(source, Mapping):
            source = data

        limits: Dict[str, float] = {}
        for key in BUDGET_KEYS:
            value = max(0.0, to_number(source.get(key.value)))
            if value > 0:
                limits[key.value] = value

        daily = to_number(data.get("dailyAllowance"))
        if daily <= 0:
            daily = to_number(data.get("weeklyAllowance")) / DAYS_PER_WEEK
        return cls(daily_allowance=max(0.0, daily), limits=limits)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": {key.value: self.limit(key) for key in BUDGET_KEYS},
            "dailyAllowance": self.daily_allowance,
            "weeklyAllowance": self.weekly_allowance,
            "frequency": "daily",
        }

    def to_api_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "dailyAllowance": self.daily_allowance,
            "weeklyAllowance": self.weekly_allowance,
        }
        for key in BUDGET_KEYS:
            out[key.value] = self.limit(key)
        return out


def overcommitted_by(config: BudgetConfig) -> float:
    """How far the summed daily category limits exceed the daily allowance (0 if they fit)."""
    planned = sum(config.limit(key) for key in BUDGET_KEYS)
    return max(0.0, planned - config.daily_allowance)
