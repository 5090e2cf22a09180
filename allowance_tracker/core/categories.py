# allowance_tracker/core/categories.py
"""
Category vocabulary: the labels a student picks when logging an entry,
and the smaller set of keys budgets are configured against.
"""
from enum import Enum
from typing import Dict, List


class CategoryKey(str, Enum):
    TRANSPORTATION = "transportation"
    FOOD = "food"
    SUPPLIES = "supplies"
    LOAD = "load"
    PROJECTS = "projects"
    SAVINGS = "savings"
    OTHER = "other"


# Keys a budget can carry a limit for (OTHER never does)
BUDGET_KEYS: List[CategoryKey] = [
    CategoryKey.TRANSPORTATION,
    CategoryKey.FOOD,
    CategoryKey.SUPPLIES,
    CategoryKey.LOAD,
    CategoryKey.PROJECTS,
    CategoryKey.SAVINGS,
]

# Labels offered by the entry form, in display order
CATEGORY_LABELS: List[str] = [
    "Food & Snacks",
    "Transportation",
    "School Supplies",
    "Projects",
    "Load/Data",
    "Entertainment",
    "Savings",
    "Allowance",
    "Other",
]

OTHER_LABEL = "Other"
SAVINGS_LABEL = "Savings"

_LABEL_TO_KEY: Dict[str, CategoryKey] = {
    "Transportation": CategoryKey.TRANSPORTATION,
    "Food & Snacks": CategoryKey.FOOD,
    "School Supplies": CategoryKey.SUPPLIES,
    "Load/Data": CategoryKey.LOAD,
    "Projects": CategoryKey.PROJECTS,
    "Savings": CategoryKey.SAVINGS,
}

_KEY_TO_LABEL: Dict[CategoryKey, str] = {key: label for label, key in _LABEL_TO_KEY.items()}

CATEGORY_DESCRIPTIONS: Dict[str, str] = {
    "Food & Snacks": "Meals, snacks, drinks",
    "Transportation": "Jeepney, tricycle, bus fare",
    "School Supplies": "Pens, paper, notebooks",
    "Projects": "Materials for school projects",
    "Load/Data": "Mobile load, internet data",
    "Entertainment": "Movies, games, leisure",
    "Savings": "Money set aside",
    "Allowance": "Money received from parents",
    "Other": "Miscellaneous expenses",
}

_TIPS: Dict[str, str] = {
    "Food & Snacks": "Bring lunch from home 3x a week to save ₱150-200",
    "Transportation": "Try walking to school or sharing rides to cut transport costs",
    "School Supplies": "Buy supplies in bulk with classmates for better prices",
    "Load/Data": "Use free WiFi at school instead of mobile data",
    "Projects": "Share materials with group mates to split costs",
    "Entertainment": "Look for free activities or student discounts",
}
DEFAULT_TIP = "Look for ways to reduce spending in this category"


def category_key(label: str) -> CategoryKey:
    """Map a user-facing label to its budget key; unknown labels land in OTHER."""
    return _LABEL_TO_KEY.get((label or "").strip(), CategoryKey.OTHER)


def category_label(key) -> str:
    try:
        return _KEY_TO_LABEL.get(CategoryKey(key), OTHER_LABEL)
    except ValueError:
        return OTHER_LABEL


def is_category_label(label: str) -> bool:
    return label in CATEGORY_LABELS


def spending_tip(label: str) -> str:
    return _TIPS.get(label, DEFAULT_TIP)
