# allowance_tracker/services/ledger.py
"""CRUD helpers over the transactions and budgets tables. Callers own the session."""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from allowance_tracker.core.categories import is_category_label
from allowance_tracker.core.errors import NotFoundError, ValidationError
from allowance_tracker.models.records import (
    KINDS,
    BudgetConfig,
    TransactionRecord,
    build_transaction,
    display_date,
    to_number,
)
from allowance_tracker.models.transaction import DEFAULT_USER, Budget, Transaction

REQUIRED_FIELDS = ("title", "amount", "type", "category")


# -----------------------
# Transactions
# -----------------------
def list_transactions(session: Session) -> List[Transaction]:
    return session.query(Transaction).order_by(Transaction.timestamp.desc()).all()


def transaction_records(session: Session) -> List[TransactionRecord]:
    return [row.to_record() for row in list_transactions(session)]


def get_transaction(session: Session, transaction_id: str) -> Transaction:
    row = session.get(Transaction, str(transaction_id))
    if row is None:
        raise NotFoundError("Transaction not found")
    return row


def create_transaction(
    session: Session, data: Mapping[str, Any], now: Optional[datetime] = None
) -> Transaction:
    """
    Insert a transaction from a request payload. `id`, `date` and `timestamp`
    are generated from the creation time unless the payload carries them.
    """
    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    record = build_transaction(
        data["title"], data["amount"], data["type"], data["category"], now=now
    )
    if data.get("id"):
        if session.get(Transaction, str(data["id"])) is not None:
            raise ValidationError("Transaction id already exists")
        row_id = str(data["id"])
    else:
        row_id = record.id
        while session.get(Transaction, row_id) is not None:
            row_id = str(int(row_id) + 1)

    timestamp = int(to_number(data.get("timestamp"))) or record.timestamp
    date = record.date
    if timestamp != record.timestamp:
        tz = now.tzinfo if now else None
        date = display_date(datetime.fromtimestamp(timestamp / 1000, tz=tz))
    row = Transaction(
        id=row_id,
        title=record.title,
        amount=record.amount,
        type=record.kind,
        category=record.category,
        date=str(data.get("date") or date),
        timestamp=timestamp,
    )
    session.add(row)
    session.flush()
    return row


def update_transaction(session: Session, transaction_id: str, data: Mapping[str, Any]) -> Transaction:
    row = get_transaction(session, transaction_id)

    if "amount" in data:
        amount = to_number(data.get("amount"))
        if amount <= 0:
            raise ValidationError("Please enter a valid amount")
        row.amount = amount
    if data.get("type"):
        kind = str(data["type"]).strip().lower()
        if kind not in KINDS:
            raise ValidationError("Type must be 'expense' or 'income'")
        row.type = kind
    if data.get("category"):
        if not is_category_label(data["category"]):
            raise ValidationError(f"Unknown category: {data['category']}")
        row.category = data["category"]
    if data.get("title"):
        if not isinstance(data["title"], str):
            raise ValidationError("Title must be text")
        row.title = data["title"].strip()
    if data.get("date"):
        row.date = str(data["date"])

    session.flush()
    return row


def delete_transaction(session: Session, transaction_id: str) -> None:
    session.delete(get_transaction(session, transaction_id))
    session.flush()


# -----------------------
# Budget
# -----------------------
def get_budget(session: Session, user_id: str = DEFAULT_USER) -> Budget:
    """Fetch the user's budget row, creating an all-zero one on first read."""
    row = session.query(Budget).filter_by(user_id=user_id).one_or_none()
    if row is None:
        row = Budget(user_id=user_id)
        row.apply_config(BudgetConfig())
        session.add(row)
        session.flush()
    return row


def save_budget(session: Session, data: Mapping[str, Any], user_id: str = DEFAULT_USER) -> Budget:
    """Upsert: the whole record is overwritten from the payload, bad numbers become 0."""
    row = get_budget(session, user_id)
    row.apply_config(BudgetConfig.from_dict(data))
    session.flush()
    return row


def budget_config(session: Session, user_id: str = DEFAULT_USER) -> BudgetConfig:
    return get_budget(session, user_id).to_config()
