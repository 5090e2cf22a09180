# allowance_tracker/services/storage.py
"""
On-device key-value storage: one JSON file mapping string keys to JSON
values. Transactions and the budget are each read and written wholesale
under their own key.
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from allowance_tracker.core.errors import StorageError
from allowance_tracker.models.records import BudgetConfig, TransactionRecord, build_transaction

logger = logging.getLogger(__name__)

STORAGE_PATH = os.getenv("STORAGE_PATH", "data/storage.json")

TRANSACTIONS_KEY = "transactions"
BUDGETS_KEY = "budgets"
LAUNCHED_KEY = "hasLaunched"


class LocalStore:
    def __init__(self, path: Optional[str] = None):
        self.path = path or STORAGE_PATH

    # ---------- raw key-value access ----------
    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Storage file %s unreadable, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold an object, starting empty", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            folder = os.path.dirname(self.path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc

    def get_item(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set_item(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        self._write({})

    # ---------- transactions ----------
    def load_transactions(self) -> List[TransactionRecord]:
        raw = self.get_item(TRANSACTIONS_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed '%s' entry", TRANSACTIONS_KEY)
            return []
        return [TransactionRecord.from_dict(item) for item in raw if isinstance(item, dict)]

    def save_transactions(self, transactions: List[TransactionRecord]) -> None:
        self.set_item(TRANSACTIONS_KEY, [t.to_dict() for t in transactions])

    def add_transaction(
        self,
        title: str,
        amount: Any,
        kind: str,
        category: str,
        now: Optional[datetime] = None,
    ) -> TransactionRecord:
        """Validate, create and prepend a new entry. Returns the stored record."""
        existing = self.load_transactions()
        record = build_transaction(
            title, amount, kind, category, now=now, existing_ids=(t.id for t in existing)
        )
        self.save_transactions([record] + existing)
        logger.info("Added %s %s (%s)", record.kind, record.id, record.category)
        return record

    def delete_transaction(self, transaction_id: str) -> bool:
        existing = self.load_transactions()
        kept = [t for t in existing if t.id != transaction_id]
        if len(kept) == len(existing):
            return False
        self.save_transactions(kept)
        logger.info("Deleted transaction %s", transaction_id)
        return True

    def clear_transactions(self) -> None:
        self.remove_item(TRANSACTIONS_KEY)

    # ---------- budget ----------
    def load_budget(self) -> BudgetConfig:
        raw = self.get_item(BUDGETS_KEY)
        return BudgetConfig.from_dict(raw if isinstance(raw, dict) else None)

    def save_budget(self, config: BudgetConfig) -> None:
        self.set_item(BUDGETS_KEY, config.to_dict())

    def clear_budget(self) -> None:
        self.remove_item(BUDGETS_KEY)

    # ---------- app state ----------
    def has_launched(self) -> bool:
        return bool(self.get_item(LAUNCHED_KEY, False))

    def mark_launched(self) -> None:
        self.set_item(LAUNCHED_KEY, True)

    def clear_all(self) -> None:
        """Destructive reset: transactions, budget and launch flag."""
        self.clear()
        logger.info("Cleared all local data in %s", self.path)
