# allowance_tracker/services/api_client.py
import logging
import os
from typing import Any, Dict, List, Optional

import requests

from allowance_tracker.core.errors import BudgetAPIError
from allowance_tracker.models.records import BudgetConfig, TransactionRecord

logger = logging.getLogger(__name__)

API_URL = os.getenv("API_URL", "http://localhost:3000/api")
REQUEST_TIMEOUT = int(os.getenv("API_TIMEOUT", 10))  # seconds


class BudgetAPIClient:
    """
    Thin client for the REST backend. Every call either returns decoded JSON
    (or records built from it) or raises BudgetAPIError.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or API_URL).rstrip("/")
        self.timeout = timeout or REQUEST_TIMEOUT
        self.session = session or requests.Session()

    # ---------- transport ----------
    def _request(self, method: str, path: str, failure: str, payload: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise BudgetAPIError(f"{failure}: {exc}") from exc

        if not resp.ok:
            detail = ""
            try:
                detail = (resp.json() or {}).get("error", "")
            except ValueError:
                pass
            logger.error("%s %s -> %s %s", method, url, resp.status_code, detail)
            raise BudgetAPIError(f"{failure}: {detail or resp.status_code}", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise BudgetAPIError(f"{failure}: response is not JSON", status_code=resp.status_code) from exc

    # ---------- public API ----------
    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health", "Failed to reach the budget API")

    def get_transactions(self) -> List[TransactionRecord]:
        data = self._request("GET", "/transactions", "Failed to fetch transactions")
        return [TransactionRecord.from_dict(item) for item in data]

    def get_transaction(self, transaction_id: str) -> TransactionRecord:
        data = self._request("GET", f"/transactions/{transaction_id}", "Failed to fetch transaction")
        return TransactionRecord.from_dict(data)

    def create_transaction(self, title: str, amount: float, kind: str, category: str,
                           **extra: Any) -> TransactionRecord:
        payload = {"title": title, "amount": amount, "type": kind, "category": category, **extra}
        data = self._request("POST", "/transactions", "Failed to create transaction", payload)
        return TransactionRecord.from_dict(data["transaction"])

    def update_transaction(self, transaction_id: str, **fields: Any) -> TransactionRecord:
        if "kind" in fields:
            fields["type"] = fields.pop("kind")
        data = self._request("PUT", f"/transactions/{transaction_id}",
                             "Failed to update transaction", fields)
        return TransactionRecord.from_dict(data["transaction"])

    def delete_transaction(self, transaction_id: str) -> None:
        self._request("DELETE", f"/transactions/{transaction_id}", "Failed to delete transaction")

    def get_summary(self) -> Dict[str, float]:
        return self._request("GET", "/summary", "Failed to fetch summary")

    def get_budget(self) -> BudgetConfig:
        return BudgetConfig.from_dict(self._request("GET", "/budget", "Failed to fetch budget"))

    def save_budget(self, config: BudgetConfig) -> BudgetConfig:
        data = self._request("POST", "/budget", "Failed to save budget", config.to_api_dict())
        return BudgetConfig.from_dict(data["budget"])

    def get_statistics(self, period: str) -> Dict[str, Any]:
        return self._request("GET", f"/statistics/{period}", "Failed to fetch statistics")

    def get_notifications(self) -> Dict[str, Any]:
        return self._request("GET", "/notifications", "Failed to fetch notifications")
