# allowance_tracker/core/errors.py
"""Exception classes shared by the stores, the API and the client."""
from typing import Optional


class BudgetAppError(Exception):
    """Base exception for the allowance tracker."""
    pass


class ValidationError(BudgetAppError):
    """Rejected user input (bad amount, unknown category, bad period...)."""
    pass


class NotFoundError(BudgetAppError):
    """A transaction id that does not exist in the store."""
    pass


class StorageError(BudgetAppError):
    """Local key-value store could not be written."""
    pass


class BudgetAPIError(BudgetAppError):
    """Non-2xx answer or transport failure talking to the REST API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
