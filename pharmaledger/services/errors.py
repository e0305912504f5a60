"""
Domain errors raised by the service layer.

Every error is detected before any mutation is flushed; the caller's
unit of work rolls back whatever was staged. ``main.py`` renders them as
``{"detail": ..., "code": ...}`` with the matching HTTP status.
"""
from datetime import date
from typing import Optional


class LedgerError(Exception):
    status_code = 400
    code = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(LedgerError):
    status_code = 404
    code = "not_found"


class Unauthorized(LedgerError):
    """The record exists but belongs to another tenant, or the role is too weak."""
    status_code = 403
    code = "unauthorized"


class InsufficientStock(LedgerError):
    code = "insufficient_stock"

    def __init__(self, item_name: str, available: int, requested: Optional[int] = None):
        self.item_name = item_name
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient stock for {item_name}. Available: {available}")


class ExpiredLot(LedgerError):
    code = "expired_lot"

    def __init__(self, item_name: str, batch_number: str, expiry_date: date):
        self.item_name = item_name
        self.batch_number = batch_number
        self.expiry_date = expiry_date
        super().__init__(
            f"Cannot sell {item_name} (batch {batch_number}): expired on {expiry_date.isoformat()}"
        )


class InvalidAmount(LedgerError):
    code = "invalid_amount"


class InvalidInput(LedgerError):
    code = "invalid_input"


class EmptyInput(InvalidInput):
    code = "empty_input"


class AlreadySettled(LedgerError):
    status_code = 409
    code = "already_settled"


class ConcurrentUpdate(LedgerError):
    status_code = 409
    code = "concurrent_update"
