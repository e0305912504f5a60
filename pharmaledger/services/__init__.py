# Services package - business logic shared by the routes
from .errors import (
    LedgerError, NotFound, Unauthorized, InsufficientStock, ExpiredLot,
    InvalidAmount, InvalidInput, EmptyInput, AlreadySettled, ConcurrentUpdate
)
from .inventory_service import InventoryStore, StockLine
from .billing_service import BillingService
from .returns_service import ReturnsService
from .customer_ledger_service import CustomerLedgerService
from .supplier_ledger_service import SupplierLedgerService

__all__ = [
    "LedgerError",
    "NotFound",
    "Unauthorized",
    "InsufficientStock",
    "ExpiredLot",
    "InvalidAmount",
    "InvalidInput",
    "EmptyInput",
    "AlreadySettled",
    "ConcurrentUpdate",
    "InventoryStore",
    "StockLine",
    "BillingService",
    "ReturnsService",
    "CustomerLedgerService",
    "SupplierLedgerService",
]
