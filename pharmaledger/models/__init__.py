# Models package - exports all models
from ..database import Base
from .public_models import Tenant
from .pharmacy_models import Supplier, MedicineLot
from .sales_models import Bill, BillLine, PaymentStatus
from .customer_models import Customer
from .accounting_models import (
    CustomerLedgerEntry, SupplierLedgerEntry,
    CustomerEntryType, SupplierEntryType,
    customer_entry_sign, supplier_entry_sign
)
from .procurement_models import ReturnRecord

__all__ = [
    "Base",  # Re-exported from database
    "Tenant",
    "Supplier",
    "MedicineLot",
    "Bill",
    "BillLine",
    "PaymentStatus",
    "Customer",
    "CustomerLedgerEntry",
    "SupplierLedgerEntry",
    "CustomerEntryType",
    "SupplierEntryType",
    "customer_entry_sign",
    "supplier_entry_sign",
    "ReturnRecord",
]
