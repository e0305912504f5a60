from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey, Enum as SQLEnum, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base
import enum

# Enums
class CustomerEntryType(str, enum.Enum):
    CREDIT = "Credit"    # Customer owes more
    PAYMENT = "Payment"  # Customer paid us

class SupplierEntryType(str, enum.Enum):
    PURCHASE = "Purchase"  # We owe the supplier
    PAYMENT = "Payment"    # We paid the supplier
    RETURN = "Return"      # Credit back for returned stock at cost

# Sign conventions, one per ledger kind
CUSTOMER_ENTRY_SIGN = {
    CustomerEntryType.CREDIT: 1,
    CustomerEntryType.PAYMENT: -1,
}

SUPPLIER_ENTRY_SIGN = {
    SupplierEntryType.PURCHASE: 1,
    SupplierEntryType.PAYMENT: -1,
    SupplierEntryType.RETURN: -1,
}

def customer_entry_sign(entry_type) -> int:
    return CUSTOMER_ENTRY_SIGN[CustomerEntryType(entry_type)]

def supplier_entry_sign(entry_type) -> int:
    return SUPPLIER_ENTRY_SIGN[SupplierEntryType(entry_type)]

# Models. Both ledgers are append-only.
class CustomerLedgerEntry(Base):
    __tablename__ = "customer_ledger"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    entry_type = Column(SQLEnum(CustomerEntryType), nullable=False)
    amount = Column(Float, nullable=False)
    entry_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    customer = relationship("Customer")

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_customer_entry_amount_positive"),
    )

class SupplierLedgerEntry(Base):
    __tablename__ = "supplier_ledger"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    entry_type = Column(SQLEnum(SupplierEntryType), nullable=False)
    amount = Column(Float, nullable=False)
    entry_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    supplier = relationship("Supplier")

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_supplier_entry_amount_positive"),
    )
