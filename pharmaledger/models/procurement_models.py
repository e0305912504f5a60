from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base

class ReturnRecord(Base):
    """
    Audit entry for stock sent back to a supplier.
    Written in the same unit of work as the supplier ledger credit.
    """
    __tablename__ = "stock_returns"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    medicine_lot_id = Column(Integer, nullable=False, index=True)
    medicine_name = Column(String, nullable=False)
    batch_number = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    supplier_ledger_entry_id = Column(Integer, ForeignKey("supplier_ledger.id", ondelete="SET NULL"), nullable=True)
    reason = Column(Text, nullable=True)
    return_date = Column(DateTime, default=datetime.utcnow, index=True)

    supplier = relationship("Supplier")
    supplier_ledger_entry = relationship("SupplierLedgerEntry")
