from sqlalchemy import Column, Integer, String, ForeignKey, Float, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from ..database import Base

class PaymentStatus(str, enum.Enum):
    PAID = "Paid"
    PARTIAL = "Partial"
    UNPAID = "Unpaid"

# --- SALES & BILLING ---

class Bill(Base):
    __tablename__ = "bills"
    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_mobile = Column(String, index=True, nullable=False)

    # Snapshot of the pharmacy profile at sale time, never re-joined
    pharmacy_name = Column(String, nullable=True)
    gst_number = Column(String, nullable=True)

    sub_total = Column(Float, nullable=False)
    discount_amount = Column(Float, default=0.0)
    tax_amount = Column(Float, default=0.0)
    total_amount = Column(Float, nullable=False) # Grand total, GST inclusive
    paid_amount = Column(Float, default=0.0)
    balance_amount = Column(Float, default=0.0)
    payment_status = Column(String, default=PaymentStatus.PAID.value)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    lines = relationship(
        "BillLine", back_populates="bill", order_by="BillLine.line_number",
        cascade="all, delete-orphan"
    )

    __mapper_args__ = {"version_id_col": version}

class BillLine(Base):
    __tablename__ = "bill_lines"
    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id", ondelete="CASCADE"), nullable=False)
    line_number = Column(Integer, nullable=False)
    # No FK: the lot may be deleted later while the bill stays
    medicine_lot_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    batch_number = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    line_amount = Column(Float, nullable=False)

    bill = relationship("Bill", back_populates="lines")
