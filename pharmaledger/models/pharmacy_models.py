from sqlalchemy import Column, Integer, String, ForeignKey, Float, Date, DateTime, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base

# --- SUPPLIERS ---

class Supplier(Base):
    __tablename__ = "suppliers"
    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String, index=True, nullable=False)
    contact_number = Column(String, nullable=True)
    companies_supplied = Column(JSON, default=list) # e.g. ["Cipla", "Sun Pharma"]
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

# --- STOCK ---

class MedicineLot(Base):
    """
    One purchased batch of one medicine. The unit of saleable stock.
    Quantity is only ever changed through SQL expressions
    (see services.inventory_service) so concurrent writers cannot lose updates.
    """
    __tablename__ = "medicine_lots"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String, index=True, nullable=False)
    batch_number = Column(String(100), index=True, nullable=False)
    expiry_date = Column(Date, nullable=False)

    mrp = Column(Float, nullable=False) # Printed maximum retail price
    supplier_price = Column(Float, nullable=False) # Cost price
    price = Column(Float, nullable=False) # Selling price, usually == mrp
    quantity = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, default=10)

    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    invoice_number = Column(String(100), nullable=True, index=True) # Groups one supplier delivery

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = relationship("Supplier")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="check_lot_quantity_non_negative"),
    )
