from sqlalchemy import Column, Integer, String, Boolean, DateTime
from datetime import datetime
from ..database import Base

# --- TENANTS ---

class Tenant(Base):
    """One pharmacy. Provisioned and approved by the identity service."""
    __tablename__ = "tenants"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    subdomain = Column(String, unique=True, index=True, nullable=False)
    address = Column(String, nullable=True)
    license_number = Column(String, unique=True, nullable=True)
    contact_number = Column(String, nullable=True)
    gst_number = Column(String, nullable=True)
    status = Column(String, default="Approved") # Pending, Approved, Rejected
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
