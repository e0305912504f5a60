from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from ..models.accounting_models import SupplierEntryType

class SupplierEntryCreate(BaseModel):
    supplier_id: int
    type: str
    amount: float = Field(allow_inf_nan=False)
    date: Optional[datetime] = None
    description: Optional[str] = None

class SupplierEntryResponse(BaseModel):
    id: int
    supplier_id: int
    entry_type: SupplierEntryType
    amount: float
    entry_date: datetime
    description: Optional[str] = None

    class Config:
        from_attributes = True

class SupplierLedgerResponse(BaseModel):
    supplier_id: int
    supplier_name: str
    net_balance: float # Positive: we owe the supplier
    entries: List[SupplierEntryResponse]
