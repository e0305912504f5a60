from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from ..models.accounting_models import CustomerEntryType

# --- Customer ---
class CustomerCreate(BaseModel):
    name: str = Field(min_length=1)
    mobile: str = Field(min_length=1)
    force: bool = False

class CustomerResponse(BaseModel):
    id: int
    name: str
    mobile: str
    created_at: datetime

    class Config:
        from_attributes = True

class CustomerWithDueResponse(CustomerResponse):
    total_due: float = 0.0

class DuplicateCustomerResponse(BaseModel):
    exists: bool = True
    message: str

# --- Manual Ledger ---
class CustomerEntryCreate(BaseModel):
    customer_id: int
    type: str
    amount: float = Field(allow_inf_nan=False)
    date: Optional[datetime] = None
    description: Optional[str] = None

class CustomerEntryResponse(BaseModel):
    id: int
    customer_id: int
    entry_type: CustomerEntryType
    amount: float
    entry_date: datetime
    description: Optional[str] = None

    class Config:
        from_attributes = True

# --- Dues ---
class CustomerHistoryItem(BaseModel):
    origin: str
    reference_id: int
    date: datetime
    description: str
    amount: float
    net_impact: float
    running_balance: float
    payment_status: Optional[str] = None
    entry_type: Optional[str] = None

    class Config:
        from_attributes = True

class CustomerDueResponse(BaseModel):
    mobile: Optional[str] = None
    customer_ids: List[int] = []
    bills_due: float
    manual_due: float
    total_due: float
    history: List[CustomerHistoryItem] = []
