from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class ReturnCreate(BaseModel):
    medicine_lot_id: int
    quantity: int
    reason: Optional[str] = None

class ReturnResponse(BaseModel):
    id: int
    medicine_lot_id: int
    medicine_name: str
    batch_number: str
    quantity: int
    supplier_id: Optional[int] = None
    supplier_ledger_entry_id: Optional[int] = None
    reason: Optional[str] = None
    return_date: datetime

    class Config:
        from_attributes = True
