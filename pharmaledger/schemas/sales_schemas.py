from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from ..models.sales_models import PaymentStatus

class BillLineCreate(BaseModel):
    medicine_lot_id: int
    quantity: int
    name: Optional[str] = None
    batch_number: Optional[str] = None
    price: Optional[float] = Field(default=None, allow_inf_nan=False) # Unit price; lot's sale price when omitted
    amount: Optional[float] = None # Informational, recomputed server side

class BillCreate(BaseModel):
    customer_name: str
    customer_mobile: str
    items: List[BillLineCreate]
    discount_amount: float = Field(default=0.0, allow_inf_nan=False)
    sub_total: Optional[float] = None # Informational
    grand_total: Optional[float] = Field(default=None, allow_inf_nan=False)
    paid_amount: Optional[float] = Field(default=None, allow_inf_nan=False)

class BillLineResponse(BaseModel):
    line_number: int
    medicine_lot_id: int
    name: str
    batch_number: str
    quantity: int
    unit_price: float
    line_amount: float

    class Config:
        from_attributes = True

class BillResponse(BaseModel):
    id: int
    customer_name: str
    customer_mobile: str
    pharmacy_name: Optional[str] = None
    gst_number: Optional[str] = None
    lines: List[BillLineResponse]
    sub_total: float
    discount_amount: float
    tax_amount: float
    total_amount: float
    paid_amount: float
    balance_amount: float
    payment_status: PaymentStatus
    created_at: datetime

    class Config:
        from_attributes = True

class SettleRequest(BaseModel):
    amount: float = Field(allow_inf_nan=False)

class BillDeleteResponse(BaseModel):
    message: str
    bill_id: int
    restored: Dict[int, int]
    skipped_lots: List[int]
