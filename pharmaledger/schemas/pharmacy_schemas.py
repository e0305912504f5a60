from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime

# --- Supplier ---
class SupplierCreate(BaseModel):
    name: str = Field(min_length=1)
    contact_number: Optional[str] = None
    companies_supplied: List[str] = []

class SupplierResponse(BaseModel):
    id: int
    name: str
    contact_number: Optional[str] = None
    companies_supplied: List[str] = []
    created_at: datetime

    class Config:
        from_attributes = True

# --- Medicine Lot ---
class MedicineLotBase(BaseModel):
    name: str = Field(min_length=1)
    batch_number: str = Field(min_length=1)
    expiry_date: date
    mrp: float = Field(ge=0, allow_inf_nan=False)
    supplier_price: float = Field(ge=0, allow_inf_nan=False)
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False) # Defaults to MRP
    quantity: int = Field(ge=0)
    min_stock_level: Optional[int] = Field(default=None, ge=0)

class MedicineLotCreate(MedicineLotBase):
    supplier_id: Optional[int] = None
    invoice_number: Optional[str] = None

class MedicineLotBulkCreate(BaseModel):
    """One supplier delivery: every lot shares the supplier and invoice number."""
    supplier_id: int
    invoice_number: str = Field(min_length=1)
    invoice_date: Optional[datetime] = None
    record_purchase: bool = True
    items: List[MedicineLotBase]

class MedicineLotUpdate(BaseModel):
    name: Optional[str] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    mrp: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    supplier_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    quantity: Optional[int] = Field(default=None, ge=0)
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    supplier_id: Optional[int] = None
    invoice_number: Optional[str] = None

    # Omit a field to keep it; null would blank a required column
    @field_validator(
        "name", "batch_number", "expiry_date", "mrp", "supplier_price",
        "price", "quantity", "min_stock_level"
    )
    @classmethod
    def not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

class MedicineLotResponse(BaseModel):
    id: int
    name: str
    batch_number: str
    expiry_date: date
    mrp: float
    supplier_price: float
    price: float
    quantity: int
    min_stock_level: int
    supplier_id: Optional[int] = None
    invoice_number: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class BulkIntakeResponse(BaseModel):
    invoice_number: str
    supplier_id: int
    lots: List[MedicineLotResponse]
    purchase_amount: float
    supplier_ledger_entry_id: Optional[int] = None
