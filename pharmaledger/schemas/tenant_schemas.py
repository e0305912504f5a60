from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime

class TenantProfileUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None
    gst_number: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value):
        if value is None or not value.strip():
            raise ValueError("Pharmacy name cannot be empty")
        return value.strip()

class TenantResponse(BaseModel):
    id: int
    name: str
    subdomain: str
    address: Optional[str] = None
    license_number: Optional[str] = None
    contact_number: Optional[str] = None
    gst_number: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
