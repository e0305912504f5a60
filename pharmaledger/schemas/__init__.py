# Schemas package - exports all Pydantic models
from .common_schemas import PaginatedResponse
from .tenant_schemas import TenantProfileUpdate, TenantResponse
from .pharmacy_schemas import (
    SupplierCreate, SupplierResponse,
    MedicineLotBase, MedicineLotCreate, MedicineLotBulkCreate,
    MedicineLotUpdate, MedicineLotResponse, BulkIntakeResponse
)
from .sales_schemas import (
    BillLineCreate, BillCreate, BillLineResponse, BillResponse,
    SettleRequest, BillDeleteResponse
)
from .customer_schemas import (
    CustomerCreate, CustomerResponse, CustomerWithDueResponse,
    DuplicateCustomerResponse, CustomerEntryCreate, CustomerEntryResponse,
    CustomerHistoryItem, CustomerDueResponse
)
from .accounting_schemas import (
    SupplierEntryCreate, SupplierEntryResponse, SupplierLedgerResponse
)
from .procurement_schemas import ReturnCreate, ReturnResponse

__all__ = [
    "PaginatedResponse",
    "TenantProfileUpdate",
    "TenantResponse",
    "SupplierCreate",
    "SupplierResponse",
    "MedicineLotBase",
    "MedicineLotCreate",
    "MedicineLotBulkCreate",
    "MedicineLotUpdate",
    "MedicineLotResponse",
    "BulkIntakeResponse",
    "BillLineCreate",
    "BillCreate",
    "BillLineResponse",
    "BillResponse",
    "SettleRequest",
    "BillDeleteResponse",
    "CustomerCreate",
    "CustomerResponse",
    "CustomerWithDueResponse",
    "DuplicateCustomerResponse",
    "CustomerEntryCreate",
    "CustomerEntryResponse",
    "CustomerHistoryItem",
    "CustomerDueResponse",
    "SupplierEntryCreate",
    "SupplierEntryResponse",
    "SupplierLedgerResponse",
    "ReturnCreate",
    "ReturnResponse",
]
