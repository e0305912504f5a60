# Routes package
from fastapi import APIRouter
from .tenant_routes import router as tenant_router
from .medicine_routes import router as medicine_router
from .sales_routes import router as sales_router
from .return_routes import router as return_router
from .customer_routes import router as customer_router
from .supplier_routes import router as supplier_router

# Create main router
api_router = APIRouter(prefix="/api")

# Include all route modules
api_router.include_router(tenant_router, prefix="/pharmacy", tags=["Pharmacy"])
api_router.include_router(medicine_router, prefix="/medicines", tags=["Medicines"])
api_router.include_router(sales_router, prefix="/bills", tags=["Bills"])
api_router.include_router(return_router, prefix="/returns", tags=["Returns"])
api_router.include_router(customer_router, prefix="/customers", tags=["Customers"])
api_router.include_router(supplier_router, prefix="/suppliers", tags=["Suppliers"])


__all__ = ["api_router"]
