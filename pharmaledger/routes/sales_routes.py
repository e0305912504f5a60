from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import TenantContext, get_current_tenant, require_admin
from ..database import get_db
from ..models import PaymentStatus
from ..schemas import (
    BillCreate, BillResponse, SettleRequest, BillDeleteResponse, PaginatedResponse
)
from ..services import BillingService, StockLine
from ..utils.pagination import MAX_PAGE_SIZE, paginate

router = APIRouter()

@router.post("", response_model=BillResponse, status_code=201)
def create_bill(bill_in: BillCreate, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    lines = [
        StockLine(
            lot_id=item.medicine_lot_id,
            quantity=item.quantity,
            name=item.name,
            unit_price=item.price
        )
        for item in bill_in.items
    ]
    return BillingService.create_bill(
        db, ctx.tenant_id,
        customer_name=bill_in.customer_name,
        customer_mobile=bill_in.customer_mobile,
        lines=lines,
        discount_amount=bill_in.discount_amount,
        paid_amount=bill_in.paid_amount,
        grand_total=bill_in.grand_total
    )

@router.get("", response_model=List[BillResponse])
def list_bills(
    sort: str = Query("newest", pattern="^(newest|oldest)$"),
    status: Optional[PaymentStatus] = None,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_tenant)
):
    return BillingService.list_bills(db, ctx.tenant_id, newest_first=(sort == "newest"), status=status).all()

@router.get("/paged", response_model=PaginatedResponse[BillResponse])
def list_bills_paged(
    page: int = 1,
    page_size: int = 20,
    sort: str = Query("newest", pattern="^(newest|oldest)$"),
    status: Optional[PaymentStatus] = None,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_tenant)
):
    query = BillingService.list_bills(db, ctx.tenant_id, newest_first=(sort == "newest"), status=status)
    items, total, total_pages = paginate(query, page, page_size)
    return {
        "items": items,
        "total": total,
        "page": max(page, 1),
        "page_size": min(max(page_size, 1), MAX_PAGE_SIZE),
        "total_pages": total_pages
    }

@router.get("/customer/{mobile}", response_model=List[BillResponse])
def list_customer_bills(mobile: str, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return BillingService.list_bills_by_customer_mobile(db, ctx.tenant_id, mobile)

@router.get("/{bill_id}", response_model=BillResponse)
def get_bill(bill_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return BillingService.get_bill(db, ctx.tenant_id, bill_id)

@router.post("/{bill_id}/settle", response_model=BillResponse)
def settle_bill(bill_id: int, settle_in: SettleRequest, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return BillingService.settle_bill(db, ctx.tenant_id, bill_id, settle_in.amount)

@router.delete("/{bill_id}", response_model=BillDeleteResponse)
def delete_bill(bill_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    result = BillingService.delete_bill(db, ctx.tenant_id, bill_id)
    return {
        "message": "Bill deleted and stock restored",
        "bill_id": result.bill_id,
        "restored": result.restored,
        "skipped_lots": result.skipped,
    }
