import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import TenantContext, get_current_tenant, require_admin
from ..database import get_db, unit_of_work
from ..models import MedicineLot, Supplier, SupplierLedgerEntry
from ..schemas import (
    SupplierCreate, SupplierResponse,
    SupplierEntryCreate, SupplierEntryResponse, SupplierLedgerResponse
)
from ..services import InvalidInput, SupplierLedgerService
from ..utils.dates import to_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", response_model=SupplierResponse, status_code=201)
def add_supplier(supplier_in: SupplierCreate, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    with unit_of_work(db):
        supplier = Supplier(
            tenant_id=ctx.tenant_id,
            name=supplier_in.name.strip(),
            contact_number=supplier_in.contact_number,
            companies_supplied=[c.strip() for c in supplier_in.companies_supplied if c.strip()]
        )
        db.add(supplier)
    db.refresh(supplier)
    return supplier

@router.get("", response_model=List[SupplierResponse])
def list_suppliers(db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return db.query(Supplier)\
        .filter(Supplier.tenant_id == ctx.tenant_id)\
        .order_by(Supplier.created_at.desc(), Supplier.id.desc())\
        .all()

@router.delete("/{supplier_id}")
def delete_supplier(supplier_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    with unit_of_work(db):
        supplier = SupplierLedgerService.get_supplier(db, ctx.tenant_id, supplier_id)
        has_ledger = db.query(SupplierLedgerEntry.id)\
            .filter(SupplierLedgerEntry.supplier_id == supplier.id)\
            .first() is not None
        if has_ledger:
            raise InvalidInput("Supplier has ledger history and cannot be removed")
        # Lots stay; they just lose their supplier link
        db.query(MedicineLot)\
            .filter(MedicineLot.supplier_id == supplier.id)\
            .update({MedicineLot.supplier_id: None}, synchronize_session=False)
        db.delete(supplier)
    logger.info("Supplier %s deleted (tenant %s)", supplier_id, ctx.tenant_id)
    return {"message": "Supplier removed"}

@router.get("/{supplier_id}/ledger", response_model=SupplierLedgerResponse)
def get_supplier_ledger(supplier_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    supplier = SupplierLedgerService.get_supplier(db, ctx.tenant_id, supplier_id)
    return {
        "supplier_id": supplier.id,
        "supplier_name": supplier.name,
        "net_balance": SupplierLedgerService.net_balance(db, ctx.tenant_id, supplier_id),
        "entries": SupplierLedgerService.history(db, ctx.tenant_id, supplier_id),
    }

@router.post("/transaction", response_model=SupplierEntryResponse, status_code=201)
def add_supplier_transaction(entry_in: SupplierEntryCreate, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    return SupplierLedgerService.add_manual_entry(
        db, ctx.tenant_id,
        supplier_id=entry_in.supplier_id,
        entry_type=entry_in.type,
        amount=entry_in.amount,
        entry_date=to_naive_utc(entry_in.date),
        description=entry_in.description
    )
