import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import TenantContext, get_current_tenant, require_admin
from ..config import settings
from ..database import get_db, unit_of_work
from ..models import MedicineLot, Supplier, SupplierEntryType
from ..schemas import (
    MedicineLotCreate, MedicineLotBulkCreate, MedicineLotUpdate,
    MedicineLotResponse, BulkIntakeResponse
)
from ..services import EmptyInput, InventoryStore, SupplierLedgerService
from ..services.scoping import get_owned
from ..utils.dates import to_naive_utc
from ..utils.money import to_money

logger = logging.getLogger(__name__)

router = APIRouter()

def _new_lot(tenant_id: int, data, supplier_id=None, invoice_number=None) -> MedicineLot:
    return MedicineLot(
        tenant_id=tenant_id,
        name=data.name.strip(),
        batch_number=data.batch_number.strip(),
        expiry_date=data.expiry_date,
        mrp=data.mrp,
        supplier_price=data.supplier_price,
        price=data.mrp if data.price is None else data.price,
        quantity=data.quantity,
        min_stock_level=settings.DEFAULT_MIN_STOCK_LEVEL if data.min_stock_level is None else data.min_stock_level,
        supplier_id=supplier_id,
        invoice_number=invoice_number
    )

@router.post("", response_model=MedicineLotResponse, status_code=201)
def add_medicine(lot_in: MedicineLotCreate, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    with unit_of_work(db):
        if lot_in.supplier_id is not None:
            get_owned(db, Supplier, lot_in.supplier_id, ctx.tenant_id, "Supplier")
        lot = _new_lot(ctx.tenant_id, lot_in, lot_in.supplier_id, lot_in.invoice_number)
        db.add(lot)
    db.refresh(lot)
    return lot

@router.post("/bulk", response_model=BulkIntakeResponse, status_code=201)
def add_bulk_medicines(bulk_in: MedicineLotBulkCreate, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    """Stock in a whole supplier delivery; optionally book it as a purchase on the supplier ledger."""
    if not bulk_in.items:
        raise EmptyInput("No medicines in delivery")

    with unit_of_work(db):
        get_owned(db, Supplier, bulk_in.supplier_id, ctx.tenant_id, "Supplier")
        lots = [
            _new_lot(ctx.tenant_id, item, bulk_in.supplier_id, bulk_in.invoice_number.strip())
            for item in bulk_in.items
        ]
        db.add_all(lots)

        purchase_amount = to_money(sum(item.supplier_price * item.quantity for item in bulk_in.items))
        entry = None
        if bulk_in.record_purchase and purchase_amount > 0:
            entry = SupplierLedgerService.record(
                db, ctx.tenant_id, bulk_in.supplier_id,
                SupplierEntryType.PURCHASE,
                purchase_amount,
                entry_date=to_naive_utc(bulk_in.invoice_date),
                description=f"Invoice #{bulk_in.invoice_number.strip()}"
            )
        db.flush()
        lot_ids = [lot.id for lot in lots]
        entry_id = entry.id if entry else None

    logger.info(
        "Bulk intake invoice %s: %s lot(s), purchase %.2f (tenant %s)",
        bulk_in.invoice_number, len(lot_ids), purchase_amount, ctx.tenant_id
    )
    return {
        "invoice_number": bulk_in.invoice_number.strip(),
        "supplier_id": bulk_in.supplier_id,
        "lots": db.query(MedicineLot).filter(MedicineLot.id.in_(lot_ids)).order_by(MedicineLot.id).all(),
        "purchase_amount": purchase_amount,
        "supplier_ledger_entry_id": entry_id,
    }

@router.get("", response_model=List[MedicineLotResponse])
def list_medicines(db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return db.query(MedicineLot)\
        .filter(MedicineLot.tenant_id == ctx.tenant_id)\
        .order_by(MedicineLot.name, MedicineLot.expiry_date)\
        .all()

@router.get("/low-stock", response_model=List[MedicineLotResponse])
def list_low_stock(db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return db.query(MedicineLot)\
        .filter(
            MedicineLot.tenant_id == ctx.tenant_id,
            MedicineLot.quantity <= MedicineLot.min_stock_level
        )\
        .order_by(MedicineLot.quantity, MedicineLot.name)\
        .all()

@router.get("/supplier/{supplier_id}/invoices", response_model=List[str])
def list_supplier_invoices(supplier_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    get_owned(db, Supplier, supplier_id, ctx.tenant_id, "Supplier")
    rows = db.query(MedicineLot.invoice_number)\
        .filter(
            MedicineLot.tenant_id == ctx.tenant_id,
            MedicineLot.supplier_id == supplier_id,
            MedicineLot.invoice_number.isnot(None)
        )\
        .distinct()\
        .order_by(MedicineLot.invoice_number)\
        .all()
    return [row.invoice_number for row in rows]

@router.get("/supplier/{supplier_id}/invoice/{invoice_number}", response_model=List[MedicineLotResponse])
def list_invoice_items(supplier_id: int, invoice_number: str, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    get_owned(db, Supplier, supplier_id, ctx.tenant_id, "Supplier")
    return db.query(MedicineLot)\
        .filter(
            MedicineLot.tenant_id == ctx.tenant_id,
            MedicineLot.supplier_id == supplier_id,
            MedicineLot.invoice_number == invoice_number
        )\
        .order_by(MedicineLot.id)\
        .all()

@router.get("/{lot_id}", response_model=MedicineLotResponse)
def get_medicine(lot_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return InventoryStore.get_lot(db, ctx.tenant_id, lot_id)

@router.put("/{lot_id}", response_model=MedicineLotResponse)
def update_medicine(lot_id: int, lot_in: MedicineLotUpdate, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    changes = lot_in.dict(exclude_unset=True)
    new_quantity = changes.pop("quantity", None)

    with unit_of_work(db):
        lot = InventoryStore.get_lot(db, ctx.tenant_id, lot_id, lock=True)
        if changes.get("supplier_id") is not None:
            get_owned(db, Supplier, changes["supplier_id"], ctx.tenant_id, "Supplier")
        for field, value in changes.items():
            setattr(lot, field, value)
        db.flush()
        # Stock edits go through the guarded quantity path, as a delta
        if new_quantity is not None and new_quantity != lot.quantity:
            InventoryStore.adjust(db, ctx.tenant_id, lot_id, new_quantity - lot.quantity)

    db.refresh(lot)
    return lot

@router.delete("/{lot_id}")
def delete_medicine(lot_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    with unit_of_work(db):
        lot = InventoryStore.get_lot(db, ctx.tenant_id, lot_id, lock=True)
        db.delete(lot)
    logger.info("Lot %s deleted (tenant %s)", lot_id, ctx.tenant_id)
    return {"message": "Medicine removed"}
