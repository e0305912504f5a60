import logging
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import TenantContext, get_current_tenant, require_admin
from ..database import get_db, unit_of_work
from ..models import Bill, Customer, CustomerLedgerEntry, customer_entry_sign
from ..schemas import (
    CustomerCreate, CustomerResponse, CustomerWithDueResponse, DuplicateCustomerResponse,
    CustomerEntryCreate, CustomerEntryResponse, CustomerDueResponse
)
from ..services import CustomerLedgerService
from ..utils.dates import to_naive_utc
from ..utils.money import to_money

logger = logging.getLogger(__name__)

router = APIRouter()

# --- Helpers ---

def dues_for_customers(db: Session, tenant_id: int, customers: List[Customer]) -> Dict[int, float]:
    """Batch version of CustomerLedgerService.total_due for a list page."""
    if not customers:
        return {}

    mobiles = {c.mobile for c in customers}
    bill_rows = db.query(Bill.customer_mobile, func.sum(Bill.balance_amount))\
        .filter(Bill.tenant_id == tenant_id, Bill.customer_mobile.in_(mobiles))\
        .group_by(Bill.customer_mobile)\
        .all()
    bills_by_mobile = {mobile: float(total or 0.0) for mobile, total in bill_rows}

    entry_rows = db.query(
            CustomerLedgerEntry.customer_id,
            CustomerLedgerEntry.entry_type,
            func.sum(CustomerLedgerEntry.amount)
        )\
        .filter(
            CustomerLedgerEntry.tenant_id == tenant_id,
            CustomerLedgerEntry.customer_id.in_([c.id for c in customers])
        )\
        .group_by(CustomerLedgerEntry.customer_id, CustomerLedgerEntry.entry_type)\
        .all()
    manual_by_id: Dict[int, float] = {}
    for customer_id, entry_type, total in entry_rows:
        manual_by_id[customer_id] = manual_by_id.get(customer_id, 0.0) + customer_entry_sign(entry_type) * float(total or 0.0)

    return {
        c.id: to_money(bills_by_mobile.get(c.mobile, 0.0) + manual_by_id.get(c.id, 0.0))
        for c in customers
    }

def _due_response(db: Session, tenant_id: int, customer_id: Optional[int] = None, mobile: Optional[str] = None):
    history = CustomerLedgerService.history(db, tenant_id, customer_id=customer_id, mobile=mobile)
    return {
        "mobile": history.due.mobile,
        "customer_ids": history.due.customer_ids,
        "bills_due": history.due.bills_due,
        "manual_due": history.due.manual_due,
        "total_due": history.due.total_due,
        "history": history.items,
    }

# --- Customer Routes ---

@router.post("", response_model=Union[CustomerResponse, DuplicateCustomerResponse], status_code=201)
def add_customer(customer_in: CustomerCreate, response: Response, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    name = customer_in.name.strip().upper()
    existing = db.query(Customer)\
        .filter(Customer.tenant_id == ctx.tenant_id, Customer.name == name)\
        .first()
    if existing and not customer_in.force:
        response.status_code = 200
        return DuplicateCustomerResponse(
            message="A customer with this name already exists. Are you sure you want to add another?"
        )

    with unit_of_work(db):
        customer = Customer(tenant_id=ctx.tenant_id, name=name, mobile=customer_in.mobile.strip())
        db.add(customer)
    db.refresh(customer)
    return CustomerResponse.model_validate(customer)

@router.get("", response_model=List[CustomerWithDueResponse])
def list_customers(db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    customers = db.query(Customer)\
        .filter(Customer.tenant_id == ctx.tenant_id)\
        .order_by(Customer.name)\
        .all()
    dues = dues_for_customers(db, ctx.tenant_id, customers)
    return [
        CustomerWithDueResponse(
            id=c.id, name=c.name, mobile=c.mobile, created_at=c.created_at,
            total_due=dues.get(c.id, 0.0)
        )
        for c in customers
    ]

@router.get("/due", response_model=CustomerDueResponse)
def get_due_by_mobile(mobile: str, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return _due_response(db, ctx.tenant_id, mobile=mobile)

# --- Ledger Routes ---

@router.post("/transaction", response_model=CustomerEntryResponse, status_code=201)
def add_customer_transaction(entry_in: CustomerEntryCreate, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    return CustomerLedgerService.add_manual_entry(
        db, ctx.tenant_id,
        customer_id=entry_in.customer_id,
        entry_type=entry_in.type,
        amount=entry_in.amount,
        entry_date=to_naive_utc(entry_in.date),
        description=entry_in.description
    )

@router.get("/{customer_id}/transactions", response_model=List[CustomerEntryResponse])
def get_customer_transactions(customer_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    CustomerLedgerService.get_customer(db, ctx.tenant_id, customer_id)
    return db.query(CustomerLedgerEntry)\
        .filter(
            CustomerLedgerEntry.tenant_id == ctx.tenant_id,
            CustomerLedgerEntry.customer_id == customer_id
        )\
        .order_by(CustomerLedgerEntry.entry_date.desc(), CustomerLedgerEntry.id.desc())\
        .all()

@router.get("/{customer_id}/due", response_model=CustomerDueResponse)
def get_customer_due(customer_id: int, db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return _due_response(db, ctx.tenant_id, customer_id=customer_id)
