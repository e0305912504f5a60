"""
Customer Ledger

What a customer owes is the sum of
  * the outstanding balance of every bill issued to the customer's mobile, and
  * the signed manual entries (Credit +, Payment -) booked against the customer.
Both represent real money owed, so neither is dropped.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import unit_of_work
from ..models import (
    Bill, Customer, CustomerLedgerEntry, CustomerEntryType, customer_entry_sign
)
from ..utils.money import is_money, to_money
from .errors import EmptyInput, InvalidAmount, InvalidInput
from .scoping import get_owned

logger = logging.getLogger(__name__)


@dataclass
class CustomerDue:
    mobile: Optional[str]
    customer_ids: List[int]
    bills_due: float
    manual_due: float

    @property
    def total_due(self) -> float:
        return to_money(self.bills_due + self.manual_due)


@dataclass
class HistoryItem:
    origin: str  # "Bill" or "Manual"
    reference_id: int
    date: datetime
    description: str
    amount: float
    net_impact: float
    running_balance: float = 0.0
    payment_status: Optional[str] = None
    entry_type: Optional[str] = None


@dataclass
class CustomerHistory:
    due: CustomerDue
    items: List[HistoryItem] = field(default_factory=list)


class CustomerLedgerService:

    @staticmethod
    def get_customer(db: Session, tenant_id: int, customer_id: int) -> Customer:
        return get_owned(db, Customer, customer_id, tenant_id, "Customer")

    @staticmethod
    def parse_type(entry_type) -> CustomerEntryType:
        try:
            return CustomerEntryType(entry_type)
        except ValueError:
            allowed = ", ".join(t.value for t in CustomerEntryType)
            raise InvalidInput(f"Invalid customer entry type '{entry_type}'. Use one of: {allowed}")

    @staticmethod
    def add_manual_entry(
        db: Session,
        tenant_id: int,
        customer_id: int,
        entry_type,
        amount: float,
        entry_date: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> CustomerLedgerEntry:
        entry_type = CustomerLedgerService.parse_type(entry_type)
        if not is_money(amount) or amount <= 0:
            raise InvalidAmount("Amount must be greater than zero")

        with unit_of_work(db):
            CustomerLedgerService.get_customer(db, tenant_id, customer_id)
            entry = CustomerLedgerEntry(
                tenant_id=tenant_id,
                customer_id=customer_id,
                entry_type=entry_type,
                amount=to_money(amount),
                entry_date=entry_date or datetime.utcnow(),
                description=description
            )
            db.add(entry)
            db.flush()

        logger.info(
            "Customer %s ledger: %s %.2f (tenant %s)",
            customer_id, entry_type.value, entry.amount, tenant_id
        )
        return entry

    @staticmethod
    def _resolve(db: Session, tenant_id: int, customer_id: Optional[int], mobile: Optional[str]):
        """Returns (mobile, [customer ids]) for a customer id or a bare mobile number."""
        if customer_id is not None:
            customer = CustomerLedgerService.get_customer(db, tenant_id, customer_id)
            return customer.mobile, [customer.id]
        if not (mobile or "").strip():
            raise EmptyInput("Provide a customer id or mobile number")
        mobile = mobile.strip()
        ids = [
            row.id for row in db.query(Customer.id)
            .filter(Customer.tenant_id == tenant_id, Customer.mobile == mobile)
            .all()
        ]
        return mobile, ids

    @staticmethod
    def _bills_due(db: Session, tenant_id: int, mobile: str) -> float:
        total = db.query(func.sum(Bill.balance_amount))\
            .filter(Bill.tenant_id == tenant_id, Bill.customer_mobile == mobile)\
            .scalar()
        return to_money(total or 0.0)

    @staticmethod
    def _manual_due(db: Session, tenant_id: int, customer_ids: List[int]) -> float:
        if not customer_ids:
            return 0.0
        rows = db.query(CustomerLedgerEntry.entry_type, func.sum(CustomerLedgerEntry.amount))\
            .filter(
                CustomerLedgerEntry.tenant_id == tenant_id,
                CustomerLedgerEntry.customer_id.in_(customer_ids)
            )\
            .group_by(CustomerLedgerEntry.entry_type)\
            .all()
        return to_money(sum(customer_entry_sign(t) * (total or 0.0) for t, total in rows))

    @staticmethod
    def total_due(
        db: Session,
        tenant_id: int,
        customer_id: Optional[int] = None,
        mobile: Optional[str] = None,
    ) -> CustomerDue:
        mobile, ids = CustomerLedgerService._resolve(db, tenant_id, customer_id, mobile)
        return CustomerDue(
            mobile=mobile,
            customer_ids=ids,
            bills_due=CustomerLedgerService._bills_due(db, tenant_id, mobile),
            manual_due=CustomerLedgerService._manual_due(db, tenant_id, ids)
        )

    @staticmethod
    def history(
        db: Session,
        tenant_id: int,
        customer_id: Optional[int] = None,
        mobile: Optional[str] = None,
    ) -> CustomerHistory:
        """
        Bills and manual entries merged oldest first. A bill's net impact is its
        outstanding balance; the last running balance equals the total due.
        """
        due = CustomerLedgerService.total_due(db, tenant_id, customer_id, mobile)
        items: List[HistoryItem] = []

        bills = db.query(Bill)\
            .filter(Bill.tenant_id == tenant_id, Bill.customer_mobile == due.mobile)\
            .all()
        for bill in bills:
            items.append(HistoryItem(
                origin="Bill",
                reference_id=bill.id,
                date=bill.created_at,
                description=f"Bill #{bill.id}",
                amount=bill.total_amount,
                net_impact=to_money(bill.balance_amount),
                payment_status=bill.payment_status
            ))

        if due.customer_ids:
            entries = db.query(CustomerLedgerEntry)\
                .filter(
                    CustomerLedgerEntry.tenant_id == tenant_id,
                    CustomerLedgerEntry.customer_id.in_(due.customer_ids)
                )\
                .all()
            for entry in entries:
                items.append(HistoryItem(
                    origin="Manual",
                    reference_id=entry.id,
                    date=entry.entry_date,
                    description=entry.description or entry.entry_type.value,
                    amount=entry.amount,
                    net_impact=to_money(customer_entry_sign(entry.entry_type) * entry.amount),
                    entry_type=entry.entry_type.value
                ))

        items.sort(key=lambda i: (i.date, i.origin, i.reference_id))
        running = 0.0
        for item in items:
            running = to_money(running + item.net_impact)
            item.running_balance = running

        return CustomerHistory(due=due, items=items)
