"""
Billing Engine
Creates bills against the Inventory Store, derives payment state, settles
credit sales and reverses stock when a bill is deleted.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from ..config import settings
from ..database import unit_of_work
from ..models import Bill, BillLine, MedicineLot, PaymentStatus, Tenant
from ..utils.money import EPSILON, gst_inclusive_tax, is_money, to_money
from .errors import (
    AlreadySettled, ConcurrentUpdate, EmptyInput, InvalidAmount
)
from .inventory_service import InventoryStore, StockLine
from .scoping import get_owned

logger = logging.getLogger(__name__)


def derive_payment_status(paid_amount: float, balance_amount: float) -> PaymentStatus:
    if balance_amount <= 0:
        return PaymentStatus.PAID
    if paid_amount <= 0:
        return PaymentStatus.UNPAID
    return PaymentStatus.PARTIAL


@dataclass
class BillDeletion:
    bill_id: int
    restored: dict = field(default_factory=dict)
    skipped: List[int] = field(default_factory=list)


class BillingService:
    """Service class for bill lifecycle operations"""

    @staticmethod
    def create_bill(
        db: Session,
        tenant_id: int,
        customer_name: str,
        customer_mobile: str,
        lines: List[StockLine],
        discount_amount: float = 0.0,
        paid_amount: Optional[float] = None,
        grand_total: Optional[float] = None,
        today: Optional[date] = None,
    ) -> Bill:
        """
        Validate the cart, decrement stock and persist the bill in one unit of work.
        ``paid_amount`` defaults to the grand total (a fully paid counter sale).
        ``grand_total``, when the client sends one, must match the server's figure.
        """
        if not lines:
            raise EmptyInput("No items in bill")
        if not (customer_name or "").strip() or not (customer_mobile or "").strip():
            raise EmptyInput("Customer name and mobile are required")
        for label, value in (("Discount", discount_amount), ("Paid amount", paid_amount), ("Grand total", grand_total)):
            if value is not None and not is_money(value):
                raise InvalidAmount(f"{label} must be a finite number")
        discount_amount = to_money(discount_amount)
        if discount_amount < 0:
            raise InvalidAmount("Discount cannot be negative")
        if paid_amount is not None and paid_amount < 0:
            raise InvalidAmount("Paid amount cannot be negative")

        with unit_of_work(db):
            # 1. Validate every line before touching stock
            plan = InventoryStore.validate(db, tenant_id, lines, today=today)

            # 2. Snapshot lines from the lots
            bill_lines = []
            sub_total = 0.0
            for number, line in enumerate(lines, start=1):
                lot = db.get(MedicineLot, line.lot_id)
                unit_price = lot.price if line.unit_price is None else line.unit_price
                if not is_money(unit_price) or unit_price < 0:
                    raise InvalidAmount(f"Price for {lot.name} must be a non-negative number")
                amount = to_money(unit_price * line.quantity)
                sub_total += amount
                bill_lines.append(BillLine(
                    line_number=number,
                    medicine_lot_id=lot.id,
                    name=lot.name,
                    batch_number=lot.batch_number,
                    quantity=int(line.quantity),
                    unit_price=to_money(unit_price),
                    line_amount=amount
                ))

            # 3. Totals. GST is inside the grand total, not added on top.
            sub_total = to_money(sub_total)
            total = to_money(max(0.0, sub_total - discount_amount))
            tax = gst_inclusive_tax(total, settings.GST_RATE)
            if grand_total is not None and abs(to_money(grand_total) - total) > 0.01:
                raise InvalidAmount(
                    f"Grand total mismatch: expected {total:.2f}, got {to_money(grand_total):.2f}"
                )

            # 4. Payment state
            paid = total if paid_amount is None else to_money(paid_amount)
            if paid > total + 0.01:
                raise InvalidAmount(
                    f"Paid amount {paid:.2f} exceeds bill total {total:.2f}"
                )
            paid = min(paid, total)
            balance = to_money(max(0.0, total - paid))
            status = derive_payment_status(paid, balance)

            # 5. Commit stock, all lots or none
            InventoryStore.apply(db, tenant_id, plan)

            # 6. Freeze the pharmacy's display fields into the receipt
            tenant = db.get(Tenant, tenant_id)

            bill = Bill(
                tenant_id=tenant_id,
                customer_name=customer_name.strip(),
                customer_mobile=customer_mobile.strip(),
                pharmacy_name=tenant.name if tenant else None,
                gst_number=tenant.gst_number if tenant else None,
                sub_total=sub_total,
                discount_amount=discount_amount,
                tax_amount=tax,
                total_amount=total,
                paid_amount=paid,
                balance_amount=balance,
                payment_status=status.value,
                lines=bill_lines
            )
            db.add(bill)
            db.flush()

        logger.info(
            "Bill %s created for tenant %s: total=%.2f paid=%.2f status=%s",
            bill.id, tenant_id, total, paid, status.value
        )
        return bill

    @staticmethod
    def get_bill(db: Session, tenant_id: int, bill_id: int, lock: bool = False) -> Bill:
        return get_owned(db, Bill, bill_id, tenant_id, "Bill", lock=lock)

    @staticmethod
    def settle_bill(db: Session, tenant_id: int, bill_id: int, amount: float) -> Bill:
        """
        Record a later payment against a credit sale.
        Amounts beyond the outstanding balance are rejected, never clamped.
        """
        if not is_money(amount) or amount <= 0:
            raise InvalidAmount("Settlement amount must be greater than zero")
        amount = to_money(amount)

        with unit_of_work(db):
            bill = BillingService.get_bill(db, tenant_id, bill_id, lock=True)
            if bill.balance_amount <= 0:
                raise AlreadySettled(f"Bill #{bill.id} is already fully paid")
            if amount > bill.balance_amount + EPSILON:
                raise InvalidAmount(
                    f"Amount {amount:.2f} exceeds outstanding balance {bill.balance_amount:.2f}"
                )

            bill.paid_amount = to_money(bill.paid_amount + amount)
            bill.balance_amount = to_money(max(0.0, bill.total_amount - bill.paid_amount))
            bill.payment_status = derive_payment_status(bill.paid_amount, bill.balance_amount).value
            try:
                db.flush()
            except StaleDataError:
                raise ConcurrentUpdate(f"Bill #{bill_id} was modified concurrently, retry")

        logger.info("Bill %s settled %.2f, balance now %.2f", bill.id, amount, bill.balance_amount)
        return bill

    @staticmethod
    def delete_bill(db: Session, tenant_id: int, bill_id: int) -> BillDeletion:
        """Delete a bill and give its stock back. Lots deleted since the sale are skipped."""
        with unit_of_work(db):
            bill = BillingService.get_bill(db, tenant_id, bill_id, lock=True)
            lines = [
                StockLine(lot_id=line.medicine_lot_id, quantity=line.quantity, name=line.name)
                for line in bill.lines
            ]
            report = InventoryStore.restore(db, tenant_id, lines)
            db.delete(bill)
            try:
                db.flush()
            except StaleDataError:
                raise ConcurrentUpdate(f"Bill #{bill_id} was modified concurrently, retry")

        logger.info(
            "Bill %s deleted; restored %s lot(s), skipped %s",
            bill_id, len(report.restored), report.skipped
        )
        return BillDeletion(bill_id=bill_id, restored=report.restored, skipped=report.skipped)

    @staticmethod
    def list_bills(
        db: Session,
        tenant_id: int,
        newest_first: bool = True,
        status: Optional[PaymentStatus] = None,
    ):
        """Query of the tenant's bills; callers paginate or ``.all()`` it."""
        query = db.query(Bill).options(selectinload(Bill.lines)).filter(Bill.tenant_id == tenant_id)
        if status is not None:
            query = query.filter(Bill.payment_status == PaymentStatus(status).value)
        if newest_first:
            return query.order_by(Bill.created_at.desc(), Bill.id.desc())
        return query.order_by(Bill.created_at.asc(), Bill.id.asc())

    @staticmethod
    def list_bills_by_customer_mobile(db: Session, tenant_id: int, mobile: str) -> List[Bill]:
        return BillingService.list_bills(db, tenant_id)\
            .filter(Bill.customer_mobile == mobile.strip())\
            .all()
