"""
Supplier Ledger
Append-only Purchase / Payment / Return entries per supplier.
Net balance = purchases - payments - returns; positive means we owe the supplier.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import unit_of_work
from ..models import Supplier, SupplierLedgerEntry, SupplierEntryType, supplier_entry_sign
from ..utils.money import is_money, to_money
from .errors import InvalidAmount, InvalidInput
from .scoping import get_owned

logger = logging.getLogger(__name__)


class SupplierLedgerService:

    @staticmethod
    def get_supplier(db: Session, tenant_id: int, supplier_id: int) -> Supplier:
        return get_owned(db, Supplier, supplier_id, tenant_id, "Supplier")

    @staticmethod
    def parse_type(entry_type) -> SupplierEntryType:
        try:
            return SupplierEntryType(entry_type)
        except ValueError:
            allowed = ", ".join(t.value for t in SupplierEntryType)
            raise InvalidInput(f"Invalid supplier entry type '{entry_type}'. Use one of: {allowed}")

    @staticmethod
    def record(
        db: Session,
        tenant_id: int,
        supplier_id: int,
        entry_type,
        amount: float,
        entry_date: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> SupplierLedgerEntry:
        """Stage an entry in the caller's unit of work. Does not commit."""
        entry_type = SupplierLedgerService.parse_type(entry_type)
        if not is_money(amount) or amount <= 0:
            raise InvalidAmount("Amount must be greater than zero")

        entry = SupplierLedgerEntry(
            tenant_id=tenant_id,
            supplier_id=supplier_id,
            entry_type=entry_type,
            amount=to_money(amount),
            entry_date=entry_date or datetime.utcnow(),
            description=description
        )
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def add_manual_entry(
        db: Session,
        tenant_id: int,
        supplier_id: int,
        entry_type,
        amount: float,
        entry_date: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> SupplierLedgerEntry:
        with unit_of_work(db):
            SupplierLedgerService.get_supplier(db, tenant_id, supplier_id)
            entry = SupplierLedgerService.record(
                db, tenant_id, supplier_id, entry_type, amount, entry_date, description
            )
        logger.info(
            "Supplier %s ledger: %s %.2f (tenant %s)",
            supplier_id, entry.entry_type.value, entry.amount, tenant_id
        )
        return entry

    @staticmethod
    def _net(db: Session, tenant_id: int, supplier_id: int) -> float:
        rows = db.query(SupplierLedgerEntry.entry_type, func.sum(SupplierLedgerEntry.amount))\
            .filter(
                SupplierLedgerEntry.tenant_id == tenant_id,
                SupplierLedgerEntry.supplier_id == supplier_id
            )\
            .group_by(SupplierLedgerEntry.entry_type)\
            .all()
        return to_money(sum(supplier_entry_sign(t) * (total or 0.0) for t, total in rows))

    @staticmethod
    def net_balance(db: Session, tenant_id: int, supplier_id: int) -> float:
        SupplierLedgerService.get_supplier(db, tenant_id, supplier_id)
        return SupplierLedgerService._net(db, tenant_id, supplier_id)

    @staticmethod
    def history(db: Session, tenant_id: int, supplier_id: int) -> List[SupplierLedgerEntry]:
        """Newest first."""
        SupplierLedgerService.get_supplier(db, tenant_id, supplier_id)
        return db.query(SupplierLedgerEntry)\
            .filter(
                SupplierLedgerEntry.tenant_id == tenant_id,
                SupplierLedgerEntry.supplier_id == supplier_id
            )\
            .order_by(SupplierLedgerEntry.entry_date.desc(), SupplierLedgerEntry.id.desc())\
            .all()
