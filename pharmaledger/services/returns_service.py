"""
Returns Processor
Sends stock back to its supplier: decrements the lot, logs a ReturnRecord and
credits the supplier ledger at cost price, all in one unit of work.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..database import unit_of_work
from ..models import ReturnRecord, SupplierEntryType
from ..utils.money import to_money
from .errors import InvalidAmount
from .inventory_service import InventoryStore
from .supplier_ledger_service import SupplierLedgerService

logger = logging.getLogger(__name__)


class ReturnsService:

    @staticmethod
    def return_to_supplier(
        db: Session,
        tenant_id: int,
        lot_id: int,
        quantity: int,
        reason: Optional[str] = None,
    ) -> ReturnRecord:
        if quantity is None or quantity <= 0:
            raise InvalidAmount("Return quantity must be greater than zero")

        with unit_of_work(db):
            lot = InventoryStore.adjust(db, tenant_id, lot_id, -int(quantity))

            ledger_entry = None
            if lot.supplier_id is not None:
                ledger_entry = SupplierLedgerService.record(
                    db, tenant_id, lot.supplier_id,
                    SupplierEntryType.RETURN,
                    to_money(lot.supplier_price * quantity),
                    description=f"Return: {quantity} x {lot.name} (Batch {lot.batch_number})"
                )
            else:
                logger.info("Lot %s has no supplier; return logged without ledger credit", lot.id)

            record = ReturnRecord(
                tenant_id=tenant_id,
                medicine_lot_id=lot.id,
                medicine_name=lot.name,
                batch_number=lot.batch_number,
                quantity=int(quantity),
                supplier_id=lot.supplier_id,
                supplier_ledger_entry=ledger_entry,
                reason=reason or settings.DEFAULT_RETURN_REASON
            )
            db.add(record)
            db.flush()

        logger.info(
            "Returned %s x lot %s to supplier %s (tenant %s)",
            quantity, lot_id, record.supplier_id, tenant_id
        )
        return record

    @staticmethod
    def list_returns(db: Session, tenant_id: int) -> List[ReturnRecord]:
        return db.query(ReturnRecord)\
            .filter(ReturnRecord.tenant_id == tenant_id)\
            .order_by(ReturnRecord.return_date.desc(), ReturnRecord.id.desc())\
            .all()
