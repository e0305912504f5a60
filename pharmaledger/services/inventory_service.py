"""
Inventory Store
Validates and mutates medicine lot quantities for sales, bill deletions and returns.

Quantities are never written back from Python objects. Every change is a
single SQL ``UPDATE ... SET quantity = quantity +/- n`` guarded by a WHERE
clause, so two sessions selling from the same lot cannot both succeed when
the stock only covers one of them.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from ..models import MedicineLot
from .errors import (
    EmptyInput, ExpiredLot, InsufficientStock, InvalidAmount, NotFound, Unauthorized
)
from .scoping import get_owned

logger = logging.getLogger(__name__)


@dataclass
class StockLine:
    lot_id: int
    quantity: int
    # Caller's label for the item, used when the lot itself cannot be shown
    name: Optional[str] = None
    unit_price: Optional[float] = None


@dataclass
class RestoreReport:
    restored: Dict[int, int] = field(default_factory=dict)
    skipped: List[int] = field(default_factory=list)


class InventoryStore:
    """Service class for stock quantity operations"""

    @staticmethod
    def get_lot(db: Session, tenant_id: int, lot_id: int, lock: bool = False) -> MedicineLot:
        return get_owned(db, MedicineLot, lot_id, tenant_id, "Medicine", lock=lock)

    @staticmethod
    def _aggregate(lines: Iterable[StockLine]) -> Dict[int, int]:
        requested: Dict[int, int] = {}
        for line in lines:
            label = line.name or f"lot #{line.lot_id}"
            if line.quantity is None or line.quantity <= 0:
                raise InvalidAmount(f"Quantity for {label} must be greater than zero")
            requested[line.lot_id] = requested.get(line.lot_id, 0) + int(line.quantity)
        return requested

    @staticmethod
    def validate(
        db: Session,
        tenant_id: int,
        lines: List[StockLine],
        today: Optional[date] = None,
    ) -> Dict[int, int]:
        """
        Check every line before anything is decremented.
        Returns the plan {lot_id: total quantity} for ``apply``.
        Several lines against the same lot are checked against their sum.
        """
        if not lines:
            raise EmptyInput("No items in bill")

        requested = InventoryStore._aggregate(lines)
        labels = {}
        for line in lines:
            labels.setdefault(line.lot_id, line.name or f"lot #{line.lot_id}")

        # Lock in id order so concurrent bills cannot deadlock each other.
        # Only the caller's own lots are locked.
        lots = db.query(MedicineLot)\
            .filter(MedicineLot.id.in_(list(requested)), MedicineLot.tenant_id == tenant_id)\
            .order_by(MedicineLot.id)\
            .with_for_update()\
            .all()
        by_id = {lot.id: lot for lot in lots}
        absent = [lot_id for lot_id in requested if lot_id not in by_id]
        foreign = set()
        if absent:
            foreign = {
                row.id for row in db.query(MedicineLot.id).filter(MedicineLot.id.in_(absent)).all()
            }
        today = today or date.today()

        for lot_id, quantity in requested.items():
            lot = by_id.get(lot_id)
            if lot_id in foreign:
                raise Unauthorized(f"Unauthorized access to medicine: {labels[lot_id]}")
            if lot is None:
                raise NotFound(f"Medicine not found: {labels[lot_id]}")
            if lot.expiry_date < today:
                raise ExpiredLot(lot.name, lot.batch_number, lot.expiry_date)
            if lot.quantity < quantity:
                raise InsufficientStock(lot.name, lot.quantity, quantity)

        return requested

    @staticmethod
    def apply(db: Session, tenant_id: int, plan: Dict[int, int]) -> None:
        """
        Decrement every lot in the plan. A lot whose stock changed since
        ``validate`` makes the guarded UPDATE match no row; the caller's unit
        of work then rolls back the decrements already issued.
        """
        for lot_id in sorted(plan):
            quantity = plan[lot_id]
            updated = db.query(MedicineLot)\
                .filter(
                    MedicineLot.id == lot_id,
                    MedicineLot.tenant_id == tenant_id,
                    MedicineLot.quantity >= quantity
                )\
                .update(
                    {MedicineLot.quantity: MedicineLot.quantity - quantity},
                    synchronize_session=False
                )
            if updated != 1:
                current = db.query(MedicineLot.name, MedicineLot.quantity)\
                    .filter(MedicineLot.id == lot_id).first()
                logger.info("Stock conflict on lot %s: requested %s", lot_id, quantity)
                if current is None:
                    raise NotFound(f"Medicine not found: lot #{lot_id}")
                raise InsufficientStock(current.name, current.quantity, quantity)

        InventoryStore._expire(db, plan)

    @staticmethod
    def reserve_and_commit(
        db: Session,
        tenant_id: int,
        lines: List[StockLine],
        today: Optional[date] = None,
    ) -> Dict[int, int]:
        """Validate all lines, then decrement all lots. All or nothing."""
        plan = InventoryStore.validate(db, tenant_id, lines, today=today)
        InventoryStore.apply(db, tenant_id, plan)
        return plan

    @staticmethod
    def restore(db: Session, tenant_id: int, lines: List[StockLine]) -> RestoreReport:
        """
        Put quantities back. Lots that no longer exist are skipped and
        reported instead of failing the whole restore.
        """
        report = RestoreReport()
        requested: Dict[int, int] = {}
        for line in lines:
            if line.quantity and line.quantity > 0:
                requested[line.lot_id] = requested.get(line.lot_id, 0) + int(line.quantity)

        for lot_id in sorted(requested):
            quantity = requested[lot_id]
            updated = db.query(MedicineLot)\
                .filter(MedicineLot.id == lot_id, MedicineLot.tenant_id == tenant_id)\
                .update(
                    {MedicineLot.quantity: MedicineLot.quantity + quantity},
                    synchronize_session=False
                )
            if updated:
                report.restored[lot_id] = quantity
            else:
                logger.warning("Restore skipped: lot %s no longer exists (qty %s)", lot_id, quantity)
                report.skipped.append(lot_id)

        InventoryStore._expire(db, report.restored)
        return report

    @staticmethod
    def adjust(db: Session, tenant_id: int, lot_id: int, delta: int) -> MedicineLot:
        """Apply a signed quantity change to one lot; never below zero."""
        lot = InventoryStore.get_lot(db, tenant_id, lot_id, lock=True)
        if lot.quantity + delta < 0:
            raise InsufficientStock(lot.name, lot.quantity, -delta)

        query = db.query(MedicineLot).filter(MedicineLot.id == lot_id)
        if delta < 0:
            query = query.filter(MedicineLot.quantity >= -delta)
        updated = query.update(
            {MedicineLot.quantity: MedicineLot.quantity + delta},
            synchronize_session=False
        )
        if updated != 1:
            current = db.query(MedicineLot.quantity).filter(MedicineLot.id == lot_id).scalar()
            raise InsufficientStock(lot.name, current or 0, -delta)

        db.expire(lot)
        return lot

    @staticmethod
    def _expire(db: Session, lot_ids) -> None:
        # Drop cached quantities so the next attribute access re-reads the row
        for obj in list(db.identity_map.values()):
            if isinstance(obj, MedicineLot) and inspect(obj).identity[0] in lot_ids:
                db.expire(obj)
