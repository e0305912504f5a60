import pytest

from pharmaledger.models import ReturnRecord, SupplierEntryType, SupplierLedgerEntry
from pharmaledger.services import (
    InsufficientStock, InvalidAmount, ReturnsService, SupplierLedgerService, Unauthorized
)


class TestReturnToSupplier:
    def test_return_credits_supplier_at_cost(self, db, tenant, make_supplier, make_lot, lot_quantity):
        supplier = make_supplier(tenant)
        lot = make_lot(tenant, supplier_id=supplier.id, supplier_price=50.0, quantity=10)

        record = ReturnsService.return_to_supplier(db, tenant.id, lot.id, 2, reason="Damaged")

        assert lot_quantity(lot.id) == 8
        assert record.quantity == 2
        assert record.reason == "Damaged"
        assert record.medicine_name == "Paracetamol 500"

        entries = db.query(SupplierLedgerEntry).all()
        assert len(entries) == 1
        assert entries[0].entry_type == SupplierEntryType.RETURN
        assert entries[0].amount == 100.0
        assert entries[0].description == "Return: 2 x Paracetamol 500 (Batch B100)"
        assert record.supplier_ledger_entry_id == entries[0].id
        assert SupplierLedgerService.net_balance(db, tenant.id, supplier.id) == -100.0

    def test_reason_defaults_to_expired(self, db, tenant, make_lot):
        lot = make_lot(tenant)

        record = ReturnsService.return_to_supplier(db, tenant.id, lot.id, 1)

        assert record.reason == "Expired"

    def test_lot_without_supplier_logs_return_only(self, db, tenant, make_lot, lot_quantity):
        lot = make_lot(tenant)

        record = ReturnsService.return_to_supplier(db, tenant.id, lot.id, 3)

        assert lot_quantity(lot.id) == 7
        assert record.supplier_id is None
        assert record.supplier_ledger_entry_id is None
        assert db.query(SupplierLedgerEntry).count() == 0

    def test_cannot_return_more_than_on_hand(self, db, tenant, make_supplier, make_lot, lot_quantity):
        supplier = make_supplier(tenant)
        lot = make_lot(tenant, supplier_id=supplier.id, quantity=4)

        with pytest.raises(InsufficientStock, match="Available: 4"):
            ReturnsService.return_to_supplier(db, tenant.id, lot.id, 5)

        assert lot_quantity(lot.id) == 4
        assert db.query(SupplierLedgerEntry).count() == 0
        assert db.query(ReturnRecord).count() == 0

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, db, tenant, make_lot, quantity):
        lot = make_lot(tenant)
        with pytest.raises(InvalidAmount):
            ReturnsService.return_to_supplier(db, tenant.id, lot.id, quantity)

    def test_other_tenant_lot(self, db, tenant, other_tenant, make_lot, lot_quantity):
        lot = make_lot(tenant)

        with pytest.raises(Unauthorized):
            ReturnsService.return_to_supplier(db, other_tenant.id, lot.id, 1)
        assert lot_quantity(lot.id) == 10

    def test_list_is_tenant_scoped_newest_first(self, db, tenant, other_tenant, make_lot):
        lot = make_lot(tenant, quantity=20)
        foreign = make_lot(other_tenant)
        first = ReturnsService.return_to_supplier(db, tenant.id, lot.id, 1)
        second = ReturnsService.return_to_supplier(db, tenant.id, lot.id, 2)
        ReturnsService.return_to_supplier(db, other_tenant.id, foreign.id, 1)

        rows = ReturnsService.list_returns(db, tenant.id)

        assert [r.id for r in rows] == [second.id, first.id]
