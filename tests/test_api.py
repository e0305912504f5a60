from datetime import date, timedelta

from pharmaledger.auth import create_access_token

NEXT_YEAR = (date.today() + timedelta(days=365)).isoformat()


def bill_payload(lot_id, quantity, **extra):
    payload = {
        "customer_name": "Ravi Kumar",
        "customer_mobile": "9876543210",
        "items": [{"medicine_lot_id": lot_id, "quantity": quantity}],
    }
    payload.update(extra)
    return payload


class TestAuthentication:
    def test_root(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_missing_token(self, client, tenant):
        response = client.get("/api/medicines", headers={"X-Tenant-ID": tenant.subdomain})
        assert response.status_code == 401

    def test_bad_token(self, client, tenant):
        response = client.get(
            "/api/medicines",
            headers={"Authorization": "Bearer not-a-token", "X-Tenant-ID": tenant.subdomain}
        )
        assert response.status_code == 401

    def test_header_must_match_token(self, client, tenant, other_tenant, auth_headers):
        headers = auth_headers(tenant, header_tenant=other_tenant.subdomain)
        response = client.get("/api/medicines", headers=headers)
        assert response.status_code == 403

    def test_unknown_tenant(self, client):
        token = create_access_token({"sub": "ghost", "tenant_id": "nowhere", "role": "admin"})
        response = client.get(
            "/api/medicines",
            headers={"Authorization": f"Bearer {token}", "X-Tenant-ID": "nowhere"}
        )
        assert response.status_code == 404

    def test_inactive_tenant(self, client, db, tenant, auth_headers):
        tenant.status = "Pending"
        db.commit()
        response = client.get("/api/medicines", headers=auth_headers(tenant))
        assert response.status_code == 403


class TestMedicineIntake:
    def test_bulk_intake_books_purchase(self, client, tenant, auth_headers):
        headers = auth_headers(tenant)
        supplier = client.post(
            "/api/suppliers", headers=headers,
            json={"name": "Sun Distributors", "companies_supplied": ["Cipla", " "]}
        ).json()
        assert supplier["companies_supplied"] == ["Cipla"]

        response = client.post("/api/medicines/bulk", headers=headers, json={
            "supplier_id": supplier["id"],
            "invoice_number": "INV-7",
            "items": [
                {"name": "Paracetamol 500", "batch_number": "P1", "expiry_date": NEXT_YEAR,
                 "mrp": 30, "supplier_price": 20, "quantity": 10},
                {"name": "Cetirizine", "batch_number": "C1", "expiry_date": NEXT_YEAR,
                 "mrp": 15, "supplier_price": 5, "price": 12, "quantity": 20, "min_stock_level": 2},
            ],
        })
        assert response.status_code == 201
        body = response.json()
        assert body["purchase_amount"] == 300.0
        assert [lot["price"] for lot in body["lots"]] == [30.0, 12.0]
        assert body["lots"][0]["min_stock_level"] == 10

        ledger = client.get(f"/api/suppliers/{supplier['id']}/ledger", headers=headers).json()
        assert ledger["net_balance"] == 300.0
        assert ledger["entries"][0]["entry_type"] == "Purchase"
        assert ledger["entries"][0]["description"] == "Invoice #INV-7"

        invoices = client.get(f"/api/medicines/supplier/{supplier['id']}/invoices", headers=headers)
        assert invoices.json() == ["INV-7"]
        items = client.get(f"/api/medicines/supplier/{supplier['id']}/invoice/INV-7", headers=headers)
        assert len(items.json()) == 2

    def test_low_stock(self, client, tenant, make_lot, auth_headers):
        low = make_lot(tenant, quantity=3, min_stock_level=5)
        make_lot(tenant, name="Cetirizine", quantity=50, min_stock_level=5)

        response = client.get("/api/medicines/low-stock", headers=auth_headers(tenant))

        assert [lot["id"] for lot in response.json()] == [low.id]

    def test_quantity_edit_cannot_go_negative(self, client, tenant, make_lot, auth_headers):
        lot = make_lot(tenant, quantity=5)
        response = client.put(f"/api/medicines/{lot.id}", headers=auth_headers(tenant), json={"quantity": -1})
        assert response.status_code == 422

        response = client.put(f"/api/medicines/{lot.id}", headers=auth_headers(tenant), json={"quantity": 2, "price": 90})
        assert response.status_code == 200
        assert response.json()["quantity"] == 2
        assert response.json()["price"] == 90.0

    def test_null_for_required_field_is_rejected(self, client, tenant, make_lot, auth_headers):
        lot = make_lot(tenant)
        headers = auth_headers(tenant)

        for field in ("name", "batch_number", "expiry_date", "price"):
            response = client.put(f"/api/medicines/{lot.id}", headers=headers, json={field: None})
            assert response.status_code == 422

        response = client.put(f"/api/medicines/{lot.id}", headers=headers, json={"invoice_number": None})
        assert response.status_code == 200
        assert response.json()["name"] == "Paracetamol 500"

    def test_staff_cannot_add_stock(self, client, tenant, auth_headers):
        response = client.post("/api/medicines", headers=auth_headers(tenant, role="staff"), json={
            "name": "Paracetamol 500", "batch_number": "P1", "expiry_date": NEXT_YEAR,
            "mrp": 30, "supplier_price": 20, "quantity": 10,
        })
        assert response.status_code == 403


class TestBillsApi:
    def test_credit_sale_and_settlement(self, client, tenant, make_lot, auth_headers, lot_quantity):
        headers = auth_headers(tenant, role="staff")
        lot = make_lot(tenant, quantity=10, price=100.0)

        response = client.post(
            "/api/bills", headers=headers,
            json=bill_payload(lot.id, 3, paid_amount=100, grand_total=300)
        )
        assert response.status_code == 201
        bill = response.json()
        assert bill["tax_amount"] == 14.29
        assert bill["balance_amount"] == 200.0
        assert bill["payment_status"] == "Partial"
        assert bill["pharmacy_name"] == "City Care Pharmacy"
        assert bill["lines"][0]["batch_number"] == "B100"
        assert lot_quantity(lot.id) == 7

        settled = client.post(f"/api/bills/{bill['id']}/settle", headers=headers, json={"amount": 200})
        assert settled.status_code == 200
        assert settled.json()["payment_status"] == "Paid"

        again = client.post(f"/api/bills/{bill['id']}/settle", headers=headers, json={"amount": 1})
        assert again.status_code == 409
        assert again.json()["code"] == "already_settled"

    def test_insufficient_stock_payload(self, client, tenant, make_lot, auth_headers, lot_quantity):
        lot = make_lot(tenant, quantity=10)

        response = client.post("/api/bills", headers=auth_headers(tenant), json=bill_payload(lot.id, 15))

        assert response.status_code == 400
        assert response.json() == {
            "detail": "Insufficient stock for Paracetamol 500. Available: 10",
            "code": "insufficient_stock",
        }
        assert lot_quantity(lot.id) == 10

    def test_expired_lot_payload(self, client, tenant, make_lot, auth_headers):
        lot = make_lot(tenant, expiry_date=date.today() - timedelta(days=1))

        response = client.post("/api/bills", headers=auth_headers(tenant), json=bill_payload(lot.id, 1))

        assert response.status_code == 400
        assert response.json()["code"] == "expired_lot"

    def test_nan_amounts_are_rejected_at_the_boundary(self, client, tenant, make_lot, auth_headers, lot_quantity):
        headers = {**auth_headers(tenant), "Content-Type": "application/json"}
        lot = make_lot(tenant, quantity=10, price=100.0)

        created = client.post(
            "/api/bills", headers=headers,
            content=f'{{"customer_name": "Ravi", "customer_mobile": "9876543210", '
                    f'"items": [{{"medicine_lot_id": {lot.id}, "quantity": 1}}], "paid_amount": NaN}}'
        )
        assert created.status_code == 422
        assert lot_quantity(lot.id) == 10

        bill = client.post("/api/bills", headers=headers, json=bill_payload(lot.id, 1, paid_amount=0)).json()
        settled = client.post(f"/api/bills/{bill['id']}/settle", headers=headers, content='{"amount": NaN}')
        assert settled.status_code == 422

        due = client.get("/api/customers/due?mobile=9876543210", headers=headers).json()
        assert due["total_due"] == 100.0

    def test_other_tenant_bill_is_forbidden(self, client, tenant, other_tenant, make_lot, auth_headers):
        lot = make_lot(tenant)
        bill = client.post("/api/bills", headers=auth_headers(tenant), json=bill_payload(lot.id, 1)).json()

        response = client.get(f"/api/bills/{bill['id']}", headers=auth_headers(other_tenant))

        assert response.status_code == 403
        assert response.json()["code"] == "unauthorized"
        assert client.get("/api/bills/9999", headers=auth_headers(tenant)).status_code == 404

    def test_only_admin_deletes_bills(self, client, tenant, make_lot, auth_headers, lot_quantity):
        lot = make_lot(tenant, quantity=10)
        bill = client.post("/api/bills", headers=auth_headers(tenant), json=bill_payload(lot.id, 4)).json()

        forbidden = client.delete(f"/api/bills/{bill['id']}", headers=auth_headers(tenant, role="staff"))
        assert forbidden.status_code == 403
        assert lot_quantity(lot.id) == 6

        deleted = client.delete(f"/api/bills/{bill['id']}", headers=auth_headers(tenant))
        assert deleted.status_code == 200
        assert deleted.json()["restored"] == {str(lot.id): 4}
        assert lot_quantity(lot.id) == 10

    def test_listing_sort_filter_and_pages(self, client, tenant, make_lot, auth_headers):
        headers = auth_headers(tenant)
        lot = make_lot(tenant, quantity=50)
        ids = [
            client.post("/api/bills", headers=headers, json=bill_payload(lot.id, 1, paid_amount=paid)).json()["id"]
            for paid in (None, 0, None)
        ]

        assert [b["id"] for b in client.get("/api/bills", headers=headers).json()] == ids[::-1]
        assert [b["id"] for b in client.get("/api/bills?sort=oldest", headers=headers).json()] == ids
        unpaid = client.get("/api/bills?status=Unpaid", headers=headers).json()
        assert [b["id"] for b in unpaid] == [ids[1]]

        page = client.get("/api/bills/paged?page=2&page_size=2", headers=headers).json()
        assert page["total"] == 3
        assert page["total_pages"] == 2
        assert [b["id"] for b in page["items"]] == [ids[0]]

        by_mobile = client.get("/api/bills/customer/9876543210", headers=headers).json()
        assert len(by_mobile) == 3

    def test_profile_change_leaves_old_bills_alone(self, client, tenant, make_lot, auth_headers):
        headers = auth_headers(tenant)
        lot = make_lot(tenant)
        bill = client.post("/api/bills", headers=headers, json=bill_payload(lot.id, 1)).json()

        profile = client.put("/api/pharmacy/profile", headers=headers, json={"name": "City Care Plus"})
        assert profile.json()["name"] == "City Care Plus"

        assert client.get(f"/api/bills/{bill['id']}", headers=headers).json()["pharmacy_name"] == "City Care Pharmacy"

    def test_profile_name_cannot_be_cleared(self, client, tenant, auth_headers):
        headers = auth_headers(tenant)

        assert client.put("/api/pharmacy/profile", headers=headers, json={"name": None}).status_code == 422
        assert client.put("/api/pharmacy/profile", headers=headers, json={"name": "  "}).status_code == 422

        response = client.put("/api/pharmacy/profile", headers=headers, json={"address": None})
        assert response.status_code == 200
        assert response.json()["name"] == "City Care Pharmacy"
        assert response.json()["address"] is None


class TestReturnsApi:
    def test_return_flow(self, client, tenant, make_supplier, make_lot, auth_headers, lot_quantity):
        supplier = make_supplier(tenant)
        lot = make_lot(tenant, supplier_id=supplier.id, supplier_price=50.0)
        payload = {"medicine_lot_id": lot.id, "quantity": 2}

        assert client.post("/api/returns", headers=auth_headers(tenant, role="staff"), json=payload).status_code == 403

        response = client.post("/api/returns", headers=auth_headers(tenant), json=payload)
        assert response.status_code == 201
        assert response.json()["reason"] == "Expired"
        assert lot_quantity(lot.id) == 8

        ledger = client.get(f"/api/suppliers/{supplier.id}/ledger", headers=auth_headers(tenant)).json()
        assert ledger["net_balance"] == -100.0
        assert len(client.get("/api/returns", headers=auth_headers(tenant)).json()) == 1


class TestCustomersApi:
    def test_duplicate_name_needs_force(self, client, tenant, auth_headers):
        headers = auth_headers(tenant)

        created = client.post("/api/customers", headers=headers, json={"name": "ravi kumar", "mobile": "9876543210"})
        assert created.status_code == 201
        assert created.json()["name"] == "RAVI KUMAR"

        duplicate = client.post("/api/customers", headers=headers, json={"name": "Ravi Kumar ", "mobile": "9000000000"})
        assert duplicate.status_code == 200
        assert duplicate.json()["exists"] is True

        forced = client.post(
            "/api/customers", headers=headers,
            json={"name": "Ravi Kumar", "mobile": "9000000000", "force": True}
        )
        assert forced.status_code == 201

    def test_dues_in_list_and_detail(self, client, tenant, make_lot, make_customer, auth_headers):
        headers = auth_headers(tenant)
        lot = make_lot(tenant, price=100.0)
        customer = make_customer(tenant)
        make_customer(tenant, name="ASHA", mobile="9111111111")
        client.post("/api/bills", headers=headers, json=bill_payload(lot.id, 2, paid_amount=50))

        entry = client.post("/api/customers/transaction", headers=headers, json={
            "customer_id": customer.id, "type": "Payment", "amount": 30, "description": "Cash",
        })
        assert entry.status_code == 201
        assert entry.json()["entry_type"] == "Payment"

        listing = {c["name"]: c["total_due"] for c in client.get("/api/customers", headers=headers).json()}
        assert listing == {"ASHA": 0.0, "RAVI KUMAR": 120.0}

        due = client.get(f"/api/customers/{customer.id}/due", headers=headers).json()
        assert due["bills_due"] == 150.0
        assert due["manual_due"] == -30.0
        assert due["total_due"] == 120.0
        assert due["history"][-1]["running_balance"] == 120.0

        by_mobile = client.get("/api/customers/due?mobile=9876543210", headers=headers).json()
        assert by_mobile["total_due"] == 120.0

        transactions = client.get(f"/api/customers/{customer.id}/transactions", headers=headers).json()
        assert [t["description"] for t in transactions] == ["Cash"]

    def test_bad_entry_type(self, client, tenant, make_customer, auth_headers):
        customer = make_customer(tenant)
        response = client.post("/api/customers/transaction", headers=auth_headers(tenant), json={
            "customer_id": customer.id, "type": "Refund", "amount": 30,
        })
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"


class TestSuppliersApi:
    def test_supplier_with_history_cannot_be_deleted(self, client, tenant, make_supplier, auth_headers):
        headers = auth_headers(tenant)
        supplier = make_supplier(tenant)
        entry = client.post("/api/suppliers/transaction", headers=headers, json={
            "supplier_id": supplier.id, "type": "Purchase", "amount": 500,
        })
        assert entry.status_code == 201

        response = client.delete(f"/api/suppliers/{supplier.id}", headers=headers)
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"

    def test_delete_unlinks_lots(self, client, tenant, make_supplier, make_lot, auth_headers):
        headers = auth_headers(tenant)
        supplier = make_supplier(tenant)
        lot = make_lot(tenant, supplier_id=supplier.id)

        assert client.delete(f"/api/suppliers/{supplier.id}", headers=headers).status_code == 200

        assert client.get(f"/api/medicines/{lot.id}", headers=headers).json()["supplier_id"] is None
        assert client.get("/api/suppliers", headers=headers).json() == []
