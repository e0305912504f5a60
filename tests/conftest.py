import os

# The application engine is built at import time; keep it off PostgreSQL
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from pharmaledger.auth import create_access_token
from pharmaledger.database import Base, get_db, make_engine
from pharmaledger.main import app
from pharmaledger.models import Customer, MedicineLot, Supplier, Tenant

NEXT_YEAR = date.today() + timedelta(days=365)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def tenant(db):
    t = Tenant(
        name="City Care Pharmacy", subdomain="citycare",
        gst_number="27AAAPC1234C1ZV", address="12 MG Road", license_number="MH-1001"
    )
    db.add(t)
    db.commit()
    return t


@pytest.fixture
def other_tenant(db):
    t = Tenant(name="Town Chemist", subdomain="town", license_number="MH-2002")
    db.add(t)
    db.commit()
    return t


@pytest.fixture
def make_supplier(db):
    def _make(tenant, name="Sun Distributors", **overrides):
        supplier = Supplier(
            tenant_id=tenant.id, name=name, contact_number="9800000000",
            companies_supplied=["Cipla"], **overrides
        )
        db.add(supplier)
        db.commit()
        return supplier
    return _make


@pytest.fixture
def make_lot(db):
    def _make(tenant, **overrides):
        values = dict(
            name="Paracetamol 500", batch_number="B100", expiry_date=NEXT_YEAR,
            mrp=100.0, supplier_price=50.0, price=100.0, quantity=10, min_stock_level=5
        )
        values.update(overrides)
        lot = MedicineLot(tenant_id=tenant.id, **values)
        db.add(lot)
        db.commit()
        return lot
    return _make


@pytest.fixture
def make_customer(db):
    def _make(tenant, name="RAVI KUMAR", mobile="9876543210"):
        customer = Customer(tenant_id=tenant.id, name=name, mobile=mobile)
        db.add(customer)
        db.commit()
        return customer
    return _make


@pytest.fixture
def lot_quantity(session_factory):
    """Read a lot's quantity through a fresh session."""
    def _read(lot_id):
        session = session_factory()
        try:
            lot = session.get(MedicineLot, lot_id)
            return None if lot is None else lot.quantity
        finally:
            session.close()
    return _read


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(tenant, role="admin", header_tenant=None):
        token = create_access_token({"sub": f"{role}-user", "tenant_id": tenant.subdomain, "role": role})
        return {
            "Authorization": f"Bearer {token}",
            "X-Tenant-ID": header_tenant or tenant.subdomain,
        }
    return _headers
