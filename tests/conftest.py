import os

os.environ.setdefault("TESTING", "True")
os.environ.setdefault("STATUS_REFRESH_ENABLED", "False")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import uuid
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rentdesk.db.base import Base
from rentdesk.database import get_db
from rentdesk.core.deps import get_current_user_id
from rentdesk.main import app
from rentdesk.models import Client, Contract, Payment, Property, Unit

USER_ID = uuid.UUID("11111111-1111-4111-8111-111111111111")
OTHER_USER_ID = uuid.UUID("22222222-2222-4222-8222-222222222222")

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = lambda: USER_ID
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def user_id():
    return USER_ID


@pytest.fixture()
def today():
    return date.today()


@pytest.fixture()
def building(db):
    """Residential building with units 101, 102, 201, 202"""
    prop = Property(user_id=USER_ID, name="Al Noor Tower", location="Riyadh", floors=2,
                    units_per_floor=2, unit_format="101")
    for floor in (1, 2):
        for n in (1, 2):
            prop.units.append(Unit(user_id=USER_ID, unit_number=f"{floor}{n:02d}", floor=floor))
    db.add(prop)
    db.commit()
    db.refresh(prop)
    return prop


@pytest.fixture()
def renter(db):
    person = Client(user_id=USER_ID, name="Ahmed Ali", phone="0500000001",
                    email="ahmed@example.com", id_number="1010101010")
    db.add(person)
    db.commit()
    db.refresh(person)
    return person


@pytest.fixture()
def other_renter(db):
    person = Client(user_id=USER_ID, name="Sara Omar", phone="0500000002",
                    email="sara@example.com", id_number="2020202020")
    db.add(person)
    db.commit()
    db.refresh(person)
    return person


@pytest.fixture()
def make_contract(db, today):
    """Insert a contract row directly, bypassing the reservation guard"""
    def _make(property_id, client_id, unit_number="101", user_id=USER_ID, status="active",
              start=None, end=None, monthly_rent=4000.0, payment_dates="", payment_amounts=""):
        contract = Contract(
            user_id=user_id,
            property_id=property_id,
            client_id=client_id,
            unit_number=unit_number,
            start_date=start or today - timedelta(days=30),
            end_date=end or today + timedelta(days=335),
            monthly_rent=monthly_rent,
            payment_dates=payment_dates,
            payment_amounts=payment_amounts,
            status=status,
        )
        db.add(contract)
        db.commit()
        db.refresh(contract)
        return contract
    return _make


@pytest.fixture()
def make_payment(db):
    def _make(contract, due_date, amount=1000.0, status="pending", paid_date=None):
        payment = Payment(
            user_id=contract.user_id,
            contract_id=contract.id,
            amount=amount,
            due_date=due_date,
            status=status,
            paid_date=paid_date,
        )
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment
    return _make
