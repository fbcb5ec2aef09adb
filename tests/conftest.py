import os

# Configure before the app modules read the environment at import time
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import dependencies
from database import get_session
from main import app
from models import Account, Base, Customer, Job
from services.invoice_delivery import get_invoice_dispatcher


class FakeDispatcher:
    """Stands in for PDF rendering + email delivery."""

    def __init__(self, warnings=None, pdf=b"%PDF-1.4 fake"):
        self.warnings = list(warnings or [])
        self.pdf = pdf
        self.dispatched = []

    def render(self, db, invoice):
        return self.pdf

    def dispatch(self, db, invoice):
        self.dispatched.append(invoice.id)
        return list(self.warnings)


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def account(db_session):
    account = Account(
        owner_id=101,
        business_name="Rivera Plumbing",
        default_tax_rate=Decimal("0.080000"),
        default_invoice_notes="Net 30. Thank you!",
        payment_terms_days=30,
    )
    db_session.add(account)
    db_session.commit()
    return account


@pytest.fixture
def customer(db_session, account):
    customer = Customer(
        account_id=account.id,
        first_name="Dana",
        last_name="Okafor",
        email="dana@example.com",
    )
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture
def job(db_session, account, customer):
    job = Job(account_id=account.id, customer_id=customer.id, title="Water heater install", status="completed")
    db_session.add(job)
    db_session.commit()
    return job


@pytest.fixture
def other_account(db_session):
    """A second business with its own customer and job"""
    account = Account(owner_id=202, business_name="Northside Electric", default_tax_rate=Decimal("0"))
    db_session.add(account)
    db_session.flush()
    customer = Customer(account_id=account.id, first_name="Sam", last_name="Lee", email="sam@example.com")
    db_session.add(customer)
    db_session.flush()
    job = Job(account_id=account.id, customer_id=customer.id, title="Panel upgrade")
    db_session.add(job)
    db_session.commit()
    return account


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest.fixture
def client(db_session, dispatcher):
    def override_session():
        yield db_session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_invoice_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(**claims) -> str:
    return jwt.encode(claims, dependencies.SECRET_KEY, algorithm=dependencies.ALGORITHM)


@pytest.fixture
def auth_headers(account):
    return {"Authorization": f"Bearer {make_token(id=account.owner_id)}"}


@pytest.fixture
def other_headers(other_account):
    return {"Authorization": f"Bearer {make_token(id=other_account.owner_id)}"}
