"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before and dropped after
every test, so each test starts from an empty schema.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bookkeeping.main import app
from bookkeeping.models import Base
from bookkeeping.models.base import get_db
from bookkeeping.schemas.organization import OrganizationCreate
from bookkeeping.schemas.period import FiscalPeriodCreate
from bookkeeping.schemas.transaction import BankTransactionCreate
from bookkeeping.services.organization_service import OrganizationService
from bookkeeping.services.period_service import PeriodService


# SQLite for tests, no external database needed.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


# A January statement. The account stood at 479,507.94 before the
# first line. Line 5 matches no rule and stays unclassified.
STATEMENT = [
    (date(2024, 1, 2), "IMMEDIATE PAYMENT 224812909 JOHN DOE",
     "1210.00", "0.00", "478297.94"),
    (date(2024, 1, 3), "OFFICE RENT JANUARY",
     "5000.00", "0.00", "473297.94"),
    (date(2024, 1, 5), "CREDIT TRANSFER ACME LTD",
     "0.00", "25000.00", "498297.94"),
    (date(2024, 1, 10), "FEE IMMEDIATE PAYMENT",
     "15.50", "0.00", "498282.44"),
    (date(2024, 1, 15), "MYSTERY VENDOR XYZ",
     "300.00", "0.00", "497982.44"),
    (date(2024, 1, 31), "MONTHLY SERVICE CHARGE",
     "85.00", "0.00", "497897.44"),
]


def statement_lines(rows=STATEMENT) -> list[BankTransactionCreate]:
    return [
        BankTransactionCreate(
            transaction_date=txn_date,
            description=description,
            debit_amount=Decimal(debit),
            credit_amount=Decimal(credit),
            balance=Decimal(balance),
        )
        for txn_date, description, debit, credit, balance in rows
    ]


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def session_factory():
    """Session factory for tests that run work on several threads."""
    return TestSessionLocal


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def organization(db_session):
    """An organization with the standard chart and system rules."""
    org = OrganizationService(db_session).create_organization(
        OrganizationCreate(name="Acme Holdings")
    )
    db_session.commit()
    return org


@pytest.fixture
def period(db_session, organization):
    """An OPEN January 2024 period with no transactions."""
    fiscal_period = PeriodService(db_session).create_period(
        organization.id,
        FiscalPeriodCreate(
            name="January 2024",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
        ),
    )
    db_session.commit()
    return fiscal_period


@pytest.fixture
def statement(db_session, organization, period):
    """The sample statement imported into the January period."""
    transactions = PeriodService(db_session).import_transactions(
        organization.id, period.id, statement_lines()
    )
    db_session.commit()
    return transactions


@pytest.fixture
def statement_payload():
    """The sample statement as the JSON body of an import request."""
    return [
        {
            "transaction_date": txn_date.isoformat(),
            "description": description,
            "debit_amount": debit,
            "credit_amount": credit,
            "balance": balance,
        }
        for txn_date, description, debit, credit, balance in STATEMENT
    ]
