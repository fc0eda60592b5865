"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real one. Tables are created before each test and dropped
after it.
"""

import os

# Must be set before the application modules build their engine
TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("LOG_FORMAT", "standard")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from finance_review.main import app
from finance_review.models import AppRole, Base, MonthlyRecord, RecordStatus
from finance_review.models.base import get_db
from finance_review.services.change_workflow import ChangeWorkflowService
from finance_review.services.notification_dispatcher import NotificationDispatcher
from finance_review.store.roles import SqlAlchemyRoleDirectory
from finance_review.store.sql import SqlAlchemyRecordStore

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

FINANCE_USER = "finance-1"
ADMINS = ["admin-1", "admin-2"]


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
def store(db_session):
    return SqlAlchemyRecordStore(db_session)


@pytest.fixture
def roles(db_session):
    """Role directory with two admins, a finance user and a viewer."""
    directory = SqlAlchemyRoleDirectory(db_session)
    for admin in ADMINS:
        directory.assign_role(admin, AppRole.ADMIN)
    directory.assign_role(FINANCE_USER, AppRole.FINANCE)
    directory.assign_role("viewer-1", AppRole.VIEWER)
    return directory


@pytest.fixture
def workflow(store, roles):
    return ChangeWorkflowService(
        store=store,
        dispatcher=NotificationDispatcher(store),
        roles=roles,
    )


@pytest.fixture
def make_record(db_session):
    """Insert a monthly record directly and return it."""

    def factory(member_id="EMP-001", created_by=FINANCE_USER, **amounts):
        record = MonthlyRecord(
            member_id=member_id,
            month=date(2026, 10, 1),
            total_savings=Decimal(str(amounts.get("total_savings", "1000"))),
            total_loans=Decimal(str(amounts.get("total_loans", "0"))),
            loan_balance=Decimal(str(amounts.get("loan_balance", "500"))),
            monthly_contribution=Decimal(
                str(amounts.get("monthly_contribution", "100"))
            ),
            monthly_repayment=Decimal(
                str(amounts.get("monthly_repayment", "0"))
            ),
            status=RecordStatus.PENDING,
            created_by=created_by,
            version=1,
        )
        db_session.add(record)
        db_session.commit()
        return record

    return factory


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the app uses the
    test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
