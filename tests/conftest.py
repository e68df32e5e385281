"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real one. Tables are created before each test and dropped after,
since ledger operations commit their own atomic units.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from finance_tracker.main import app
from finance_tracker.models.base import Base, get_db
from finance_tracker.repositories.accounts import AccountRepository
from finance_tracker.schemas.account import AccountCreate


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

OWNER = "user-1"
OTHER_OWNER = "user-2"


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
def make_account(db_session):
    """Factory for committed accounts with an opening balance."""
    def _make(name, balance_cents=0, currency="USD", owner=OWNER):
        account = AccountRepository(db_session).create(owner, AccountCreate(
            name=name,
            balance_cents=balance_cents,
            currency=currency,
        ))
        db_session.commit()
        return account
    return _make


@pytest.fixture
def client(db_session):
    """
    Provide a test client bound to the test session.

    The get_db dependency is overridden so the app uses our
    session instead of the configured database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, headers={"X-User-Id": OWNER})
    app.dependency_overrides.clear()
