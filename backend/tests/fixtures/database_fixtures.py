"""
Database test fixtures.

Every test runs against a freshly created schema on the shared in-memory
engine; tables are dropped afterwards so no state leaks between tests.
"""

import pytest

from bookmarket.db.session import SessionLocal, create_tables, drop_tables
from bookmarket.db.unit_of_work import UnitOfWork


@pytest.fixture(autouse=True)
def fresh_schema():
    create_tables()
    yield
    drop_tables()


@pytest.fixture
def db_session():
    """Raw SQLAlchemy session for repository tests; rolled back afterwards."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def uow_factory():
    return UnitOfWork
