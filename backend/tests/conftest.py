"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from services.plaid_service import PlaidService, get_plaid_service
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    account,
    other_plaid_item,
    plaid_item,
    transaction,
)
from tests.fixtures.mocks import MockPlaidClient


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mock_plaid")
def mock_plaid_fixture():
    """Create a configured mock Plaid client with one empty sync page."""
    return MockPlaidClient()


@pytest.fixture(name="plaid_service")
def plaid_service_fixture(mock_plaid):
    """Create a PlaidService backed by the mock client."""
    return PlaidService(mock_plaid)


@pytest.fixture(name="client")
def client_fixture(db, plaid_service):
    """Create a test client with the test database and mock Plaid service."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_plaid_service():
        return plaid_service

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_plaid_service] = override_get_plaid_service
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
