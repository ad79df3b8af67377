"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timezone
from typing import Generator
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from produce_ledger.api.dependencies import get_finance_client
from produce_ledger.api.main import create_app
from produce_ledger.infrastructure.clients.finance_partner import FinancePartnerClient
from produce_ledger.infrastructure.database.models import Base
from produce_ledger.infrastructure.database.session import get_db
from produce_ledger.utils.locks import KeyedLock


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Factory for extra sessions on the test database, one per worker thread"""
    return TestingSessionLocal


@pytest.fixture
def harvest_day() -> datetime:
    """Fixed clock reading for ledger tests"""
    return datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def locks() -> KeyedLock:
    """Fresh lock registry so tests never share producer locks"""
    return KeyedLock()


@pytest.fixture
def finance_client() -> FinancePartnerClient:
    """Finance partner client with network calls stubbed out"""
    client = FinancePartnerClient(base_url="http://finance.test")
    client.submit_order = AsyncMock()
    client.request_disbursement = AsyncMock(return_value="TRANS-TEST")
    return client


@pytest.fixture
def client(db: Session, finance_client: FinancePartnerClient) -> TestClient:
    """Create FastAPI test client with test database and stubbed finance partner"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_finance_client] = lambda: finance_client
    return TestClient(app)
