"""
Pytest configuration and fixtures
"""

import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ["ENV"] = "test"
# In-memory SQLite by default; point TEST_DATABASE_URL at PostgreSQL to run against it
os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["METRICS_PUBLIC"] = "false"
os.environ["METRICS_TOKEN"] = "test-metrics-token"

from vaultdao.infrastructure.database import Base, get_db
from vaultdao.main import app
from vaultdao.core.vaults.models import Vault
from vaultdao.services.vault_service import create_vault

from factories import add_asset, lock_vault


# Create test database engine
test_engine = create_engine(
    os.environ["DATABASE_URL"],
    poolclass=StaticPool,
    connect_args={"check_same_thread": False} if "sqlite" in os.environ["DATABASE_URL"] else {},
)

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Create a fresh database session for each test.
    Clears all tables before and after each test.
    """
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)

    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session: Session):
    """
    Create FastAPI test client with dependency overrides.
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
def draft_vault(db_session: Session) -> Vault:
    """Create a vault in draft stage"""
    vault = create_vault(db_session, "Test vault")
    db_session.commit()
    db_session.refresh(vault)
    return vault


@pytest.fixture
def locked_vault(db_session: Session) -> Vault:
    """Create a vault in governance (locked) stage with one locked asset"""
    vault = create_vault(db_session, "Locked vault")
    add_asset(db_session, vault)
    lock_vault(db_session, vault)
    db_session.commit()
    db_session.refresh(vault)
    return vault
