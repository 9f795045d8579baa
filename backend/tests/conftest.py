# backend/tests/conftest.py
"""
Pytest configuration for the festival archive backend.

Tests run against a throwaway SQLite file and the small catalog under
``tests/fixtures/catalog``. Both are wired in through environment variables
BEFORE any app import, so the module-level engine and settings never point at
a developer database or the shipped data directory.
"""

import os
from pathlib import Path
import sys
import tempfile

_TEST_DB_DIR = tempfile.mkdtemp(prefix="festival_archive_tests_")
TEST_DATABASE_URL = f"sqlite:///{Path(_TEST_DB_DIR) / 'test.db'}"
FIXTURE_CATALOG_DIR = Path(__file__).resolve().parent / "fixtures" / "catalog"

# CRITICAL: Set testing mode BEFORE any app imports!
os.environ["is_testing"] = "true"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["CATALOG_DATA_DIR"] = str(FIXTURE_CATALOG_DIR)
os.environ.pop("OPENAI_API_KEY", None)

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

# NOW we can set the settings
from app.core.config import settings

settings.is_testing = True
settings.environment = "development"
settings.catalog_data_dir = str(FIXTURE_CATALOG_DIR)

from typing import Dict

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker

from app.api.dependencies.services import get_catalog_store
from app.auth import create_access_token, get_password_hash
from app.database import Base, get_db
from app.database.engines import build_engine
from app.main import app
from app.models.user import User
from app.services.catalog import CatalogStore, reset_catalog

# ============================================================================
# TEST DATABASE CONFIGURATION
# ============================================================================

test_engine = build_engine(TEST_DATABASE_URL, pool_name="tests")
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def db():
    """
    Create a new database session for each test.

    Tables are created fresh and dropped afterwards, so tests never see each
    other's rows. The same session is handed to TestClient requests.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="session")
def catalog() -> CatalogStore:
    """The fixture catalog: two editions, a shorts bundle and an after-midnight show."""
    reset_catalog()
    return CatalogStore.from_directory(FIXTURE_CATALOG_DIR)


@pytest.fixture
def client(db: Session, catalog: CatalogStore):
    """Create a test client with the test database and fixture catalog."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog_store] = lambda: catalog

    # Don't use context manager - the lifespan would touch the module engine
    test_client = TestClient(app)

    yield test_client

    # Cleanup
    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# USERS
# ============================================================================


@pytest.fixture
def test_password() -> str:
    """Standard test password for all test users."""
    return "TestPassword123!"


def _make_user(db: Session, email: str, nickname: str, password: str) -> User:
    user = User(email=email, hashed_password=get_password_hash(password), nickname=nickname, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db: Session, test_password: str) -> User:
    return _make_user(db, "test.viewer@example.com", "viewer", test_password)


@pytest.fixture
def other_user(db: Session, test_password: str) -> User:
    return _make_user(db, "test.critic@example.com", "critic", test_password)


@pytest.fixture
def third_user(db: Session, test_password: str) -> User:
    return _make_user(db, "test.curator@example.com", "curator", test_password)


def auth_headers_for(user: User) -> Dict[str, str]:
    token = create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user: User) -> Dict[str, str]:
    """Auth headers for the default test user."""
    return auth_headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> Dict[str, str]:
    return auth_headers_for(other_user)


def pytest_sessionfinish(session, exitstatus):
    test_engine.dispose()

