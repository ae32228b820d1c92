"""
Shared fixtures: in-memory SQLite per test, API client with DB and balance oracle overridden.
DATABASE_URL must be set before ghostcoin is imported (the engine is built at import).
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ghostcoin.api.deps import get_balance_oracle  # noqa: E402
from ghostcoin.config import settings  # noqa: E402
from ghostcoin.db.base import Base  # noqa: E402
from ghostcoin.db.session import get_db  # noqa: E402
from ghostcoin.main import app  # noqa: E402
from ghostcoin.services.admin_service import grant_role  # noqa: E402
from ghostcoin.services.token import clear_balance_cache  # noqa: E402
from tests.support import FakeOracle  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_state(monkeypatch):
    clear_balance_cache()
    monkeypatch.setattr(settings, "auth_jwt_secret", "")
    monkeypatch.setattr(settings, "claim_policy", "per_user")
    monkeypatch.setattr(settings, "require_wallet_for_claim", False)
    yield
    clear_balance_cache()


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def client(db, oracle):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_balance_oracle] = lambda: oracle
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_id(db):
    grant_role(db, "admin-1")
    return "admin-1"
