import os
import pytest
from fastapi.testclient import TestClient

# Set test database before any imports
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

from app.main import create_app
from app.config import get_settings
from db.base import Base
from db.session import get_engine

# well-known throwaway key (hardhat account #0), never funded on mainnet
AGENT_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create all tables before tests run, drop after all tests complete."""
    # Import models to ensure they are registered with Base
    from db.models import ChatTurn  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
    yield
    Base.metadata.drop_all(bind=get_engine())


@pytest.fixture(autouse=True)
def clean_tables():
    """Clean tables between tests to ensure isolation."""
    yield
    from db.session import get_session
    from db.models import ChatTurn

    with get_session() as db:
        db.query(ChatTurn).delete()
        db.commit()


@pytest.fixture(autouse=True)
def _configure_env(monkeypatch):
    monkeypatch.setenv("CHAT_INCLUDE_BALANCES", "false")
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("AGENT_PRIVATE_KEY", AGENT_PRIVATE_KEY)
    monkeypatch.setenv("RPC_URL", "http://127.0.0.1:8545")
    monkeypatch.delenv("SAFE_TX_SERVICE_URL", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    app = create_app()
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db():
    from db.session import get_session

    session = get_session()
    try:
        yield session
    finally:
        session.close()
