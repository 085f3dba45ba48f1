import pytest
from fastapi.testclient import TestClient

from golden_store.core.config import Settings
from golden_store.db.backends import JsonFileBackend
from golden_store.db.store import DataStore
from golden_store.main import create_app
from golden_store.repositories.ledger_repo import LedgerRepository
from golden_store.repositories.order_repo import OrderRepository


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "golden_store.json"


@pytest.fixture
def store(data_file) -> DataStore:
    """Empty store persisted to a temporary JSON file."""
    store = DataStore(JsonFileBackend(data_file))
    store.load()
    return store


@pytest.fixture
def ledger(store) -> LedgerRepository:
    return LedgerRepository(store)


@pytest.fixture
def orders(store) -> OrderRepository:
    return OrderRepository(store)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        STORAGE_BACKEND="file",
        DATA_FILE=str(tmp_path / "api_store.json"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def client(test_settings):
    """Fixture for FastAPI test client."""
    # Context manager runs the lifespan, which builds the store
    with TestClient(create_app(test_settings)) as client:
        yield client
