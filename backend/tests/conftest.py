"""Pytest configuration and fixtures"""
import os

# Settings are read at import time
os.environ.setdefault("STORE_BACKEND", "sql")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("HASH_COST", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SEND_TEMPLATES", "false")

from typing import Any, Dict, Generator, List  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from provision.api.deps import get_provisioner, get_store  # noqa: E402
from provision.config import EngineConfig  # noqa: E402
from provision.database import Base  # noqa: E402
from provision.errors import BackingStoreError  # noqa: E402
from provision.main import app  # noqa: E402
from provision.provisioner import Provisioner  # noqa: E402
from provision.schemas.store import PersistResult, SearchResults  # noqa: E402
from provision.store.base import DocumentStore, FetchResult  # noqa: E402
from provision.store.sql import SqlDocumentStore  # noqa: E402

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class BrokenStore(DocumentStore):
    """Store whose lookups fail server-side; records attempted writes."""

    def __init__(self):
        super().__init__("test_")
        self.persisted: List[Dict[str, Any]] = []

    def fetch(self, kind: str, doc_id: str) -> FetchResult:
        raise BackingStoreError(f"bad response from document store while looking up {kind}")

    def persist(self, kind: str, doc_id: str, document: Dict[str, Any]) -> PersistResult:
        self.persisted.append(document)
        return PersistResult(index=self.index(kind), id=doc_id)

    def search(self, kind: str, body: Dict[str, Any]) -> SearchResults:
        raise BackingStoreError(f"document store failed searching {kind}")

    def ping(self) -> bool:
        return False


@pytest.fixture
def engine_config() -> EngineConfig:
    """Engine configuration with a cheap bcrypt cost"""
    return EngineConfig(index_prefix="test_", hash_cost=4, min_secret_length=10, redact_msg="REDACTED")


@pytest.fixture(scope="function")
def store(engine_config: EngineConfig) -> Generator[SqlDocumentStore, None, None]:
    """Create a fresh document store for each test"""
    Base.metadata.create_all(bind=engine)
    try:
        yield SqlDocumentStore(TestingSessionLocal, prefix=engine_config.index_prefix)
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def broken_store() -> BrokenStore:
    return BrokenStore()


@pytest.fixture
def provisioner(engine_config: EngineConfig, store: SqlDocumentStore) -> Provisioner:
    return Provisioner(engine_config, store)


@pytest.fixture(scope="function")
def client(store: SqlDocumentStore, provisioner: Provisioner) -> Generator[TestClient, None, None]:
    """Create test client bound to the test document store"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_provisioner] = lambda: provisioner
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_user_data() -> Dict[str, Any]:
    """Sample member user"""
    return {
        "id": "jdoe",
        "display_name": "Jane Doe",
        "active": True,
        "sysop": False,
        "password": "longenoughpw",
        "sections": ["s1"],
        "sections_all": False,
        "accounts": ["acct1"],
        "admin_accounts": [],
    }


@pytest.fixture
def sample_account_data() -> Dict[str, Any]:
    """Sample top-level account with one access key"""
    return {
        "id": "acct1",
        "display_name": "Account One",
        "active": True,
        "modules": ["wx"],
        "access_keys": [
            {"name": "ingest", "description": "ingest key", "key": "ingest-secret-1", "active": True},
        ],
    }


@pytest.fixture
def user_token(client: TestClient, sample_user_data: Dict[str, Any]):
    """Create a user and return a function that yields a bearer header for it"""

    def _token(**overrides: Any) -> Dict[str, str]:
        data = {**sample_user_data, **overrides}
        assert client.post("/user", json=data).status_code == 200
        response = client.post("/authUser", json={"id": data["id"], "password": data["password"]})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _token
