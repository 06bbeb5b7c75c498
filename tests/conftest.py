import pytest
from fastapi.testclient import TestClient

from horizon_ijp.api import dependencies
from horizon_ijp.api.main import app
from horizon_ijp.store import DataStore, MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    """A data store seeded with the bundled fixtures."""
    data_store = DataStore(storage)
    data_store.initialize()
    return data_store


def _clear_singletons():
    dependencies.get_storage.cache_clear()
    dependencies.get_data_store.cache_clear()
    dependencies.get_session_store.cache_clear()


@pytest.fixture
def client(monkeypatch):
    """Test client over a fresh in-memory store and session registry."""
    monkeypatch.delenv("HORIZON_DB_PATH", raising=False)
    _clear_singletons()
    with TestClient(app) as test_client:
        yield test_client
    _clear_singletons()


def login(client, email, password="anything", remember_me=False):
    response = client.post(
        "/api/auth/login",
        json={"email": email, "password": password, "remember_me": remember_me},
    )
    assert response.status_code == 200, response.text
    return response.json()


EMPLOYEE_EMAIL = "priya.sharma@horizongroup.in"
INACTIVE_EMAIL = "rahul.verma@horizongroup.in"
HR_EMAIL = "kavya.iyer@horizongroup.in"
CHRO_EMAIL = "ananya.rao@horizongroup.in"
ADMIN_EMAIL = "sanjay.kapoor@horizongroup.in"
