import pytest
from fastapi.testclient import TestClient

from auth import get_storage
from main import app
from seed import seed_storage
from storage import DBStorage, MemStorage


@pytest.fixture
def storage():
    store = MemStorage()
    seed_storage(store)
    return store


@pytest.fixture
def db_storage(tmp_path):
    store = DBStorage(f"sqlite:///{tmp_path / 'lab.db'}")
    store.create_tables()
    seed_storage(store)
    yield store
    store.engine.dispose()


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db_client(db_storage):
    app.dependency_overrides[get_storage] = lambda: db_storage
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(client, email="student@example.com", password="secret123"):
    client.post(
        "/auth/register",
        json={"email": email, "password": password, "full_name": "Test Student"},
    )
    response = client.post("/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)
