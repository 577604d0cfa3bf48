"""Tests for user endpoints"""
from fastapi.testclient import TestClient

from provision.api.deps import get_provisioner
from provision.main import app
from provision.provisioner import Provisioner
from provision.store.base import IDX_USER


def test_create_user(client: TestClient, store, sample_user_data: dict):
    response = client.post("/user", json=sample_user_data)
    assert response.status_code == 200
    assert response.json()["result"] == "created"

    stored = store.fetch(IDX_USER, "jdoe").document
    assert stored["password"] != sample_user_data["password"]
    assert stored["password"].startswith("$2")


def test_create_user_empty_password(client: TestClient, sample_user_data: dict):
    response = client.post("/user", json={**sample_user_data, "password": ""})
    assert response.status_code == 400
    assert response.json()["error"] == "MissingSecret"


def test_create_user_short_password(client: TestClient, sample_user_data: dict):
    response = client.post("/user", json={**sample_user_data, "password": "short"})
    assert response.status_code == 400
    assert response.json()["error"] == "WeakSecret"


def test_get_user_is_redacted(client: TestClient, sample_user_data: dict):
    client.post("/user", json=sample_user_data)

    response = client.get("/user/jdoe")
    assert response.status_code == 200
    data = response.json()
    assert data["password"] == "REDACTED"
    assert data["accounts"] == ["acct1"]


def test_get_user_not_found(client: TestClient):
    response = client.get("/user/nobody")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


def test_update_with_redacted_read_keeps_password(client: TestClient, store, sample_user_data: dict):
    client.post("/user", json=sample_user_data)
    digest = store.fetch(IDX_USER, "jdoe").document["password"]

    # read, edit, write back as returned
    user = client.get("/user/jdoe").json()
    user["display_name"] = "J. Doe"
    response = client.post("/user", json=user)
    assert response.status_code == 200
    assert response.json()["result"] == "updated"

    stored = store.fetch(IDX_USER, "jdoe").document
    assert stored["password"] == digest
    assert stored["display_name"] == "J. Doe"

    auth = client.post("/authUser", json={"id": "jdoe", "password": sample_user_data["password"]})
    assert auth.status_code == 200


def test_search_users_is_redacted(client: TestClient, sample_user_data: dict):
    client.post("/user", json=sample_user_data)
    client.post("/user", json={**sample_user_data, "id": "other", "accounts": ["acct2"]})

    response = client.post("/searchUsers", json={"query": {"term": {"accounts": "acct2"}}})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["hits"][0]["id"] == "other"
    assert data["hits"][0]["password"] == "REDACTED"


def test_search_users_unsupported_query(client: TestClient, sample_user_data: dict):
    client.post("/user", json=sample_user_data)
    response = client.post("/searchUsers", json={"query": {"wildcard": {"id": "j*"}}})
    assert response.status_code == 400


def test_auth_user(client: TestClient, sample_user_data: dict):
    client.post("/user", json=sample_user_data)

    response = client.post("/authUser", json={"id": "jdoe", "password": "longenoughpw"})
    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"]["id"] == "jdoe"
    assert data["user"]["password"] == "REDACTED"


def test_auth_user_raw_token(client: TestClient, sample_user_data: dict):
    client.post("/user", json=sample_user_data)

    response = client.post("/authUser?raw=true", json={"id": "jdoe", "password": "longenoughpw"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text.count(".") == 2


def test_auth_user_wrong_password(client: TestClient, sample_user_data: dict):
    client.post("/user", json=sample_user_data)

    response = client.post("/authUser", json={"id": "jdoe", "password": "wrongpassword"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials."


def test_auth_user_unknown(client: TestClient):
    response = client.post("/authUser", json={"id": "nobody", "password": "longenoughpw"})
    assert response.status_code == 401


def test_upsert_with_failing_store_is_not_written(broken_store, engine_config, sample_user_data: dict):
    app.dependency_overrides[get_provisioner] = lambda: Provisioner(engine_config, broken_store)
    try:
        with TestClient(app) as client:
            response = client.post("/user", json=sample_user_data)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["error"] == "BackingStoreError"
    assert broken_store.persisted == []
