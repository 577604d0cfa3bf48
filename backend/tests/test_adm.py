"""Tests for the parent-scoped /adm endpoints"""
import pytest
from fastapi.testclient import TestClient

from provision.store.base import IDX_ACCOUNT, IDX_ASSET


@pytest.fixture
def family(client: TestClient):
    """P1 with child C1, P2 with child C2, all created through the API"""
    client.post("/account", json={"id": "P1", "active": True})
    client.post("/account", json={"id": "P2", "active": True})
    assert client.post("/adm/P1/account", json={"id": "C1", "active": True}).status_code == 200
    assert client.post("/adm/P2/account", json={"id": "C2", "active": True}).status_code == 200


def test_child_upsert_forces_parent(client: TestClient, store, family):
    assert store.fetch(IDX_ACCOUNT, "C1").document["parent"] == "P1"

    # a parent in the body is ignored
    client.post("/adm/P1/account", json={"id": "C3", "parent": "P2"})
    assert store.fetch(IDX_ACCOUNT, "C3").document["parent"] == "P1"


def test_child_upsert_foreign_child_is_rejected(client: TestClient, store, family):
    response = client.post("/adm/P2/account", json={"id": "C1", "display_name": "hijack"})
    assert response.status_code == 403
    assert response.json()["error"] == "HierarchyViolation"
    assert store.fetch(IDX_ACCOUNT, "C1").document["display_name"] == ""


def test_child_upsert_cannot_adopt_top_level(client: TestClient, family):
    response = client.post("/adm/P1/account", json={"id": "P2"})
    assert response.status_code == 403


def test_child_upsert_merges_keys(client: TestClient, store, family):
    data = {"id": "C1", "access_keys": [{"name": "k", "key": "child-secret-1", "active": True}]}
    assert client.post("/adm/P1/account", json=data).status_code == 200
    digest = store.fetch(IDX_ACCOUNT, "C1").document["access_keys"][0]["key"]

    data["access_keys"][0]["key"] = "REDACTED"
    assert client.post("/adm/P1/account", json=data).status_code == 200
    assert store.fetch(IDX_ACCOUNT, "C1").document["access_keys"][0]["key"] == digest


def test_get_adm_account(client: TestClient, family):
    assert client.get("/adm/P1/account/P1").status_code == 200
    assert client.get("/adm/P1/account/C1").status_code == 200

    response = client.get("/adm/P1/account/C2")
    assert response.status_code == 403
    assert response.json()["error"] == "AccountAccessDenied"

    assert client.get("/adm/P1/account/ghost").status_code == 404


def test_get_adm_account_is_redacted(client: TestClient, family):
    client.post("/adm/P1/account", json={"id": "C1", "access_keys": [{"name": "k", "key": "child-secret-1"}]})
    response = client.get("/adm/P1/account/C1")
    assert response.json()["access_keys"][0]["key"] == "REDACTED"


def test_children(client: TestClient, family):
    client.post("/adm/P1/account", json={"id": "C3"})

    response = client.get("/adm/P1/children")
    assert response.status_code == 200
    assert sorted(account["id"] for account in response.json()) == ["C1", "C3"]


def test_adm_assets(client: TestClient, family):
    client.post("/asset", json={"id": "s1", "routes": [{"account_id": "C1"}]})
    client.post("/asset", json={"id": "s2", "routes": [{"account_id": "C2"}]})

    response = client.get("/adm/P1/assets/C1")
    assert response.status_code == 200
    assert [asset["id"] for asset in response.json()] == ["s1"]

    assert client.get("/adm/P1/assets/C2").status_code == 403


def test_asset_assoc(client: TestClient, store, family):
    client.post("/adm/P1/account", json={"id": "T1"})
    client.post("/asset", json={
        "id": "s1",
        "routes": [{"account_id": "C1", "model_id": "m1"}, {"account_id": "X", "model_id": "m2"}],
    })

    response = client.post("/adm/P1/assetAssoc", json={
        "asset_id": "s1", "from_account_id": "C1", "to_account_id": "T1",
    })
    assert response.status_code == 200
    assert response.json()["routes_updated"] == 1

    routes = store.fetch(IDX_ASSET, "s1").document["routes"]
    assert routes == [
        {"account_id": "T1", "model_id": "m1", "type": ""},
        {"account_id": "X", "model_id": "m2", "type": ""},
    ]

    # nothing routed to C1 any more
    response = client.post("/adm/P1/assetAssoc", json={
        "asset_id": "s1", "from_account_id": "C1", "to_account_id": "T1",
    })
    assert response.status_code == 404
    assert response.json()["error"] == "NoAssociation"


def test_asset_assoc_outside_hierarchy(client: TestClient, store, family):
    client.post("/asset", json={"id": "s1", "routes": [{"account_id": "C1"}]})

    response = client.post("/adm/P1/assetAssoc", json={
        "asset_id": "s1", "from_account_id": "C1", "to_account_id": "C2",
    })
    assert response.status_code == 403
    assert store.fetch(IDX_ASSET, "s1").document["routes"][0]["account_id"] == "C1"


def test_asset_assoc_unknown_asset(client: TestClient, family):
    response = client.post("/adm/P1/assetAssoc", json={
        "asset_id": "ghost", "from_account_id": "C1", "to_account_id": "P1",
    })
    assert response.status_code == 404
