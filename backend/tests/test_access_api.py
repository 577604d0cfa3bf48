"""Tests for the access check endpoints"""
from fastapi.testclient import TestClient


def test_user_has_access(client: TestClient, user_token):
    headers = user_token()
    response = client.post("/userHasAccess", json={"accounts": ["acct1"], "sections": ["s1"]}, headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] is True
    assert data["access_check"] == {"accounts": ["acct1"], "sections": ["s1"]}


def test_user_missing_section_is_denied(client: TestClient, user_token):
    headers = user_token()
    response = client.post("/userHasAccess", json={"accounts": ["acct1"], "sections": ["s1", "s2"]}, headers=headers)
    assert response.status_code == 401
    assert response.json()["status"] is False


def test_user_has_admin_access(client: TestClient, user_token):
    headers = user_token(admin_accounts=["acct1", "acct2"])

    single = client.post("/userHasAdminAccess", json={"accounts": ["acct2"]}, headers=headers)
    assert single.status_code == 200
    assert single.json()["status"] is True

    several = client.post("/userHasAdminAccess", json={"accounts": ["acct1", "acct2"]}, headers=headers)
    assert several.status_code == 401
    assert several.json()["status"] is False


def test_sysop_has_access(client: TestClient, user_token):
    headers = user_token(sysop=True, accounts=[], sections=[])
    response = client.post("/userHasAdminAccess", json={"accounts": ["any1", "any2"]}, headers=headers)
    assert response.status_code == 200


def test_access_check_requires_token(client: TestClient):
    response = client.post("/userHasAccess", json={"accounts": []})
    assert response.status_code == 401
    assert response.json()["error"] == "InvalidClaims"


def test_access_check_rejects_bad_token(client: TestClient):
    response = client.post("/userHasAccess", json={}, headers={"Authorization": "Bearer not.a.token"})
    assert response.status_code == 401
    assert response.json()["error"] == "InvalidClaims"


def test_inactive_user_token_is_rejected(client: TestClient, user_token):
    headers = user_token(active=False, sysop=True)
    response = client.post("/userHasAccess", json={}, headers=headers)
    assert response.status_code == 401
    assert response.json()["error"] == "InvalidClaims"
