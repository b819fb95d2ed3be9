from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from gym_dashboard.auth.login_state import is_login_fresh
from gym_dashboard.core.exceptions import AuthenticationError


def test_authenticate_ok(container):
    owner = container.auth_service.authenticate("admin", "admin123")
    assert owner.owner_id == 1
    assert owner.full_name == "Gym Owner"


@pytest.mark.parametrize("username, password", [("admin", "wrong"), ("nobody", "admin123"), ("", "")])
def test_authenticate_rejects_bad_credentials(container, username, password):
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate(username, password)


def test_login_freshness_window():
    now = datetime(2026, 3, 10, 12, 0)
    assert is_login_fresh((now - timedelta(hours=23)).isoformat(), now=now)
    assert not is_login_fresh((now - timedelta(hours=24)).isoformat(), now=now)
    assert not is_login_fresh(None, now=now)
    assert not is_login_fresh("not-a-date", now=now)


def test_login_and_me(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["ownerId"] == 1
    assert body["data"]["token"]

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.get_json()["data"]["username"] == "admin"
    assert me.get_json()["data"]["statsRefreshSeconds"] == 30


def test_wrong_password_is_401(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_requests_without_login_are_rejected(client):
    assert client.get("/api/members").status_code == 401
    assert client.get("/api/dashboard/statistics").status_code == 401


def test_expired_login_is_cleared(client):
    with client.session_transaction() as sess:
        sess["owner_id"] = 1
        sess["login_time"] = (datetime.now() - timedelta(hours=25)).isoformat()

    assert client.get("/api/auth/me").status_code == 401
    with client.session_transaction() as sess:
        assert "owner_id" not in sess


def test_bearer_token_fallback(app, client):
    token = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"}).get_json()["data"]["token"]
    client.post("/api/auth/logout")

    other = app.test_client()
    resp = other.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200

    resp = other.get("/api/auth/me", headers={"Authorization": "Bearer tampered"})
    assert resp.status_code == 401


def test_logout(logged_in):
    logged_in.post("/api/auth/logout")
    assert logged_in.get("/api/auth/me").status_code == 401
