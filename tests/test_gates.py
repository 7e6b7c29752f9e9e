"""
Auth gate and admin gate tests
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.security import decode_token
from conftest import bearer

ADMIN_ROUTES = [
    ("GET", "/api/reports/export"),
    ("GET", "/api/reports/some-id/download"),
    ("GET", "/api/admin/reports"),
    ("GET", "/api/admin/users"),
    ("POST", "/api/admin/generate-code"),
    ("GET", "/api/admin/codes"),
]


# ─── Auth gate ──────────────────────────────────────────────────────────────────
def test_missing_token_is_rejected(client):
    r = client.get("/api/reports")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert "message" in r.json()


def test_tampered_token_is_rejected(client):
    r = client.get("/api/reports", headers=bearer("eyJhbGciOiJIUzI1NiJ9.INVALID.SIGNATURE"))
    assert r.status_code == 401


def test_expired_token_is_rejected(client, user_token):
    claims = decode_token(user_token)
    claims["exp"] = datetime.now(timezone.utc) - timedelta(minutes=1)
    expired = jwt.encode(claims, "test-secret", algorithm="HS256")
    r = client.get("/api/reports", headers=bearer(expired))
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid or expired token"}


def test_token_signed_with_other_secret_is_rejected(client, user_token):
    forged = jwt.encode(decode_token(user_token), "not-the-secret", algorithm="HS256")
    assert client.get("/api/reports", headers=bearer(forged)).status_code == 401


def test_public_routes_need_no_token(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["dependencies"] == {"database": "ok"}
    assert client.get("/").json()["service"] == "field-reports"


# ─── Admin gate ─────────────────────────────────────────────────────────────────
@pytest.mark.parametrize("method,path", ADMIN_ROUTES)
def test_non_admin_is_forbidden(client, user_token, method, path):
    r = client.request(method, path, headers=bearer(user_token))
    assert r.status_code == 403
    assert r.json() == {"message": "Access denied. Admin only."}


@pytest.mark.parametrize("method,path", ADMIN_ROUTES)
def test_admin_routes_require_token(client, method, path):
    assert client.request(method, path).status_code == 401


def test_revoked_admin_flag_wins_over_token_claim(client, admin_token, sql):
    assert decode_token(admin_token)["is_admin"] is True
    assert client.get("/api/admin/users", headers=bearer(admin_token)).status_code == 200

    sql("UPDATE users SET is_admin = 0 WHERE email = ?", ("admin@example.org",))

    r = client.get("/api/admin/users", headers=bearer(admin_token))
    assert r.status_code == 403


def test_deleted_user_is_not_found(client, admin_token, sql):
    sql("DELETE FROM users WHERE email = ?", ("admin@example.org",))
    r = client.get("/api/admin/codes", headers=bearer(admin_token))
    assert r.status_code == 404
    assert r.json() == {"message": "User not found"}


def test_granted_admin_flag_applies_without_relogin(client, user_token, sql):
    assert decode_token(user_token)["is_admin"] is False
    sql("UPDATE users SET is_admin = 1 WHERE email = ?", ("agent@example.org",))
    assert client.get("/api/admin/users", headers=bearer(user_token)).status_code == 200
