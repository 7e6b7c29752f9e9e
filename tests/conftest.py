"""
Shared fixtures: every test gets a fresh app bound to its own SQLite file and
upload directory.
"""
import os
import sqlite3
import tempfile

# Importing app.main builds the module-level app; keep it away from the repo tree.
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="field-reports-"))
os.environ.setdefault("METRICS_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings

BOOTSTRAP_SECRET = "bootstrap-secret"
PASSWORD = "TestPass123!"


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "reports.db"


@pytest.fixture
def settings_env(monkeypatch, db_path, upload_dir):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    monkeypatch.setenv("UPLOAD_DIR", str(upload_dir))
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret")
    monkeypatch.setenv("ADMIN_REGISTRATION_CODE", BOOTSTRAP_SECRET)
    monkeypatch.setenv("METRICS_ENABLED", "false")
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def client(settings_env):
    from app.main import create_app

    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def sql(db_path):
    """Run a raw statement against the test database, bypassing the API."""
    def run(statement: str, params: tuple = ()):
        conn = sqlite3.connect(db_path)
        try:
            rows = conn.execute(statement, params).fetchall()
            conn.commit()
            return rows
        finally:
            conn.close()
    return run


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str, name: str = "Field Agent") -> str:
    r = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": PASSWORD},
    )
    assert r.status_code == 201, r.text
    return r.json()["token"]


def register_admin(client: TestClient, email: str, name: str = "Admin", admin_code: str | None = None):
    body = {"name": name, "email": email, "password": PASSWORD}
    if admin_code is not None:
        body["adminCode"] = admin_code
    return client.post("/api/auth/admin/register", json=body)


@pytest.fixture
def admin_token(client):
    r = register_admin(client, "admin@example.org")
    assert r.status_code == 201, r.text
    assert r.json()["isAdmin"] is True
    return r.json()["token"]


@pytest.fixture
def user_token(client):
    return register(client, "agent@example.org")
