"""
Shared fixtures for the pickup tracker tests.

Environment overrides are applied before the package is imported so module
level configuration (bcrypt rounds, signing secret) picks them up.
"""

from __future__ import annotations

import os

os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["ADMIN_REGISTRATION_TOKEN"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from pickup_tracker.app import create_app  # noqa: E402
from pickup_tracker.config import ServiceSettings  # noqa: E402
from pickup_tracker.core.database import Database  # noqa: E402


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def database(database_url):
    db = Database(database_url)
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_client(database_url):
    """Build a TestClient for an app with the given setting overrides."""
    clients = []

    def _make(**overrides) -> TestClient:
        settings = ServiceSettings(database_url=database_url, **overrides)
        client = TestClient(create_app(settings))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client(require_auth=True)


@pytest.fixture
def anon_client(make_client):
    return make_client(require_auth=False)


def register(client: TestClient, name: str, email: str, password: str = "pw1", role: str | None = None):
    body = {"name": name, "email": email, "password": password}
    if role:
        body["role"] = role
    return client.post("/api/users/register", json=body)


def login_headers(client: TestClient, email: str, password: str = "pw1") -> dict:
    resp = client.post("/api/users/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def user_headers(client):
    register(client, "Al", "al@x.com")
    return login_headers(client, "al@x.com")


@pytest.fixture
def admin_headers(client):
    register(client, "Root", "root@x.com", role="admin")
    return login_headers(client, "root@x.com")
