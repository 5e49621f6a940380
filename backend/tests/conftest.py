import pytest
from fastapi.testclient import TestClient

from harmwatch.core.config import settings
from harmwatch.db import session as session_mod
from harmwatch.db.repository import user_repository
from harmwatch.db.store import JsonStore
from harmwatch.main import app


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    # minimum bcrypt cost keeps the suite fast
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest.fixture()
def store(tmp_path):
    s = JsonStore(tmp_path / "data")
    s.bootstrap()
    return s


@pytest.fixture()
def client(monkeypatch, store):
    # every test gets its own data directory
    monkeypatch.setattr(session_mod, "store", store)

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register_user(client, store):
    """Register through the API; returns (user dict, auth headers)."""

    def _register(username: str, email: str, password: str = "s3cret-pass", role: str = "viewer"):
        r = client.post("/auth/register", json={"username": username, "email": email, "password": password})
        assert r.status_code == 201, r.text
        data = r.json()["data"]
        if role != "viewer":
            user_repository(store).update(data["user"]["id"], lambda u: setattr(u, "role", role))
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register
