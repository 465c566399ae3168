from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    p = tmp_path / "data"
    p.mkdir(parents=True, exist_ok=True)
    return p


@pytest.fixture
def store_path(data_dir: Path) -> Path:
    return data_dir / "docs.json"


@pytest.fixture
def store(store_path: Path):
    from persistence.document_store import DocumentStore

    return DocumentStore(store_path)


@pytest.fixture
def settings(data_dir: Path):
    from settings import Settings

    return Settings(
        data_dir=data_dir,
        jwt_secret="test-secret",
        jwt_alg="HS256",
        token_ttl_seconds=3600,
        default_page_limit=30,
        debug_log_tokens=False,
        debug_log_requests=False,
    )


@pytest.fixture
def client(settings):
    """
    TestClient over a fresh app whose collections live under tmp_path.
    """
    from fastapi.testclient import TestClient

    import app as app_module

    with TestClient(app_module.create_app(settings)) as c:
        yield c


def register(client, *, email: str, password: str = "pw", first_name: str = "Ana", last_name: str = "Lima",
             admin: bool = False, token: str | None = None) -> dict:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    r = client.post(
        "/users",
        json={
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password": password,
            "isAdmin": admin,
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def login(client, email: str, password: str = "pw") -> str:
    r = client.post("/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_token(client) -> str:
    register(client, email="admin@example.com", first_name="Root", last_name="Admin", admin=True)
    return login(client, "admin@example.com")


@pytest.fixture
def user_token(client, admin_token) -> str:
    register(client, email="user@example.com", first_name="Ana", last_name="Lima")
    return login(client, "user@example.com")
