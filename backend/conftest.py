"""Pytest configuration. Puts backend/ on sys.path and wires the app to an in-memory SQLite database."""
import os
import sys
import tempfile
from pathlib import Path

_backend: Path = Path(__file__).resolve().parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

# Settings are read at import time, so these must be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret-0123456789abcdef0123456789abcdef"
os.environ["API_KEY_ENCRYPTION_SECRET"] = "test-encryption-secret"
os.environ["OPENROUTER_FALLBACK_KEY"] = ""
# Keep test runs from writing log/app.log into the project tree
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="canvas-ide-test-logs-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models  # noqa: F401, E402
from database import Base, get_db  # noqa: E402
from ai.model_cache import model_cache  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture()
def db_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def client(db_session_factory):
    def _get_test_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    model_cache.clear()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        model_cache.clear()


def register(client: TestClient, email: str = "alice@example.com", password: str = "s3cret-pass", **extra) -> dict:
    response = client.post("/api/auth/register", json={"email": email, "password": password, **extra})
    assert response.status_code == 200, response.text
    return response.json()


def bearer(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture()
def auth_headers(client) -> dict:
    return bearer(register(client)["accessToken"])


@pytest.fixture()
def project_id(client, auth_headers) -> str:
    response = client.post("/api/projects", json={"name": "Demo"}, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]
