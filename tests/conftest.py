import os
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time, so point them at a throwaway database first
_TMP_DIR = Path(tempfile.mkdtemp(prefix="nextai-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["MAIL_ENABLED"] = "false"
os.environ["EXPOSE_VERIFICATION_CODES"] = "true"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SUPER_ADMIN_USERNAME"] = "root"
os.environ["SUPER_ADMIN_EMAIL"] = "root@example.com"
os.environ["SUPER_ADMIN_PASSWORD"] = "rootpassword"

from nextai import create_app  # noqa: E402
from nextai.db import SessionLocal, drop_db, init_db  # noqa: E402
from nextai.services import plan_service  # noqa: E402

PASSWORD = "password123"


@pytest.fixture
def app():
    drop_db()
    init_db()
    session = SessionLocal()
    try:
        plan_service.seed_plans(session)
        plan_service.seed_super_admin(session)
    finally:
        session.close()

    app = create_app(create_tables=False)
    app.config["TESTING"] = True
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db_session(app):
    session = SessionLocal()
    yield session
    session.close()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def signup(client, email="alice@example.com", username="alice", password=PASSWORD):
    return client.post("/api/auth/user/signup", json={
        "email": email,
        "username": username,
        "password": password,
        "confirmPassword": password,
    })


def register_user(client, email="alice@example.com", username="alice", password=PASSWORD) -> str:
    """Sign up, verify and sign in; returns the bearer token."""
    res = signup(client, email, username, password)
    assert res.status_code == 201, res.get_json()
    code = res.get_json()["data"]["verificationCode"]
    res = client.post("/api/auth/user/verify", json={"email": email, "code": code})
    assert res.status_code == 200, res.get_json()
    res = client.post("/api/auth/user/signin", json={"email": email, "password": password})
    assert res.status_code == 200, res.get_json()
    return res.get_json()["data"]["token"]


def signin_super_admin(client) -> str:
    res = client.post("/api/auth/admin/signin",
                      json={"email": "root@example.com", "password": "rootpassword"})
    assert res.status_code == 200, res.get_json()
    return res.get_json()["data"]["token"]
