import pytest
from fastapi.testclient import TestClient

from socialfeed.core.config import Settings
from socialfeed.db.init_db import create_all_tables, drop_all_tables
from socialfeed.db.session import Database
from socialfeed.main import create_app

API = "/api"
PASSWORD = "secret123"


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite://",
        "SECRET_KEY": "test-secret-key",
        "ENVIRONMENT": "development",
        "DEBUG": False,
        "RATE_LIMIT_ENABLED": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def settings():
    return make_settings()


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db_session():
    database = Database("sqlite://")
    engine = database.init()
    create_all_tables(engine)
    session = database.session()
    try:
        yield session
    finally:
        session.close()
        drop_all_tables(engine)
        database.dispose()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client, username: str, email: str = None, password: str = PASSWORD, name: str = None):
    """Register a user and return (token, user) from the response envelope."""
    payload = {
        "username": username,
        "email": email or f"{username}@example.com",
        "password": password,
    }
    if name is not None:
        payload["name"] = name
    response = client.post(f"{API}/auth/register", json=payload)
    assert response.status_code == 201, response.text
    body = response.json()
    return body["token"], body["data"]


def create_post(client, token: str, text: str, **extra) -> dict:
    response = client.post(f"{API}/posts", json={"text": text, **extra}, headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]
