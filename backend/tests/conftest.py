"""
Shared pytest fixtures.

The environment is pointed at an in-memory SQLite database (and a cheap
bcrypt cost) before anything from app is imported, so the module-level
engine and settings pick these values up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.main import app


@pytest.fixture(autouse=True)
def reset_database():
    """Fresh tables for every test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(reset_database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(reset_database):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register_user(client):
    """Register through the API and return the parsed response body"""

    def _register(email="alice@example.com", name="Alice", password="password123"):
        response = client.post(
            "/users/register",
            json={"email": email, "name": name, "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers():
    def _headers(token):
        return {"Authorization": f"Bearer {token}"}

    return _headers
