"""Shared fixtures: an in-memory database, managers, and an API client."""

import itertools

import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.database import Database
from utils import user_manager as user_manager_module
from utils.user_manager import UserManager

PASSWORD = "longenough1"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    # Minimum cost keeps the suite fast; hashes are still real bcrypt
    monkeypatch.setattr(user_manager_module, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def database():
    database = Database("sqlite://")
    database.init_db()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def users(db):
    return UserManager(db)


@pytest.fixture
def make_account(users):
    counter = itertools.count(1)

    def _make(role="student", email=None, name="Test User", password=PASSWORD):
        email = email or f"{role}-{next(counter)}@x.com"
        return users.create_account(name=name, email=email, password=password, role=role)

    return _make


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def new_client(app, client):
    """Extra clients with their own cookie jars, sharing the running app."""

    def _new():
        return TestClient(app)

    return _new


def signup(client, role="student", email=None, name="Test User", password=PASSWORD):
    email = email or f"{role}@x.com"
    response = client.post(
        "/api/auth/signup",
        json={"name": name, "email": email, "password": password, "role": role},
    )
    assert response.status_code == 201, response.text
    return response.json()["user"]
