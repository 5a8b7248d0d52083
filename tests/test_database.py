import pytest
from sqlalchemy.exc import OperationalError

from core.database import Database, commit
from core.exceptions import StoreUnavailableError
from utils.user_manager import UserManager

from conftest import PASSWORD, signup


class BrokenSession:
    def __init__(self):
        self.rolled_back = False

    def commit(self):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    def rollback(self):
        self.rolled_back = True


def test_commit_translates_operational_error():
    session = BrokenSession()
    with pytest.raises(StoreUnavailableError):
        commit(session)
    assert session.rolled_back


def test_unreachable_store(tmp_path):
    database = Database(f"sqlite:///{tmp_path}/missing/dir/app.db")
    with pytest.raises(StoreUnavailableError):
        database.init_db()
    database.dispose()


def test_sessions_share_in_memory_database(database):
    first = database.session()
    UserManager(first).create_account("Ann", "a@x.com", PASSWORD, "student")
    first.close()

    second = database.session()
    assert UserManager(second).get_by_email("a@x.com") is not None
    second.close()


def test_store_unavailable_maps_to_503(client, monkeypatch):
    signup(client, "student", email="a@x.com")

    def down(self, email, password):
        raise StoreUnavailableError("database is locked")

    monkeypatch.setattr(UserManager, "verify_password", down)
    response = client.post("/api/auth/login", json={"email": "a@x.com", "password": PASSWORD})
    assert response.status_code == 503


def test_raw_operational_error_maps_to_503(client, monkeypatch):
    def down(self, user_id):
        raise OperationalError("SELECT", {}, Exception("no such table"))

    monkeypatch.setattr(UserManager, "get_by_id", down)
    signup_response = client.post(
        "/api/auth/signup",
        json={"name": "Ann", "email": "a@x.com", "password": PASSWORD, "role": "teacher"},
    )
    assert signup_response.status_code == 201

    assert client.get("/api/auth/me").status_code == 503
