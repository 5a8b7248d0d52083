from datetime import datetime, timedelta

import pytest
import pytz

from core.exceptions import InvalidOrExpiredTokenError, WeakPasswordError
from models.user import UserModel
from utils.password_reset_manager import PasswordResetManager, hash_token
from utils.session_manager import SessionManager
from utils.user_manager import UserManager

from conftest import PASSWORD


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 3, 1, 8, 0, tzinfo=pytz.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resets(db, clock):
    return PasswordResetManager(db, clock=clock)


@pytest.fixture
def account(make_account):
    return make_account(email="a@x.com")


def _snapshot(db):
    db.expire_all()
    return sorted(
        (m.user_id, m.password_hash, m.password_reset_token, m.password_reset_expires, m.updated_at)
        for m in db.query(UserModel).all()
    )


def test_unknown_email_mutates_nothing(resets, db, account):
    before = _snapshot(db)
    assert resets.request_reset("unknown@x.com") is None
    assert _snapshot(db) == before


def test_request_stores_digest_and_expiry(resets, users, account, clock):
    token = resets.request_reset("a@x.com")

    stored = users.get_by_id(account.user_id)
    assert len(token) == 64
    assert stored.password_reset_token == hash_token(token)
    assert stored.password_reset_token != token
    assert datetime.fromisoformat(stored.password_reset_expires) == clock.now + timedelta(hours=24)


def test_token_valid_until_expiry(resets, account, clock):
    token = resets.request_reset("a@x.com")
    issued = clock.now

    clock.now = issued + timedelta(hours=24) - timedelta(microseconds=1)
    assert resets.validate_token(token) is True

    clock.now = issued + timedelta(hours=24)
    assert resets.validate_token(token) is False

    clock.now = issued + timedelta(hours=25)
    assert resets.validate_token(token) is False


@pytest.mark.parametrize("token", ["", "deadbeef", "0" * 64])
def test_unknown_tokens_are_invalid(resets, account, token):
    resets.request_reset("a@x.com")
    assert resets.validate_token(token) is False


def test_consume_replaces_password_and_clears_token(resets, users, account):
    token = resets.request_reset("a@x.com")

    user = resets.consume_token(token, "brandnewpass")

    assert user.password_reset_token is None
    assert user.password_reset_expires is None
    assert users.verify_password("a@x.com", "brandnewpass") is not None
    assert users.verify_password("a@x.com", PASSWORD) is None


def test_reuse_is_rejected(resets, users, account):
    token = resets.request_reset("a@x.com")
    resets.consume_token(token, "brandnewpass")

    with pytest.raises(InvalidOrExpiredTokenError):
        resets.consume_token(token, "anotherpass1")
    assert resets.validate_token(token) is False
    assert users.verify_password("a@x.com", "brandnewpass") is not None


def test_expired_token_cannot_be_consumed(resets, users, account, clock):
    token = resets.request_reset("a@x.com")
    clock.now += timedelta(hours=24)

    with pytest.raises(InvalidOrExpiredTokenError):
        resets.consume_token(token, "brandnewpass")
    assert users.verify_password("a@x.com", PASSWORD) is not None


def test_weak_password_leaves_hash_unchanged(resets, users, account):
    token = resets.request_reset("a@x.com")
    before = users.get_by_id(account.user_id)

    with pytest.raises(WeakPasswordError):
        resets.consume_token(token, "short")

    after = users.get_by_id(account.user_id)
    assert after.password_hash == before.password_hash
    assert resets.validate_token(token) is True


def test_invalid_token_checked_before_strength(resets, account):
    with pytest.raises(InvalidOrExpiredTokenError):
        resets.consume_token("nope", "short")


def test_new_request_replaces_old_token(resets, account):
    first = resets.request_reset("a@x.com")
    second = resets.request_reset("a@x.com")

    assert resets.validate_token(first) is False
    assert resets.validate_token(second) is True


def test_consume_ends_all_sessions(resets, db, account):
    sessions = SessionManager(db)
    sessions.create_session(account.user_id)
    sessions.create_session(account.user_id)
    token = resets.request_reset("a@x.com")

    resets.consume_token(token, "brandnewpass")

    assert sessions.destroy_all_for_user(account.user_id) == 0


def test_lost_race_is_invalid(resets, account, monkeypatch):
    token = resets.request_reset("a@x.com")
    # Another request consumes the token between validation and update
    monkeypatch.setattr(UserManager, "complete_password_reset", lambda *args: False)

    with pytest.raises(InvalidOrExpiredTokenError):
        resets.consume_token(token, "brandnewpass")
