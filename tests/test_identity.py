"""Tests for the identity signal and bearer tokens."""

import pytest

from tickoff.auth.credentials import verify_credentials
from tickoff.auth.identity import IdentityProvider
from tickoff.auth.jwt import create_access_token, get_user_id_from_token


def test_subscribers_see_sign_in_and_sign_out():
    provider = IdentityProvider()
    seen = []
    provider.subscribe(seen.append)

    provider.sign_in("user-1")
    provider.sign_in("user-1")
    provider.sign_out()

    assert seen == ["user-1", None]
    assert provider.current is None


def test_unsubscribe_stops_notifications():
    provider = IdentityProvider("user-1")
    seen = []
    unsubscribe = provider.subscribe(seen.append)

    unsubscribe()
    provider.sign_out()

    assert seen == []


def test_sign_in_requires_user_id():
    with pytest.raises(ValueError):
        IdentityProvider().sign_in("")


def test_token_round_trip():
    token = create_access_token("user-1")

    assert get_user_id_from_token(token) == "user-1"
    assert get_user_id_from_token("not-a-token") is None


def test_credentials_come_from_environment(monkeypatch):
    monkeypatch.setenv("TICKOFF_USERNAME", "sam")
    monkeypatch.setenv("TICKOFF_PASSWORD", "s3cret")

    assert verify_credentials("sam", "s3cret") is True
    assert verify_credentials("sam", "wrong") is False
    assert verify_credentials("admin", "admin") is False


def test_token_without_session_type_is_rejected():
    import jwt
    from tickoff.auth import jwt as tokens

    foreign = jwt.encode({"sub": "user-1"}, tokens.JWT_SECRET_KEY, algorithm=tokens.JWT_ALGORITHM)

    assert get_user_id_from_token(foreign) is None


def test_expired_token_is_rejected():
    from datetime import datetime, timedelta

    token = create_access_token("user-1", now=datetime.utcnow() - timedelta(days=30))

    assert get_user_id_from_token(token) is None
