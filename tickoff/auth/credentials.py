"""Single-account sign-in credentials.

The app has exactly one configured account. Credentials are read from the
environment at call time so tests can override them with monkeypatch.
"""

import hmac
import os


def _configured() -> tuple:
    return (
        os.getenv("TICKOFF_USERNAME", "admin"),
        os.getenv("TICKOFF_PASSWORD", "admin"),
    )


def verify_credentials(username: str, password: str) -> bool:
    """Constant-time comparison against the configured username and password."""
    expected_user, expected_password = _configured()
    user_ok = hmac.compare_digest(username.encode("utf-8"), expected_user.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    return user_ok and password_ok
