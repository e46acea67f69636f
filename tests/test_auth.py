from __future__ import annotations

import pytest

from daypass.errors import AuthError
from daypass.services.auth import (
    SESSION_KEY,
    current_session,
    get_user_by_email,
    sign_in,
    sign_out,
    sign_up,
)


def test_sign_up_then_sign_in(conn):
    created = sign_up(conn, "Admin@Example.com ", "secret123", redirect_target="/admin")
    assert created.email == "admin@example.com"
    assert created.redirect_target == "/admin"

    state = {}
    session = sign_in(conn, state, "admin@example.com", "secret123")
    assert session.email == "admin@example.com"
    assert current_session(state) == session


def test_password_is_hashed(conn):
    sign_up(conn, "a@example.com", "secret123")
    stored = get_user_by_email(conn, "a@example.com")["hashed_password"]
    assert stored != "secret123"
    assert stored.startswith("$pbkdf2-sha256$")


@pytest.mark.parametrize(
    "email, password",
    [("not-an-email", "secret123"), ("", "secret123"), ("a@example.com", "short")],
)
def test_sign_up_rejects_bad_input(conn, email, password):
    with pytest.raises(AuthError):
        sign_up(conn, email, password)


def test_duplicate_sign_up(conn):
    sign_up(conn, "a@example.com", "secret123")
    with pytest.raises(AuthError):
        sign_up(conn, "A@example.com", "another123")


def test_sign_up_disabled(conn):
    with pytest.raises(AuthError):
        sign_up(conn, "a@example.com", "secret123", allow_signup=False)
    assert get_user_by_email(conn, "a@example.com") is None


@pytest.mark.parametrize("email, password", [("a@example.com", "wrong-pass"), ("b@example.com", "secret123")])
def test_bad_credentials(conn, email, password):
    sign_up(conn, "a@example.com", "secret123")
    state = {}
    with pytest.raises(AuthError):
        sign_in(conn, state, email, password)
    assert current_session(state) is None


def test_sign_out_clears_session(conn):
    sign_up(conn, "a@example.com", "secret123")
    state = {}
    sign_in(conn, state, "a@example.com", "secret123")
    sign_out(state)
    assert current_session(state) is None
    # Signing out twice is harmless.
    sign_out(state)


def test_foreign_value_in_state_is_not_a_session():
    assert current_session({SESSION_KEY: "admin"}) is None
