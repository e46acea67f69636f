from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import MutableMapping, Optional

from passlib.context import CryptContext

from daypass.db import q, x
from daypass.errors import AuthError
from daypass.utils import iso_now, new_id

logger = logging.getLogger(__name__)

SESSION_KEY = "daypass_auth_session"
MIN_PASSWORD_LENGTH = 6

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    email: str
    signed_in_at: str


@dataclass(frozen=True)
class SignUpResult:
    user_id: str
    email: str
    redirect_target: Optional[str]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user_by_email(conn, email: str):
    rows = q(conn, "SELECT * FROM admin_users WHERE email=?", (_normalize_email(email),))
    return rows[0] if rows else None


def sign_up(
    conn,
    email: str,
    password: str,
    redirect_target: Optional[str] = None,
    *,
    allow_signup: bool = True,
) -> SignUpResult:
    if not allow_signup:
        raise AuthError("Sign-ups are disabled.")

    email = _normalize_email(email)
    if not _EMAIL_RE.match(email):
        raise AuthError("Enter a valid email address.")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters.")
    if get_user_by_email(conn, email) is not None:
        raise AuthError("User already registered.")

    user_id = new_id()
    x(
        conn,
        "INSERT INTO admin_users (id, email, hashed_password, redirect_target, created_at) VALUES (?, ?, ?, ?, ?)",
        (user_id, email, get_password_hash(password), redirect_target, iso_now()),
    )
    logger.info("Admin account created for %s", email)
    return SignUpResult(user_id=user_id, email=email, redirect_target=redirect_target)


def sign_in(conn, state: MutableMapping, email: str, password: str) -> AuthSession:
    """Check credentials and store the session in the caller's state (st.session_state)."""
    user = get_user_by_email(conn, email)
    if user is None or not verify_password(password or "", user["hashed_password"]):
        logger.info("Rejected sign-in for %s", _normalize_email(email))
        raise AuthError("Invalid login credentials.")

    session = AuthSession(user_id=str(user["id"]), email=str(user["email"]), signed_in_at=iso_now())
    state[SESSION_KEY] = session
    return session


def sign_out(state: MutableMapping) -> None:
    state.pop(SESSION_KEY, None)


def current_session(state: MutableMapping) -> Optional[AuthSession]:
    session = state.get(SESSION_KEY)
    return session if isinstance(session, AuthSession) else None
