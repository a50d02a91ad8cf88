"""
auth/session.py -- Session-token authentication and issuance.

A session token is an opaque random string stored on exactly one user
document. Whoever presents it is that user until it is replaced by a new
login or cleared by a password change. Tokens do not expire.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from auth.errors import BadToken, MissingToken, from_store_error
from auth.models import AuthOutcome, User
from auth.store import UserStore
from auth.tokens import generate_session_token
from core.config import get_settings
from docstore.errors import StoreError

logger = logging.getLogger("accountsvc.auth")


def authenticate_token(token: str | None, store: UserStore) -> AuthOutcome:
    """Resolve a session token back to the user holding it."""
    if not token:
        return AuthOutcome.failure(MissingToken())
    try:
        user = store.get_by_token(token)
    except StoreError as exc:
        return AuthOutcome.failure(from_store_error(exc))
    if user is None:
        return AuthOutcome.failure(BadToken())
    return AuthOutcome.success(user)


def start_session(store: UserStore, user: User) -> User:
    """Issue a fresh session token for an authenticated user and persist it.

    Replaces any previous token, so sessions started earlier stop working.
    Returns the user as it now stands in the store (new auth_token and
    last_login). StoreError propagates to the caller.
    """
    token = generate_session_token()
    while token == user.auth_token:
        token = generate_session_token()
    last_login = store.set_auth_token(user.id, token)
    logger.info("Session started for %s", user.username)
    return replace(user, auth_token=token, last_login=last_login)


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_session_cookie(response, token: str) -> None:
    """Write the session token as an httpOnly, path-scoped cookie.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="lax": not sent on cross-site POSTs.
    secure: only sent over HTTPS unless SECURE_COOKIES=false (local dev).
    No max_age: the token itself never expires, so neither does the cookie
    beyond the browser session.
    """
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        value=token,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )


def clear_session_cookie(response) -> None:
    settings = get_settings()
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
