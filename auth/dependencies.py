"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two independent auth methods, each chosen explicitly by the route:
  1. require_credentials() -- "Authorization: username:password" header.
     Used by POST /login and PATCH /self/password.
  2. require_session() -- session token cookie set by POST /login.
     Used by GET /self and PATCH /self.

Each helper runs its authenticator before the handler and returns the
resolved User as an ordinary handler argument. On failure it raises the
AuthError from the outcome; the exception handler in api/main.py logs the
detail and answers with the mapped status and a generic body.

Layer rule: no imports from api/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.credentials import authenticate_credentials
from auth.errors import Unspecified
from auth.models import User
from auth.session import authenticate_token
from auth.store import UserStore
from core.config import get_settings

logger = logging.getLogger("accountsvc.auth")


def get_user_store(request: Request) -> UserStore:
    """Return the UserStore wired into app.state by the lifespan.

    A missing store means the authenticator has nothing to check against;
    that is an infrastructure failure, not a client error.
    """
    store = getattr(request.app.state, "user_store", None)
    if store is None:
        logger.error("No user store configured on app.state; cannot authenticate %s", request.url.path)
        raise Unspecified()
    return store


def require_credentials(request: Request) -> User:
    """Require a valid username:password Authorization header.

    Use as a FastAPI dependency:
        @router.post("/login")
        def route(user: User = Depends(require_credentials)): ...
    """
    store = get_user_store(request)
    outcome = authenticate_credentials(request.headers.getlist("Authorization"), store)
    return outcome.unwrap()


def require_session(request: Request) -> User:
    """Require a valid session token cookie.

    Use as a FastAPI dependency:
        @router.get("/self")
        def route(user: User = Depends(require_session)): ...
    """
    store = get_user_store(request)
    token = request.cookies.get(get_settings().session_cookie_name)
    outcome = authenticate_token(token, store)
    return outcome.unwrap()
