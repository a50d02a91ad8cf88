"""
api/routes/accounts.py -- Signup and self-service account endpoints.

Routes:
  POST  /signup          -- create an account; 412 if the username is taken
  GET   /self            -- current user (session cookie)
  PATCH /self            -- update email (session cookie)
  PATCH /self/password   -- change password (Authorization header); ends the session

Security:
  Responses only ever carry UserBrief -- never password_hash or salt.
  A password change needs the current password, not just the session cookie,
  and clears the stored session token so every existing cookie stops working.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from api.models import PasswordChange, ProfileUpdate, SignupRequest, UserBrief
from auth.dependencies import get_user_store, require_credentials, require_session
from auth.models import User
from auth.session import clear_session_cookie
from auth.store import UserStore
from auth.tokens import generate_salt, hash_password

logger = logging.getLogger("accountsvc.api")

# Auth policy:
# - POST  /signup:          public
# - GET   /self:            requires session cookie (require_session)
# - PATCH /self:            requires session cookie (require_session)
# - PATCH /self/password:   requires username:password header (require_credentials)
router = APIRouter()


@router.post("/signup", response_model=UserBrief)
def signup(body: SignupRequest, user_store: UserStore = Depends(get_user_store)) -> UserBrief:
    """Create an account with a fresh salt and return its public view.

    The username check and the insert are two store round-trips; two
    concurrent signups for the same name can both succeed. Uniqueness is an
    application rule, not a store constraint.
    """
    if user_store.get_by_username(body.username) is not None:
        raise HTTPException(
            status_code=412,
            detail={"code": "username_taken", "message": "That username is already taken."},
        )

    salt = generate_salt()
    created = user_store.create_user(
        User(
            username=body.username,
            email=body.email,
            password_hash=hash_password(salt, body.password),
            salt=salt,
        )
    )
    logger.info("Account created for %s", created.username)
    return UserBrief.from_user(created)


@router.get("/self", response_model=UserBrief)
def read_self(current_user: User = Depends(require_session)) -> UserBrief:
    """Return the account that owns the session cookie."""
    return UserBrief.from_user(current_user)


@router.patch("/self", response_model=UserBrief)
def update_self(
    body: ProfileUpdate,
    current_user: User = Depends(require_session),
    user_store: UserStore = Depends(get_user_store),
) -> UserBrief:
    """Update the caller's profile fields and return the refreshed record."""
    updates = body.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(
            status_code=400,
            detail={"code": "no_changes", "message": "No fields to update."},
        )
    user_store.update_profile(current_user.id, **updates)
    return _fetch_brief(user_store, current_user.id)


@router.patch("/self/password", response_model=UserBrief)
def change_password(
    body: PasswordChange,
    response: Response,
    current_user: User = Depends(require_credentials),
    user_store: UserStore = Depends(get_user_store),
) -> UserBrief:
    """Set a new password under a new salt and end the current session."""
    salt = generate_salt()
    user_store.set_password(current_user.id, salt, hash_password(salt, body.password))
    clear_session_cookie(response)
    logger.info("Password changed for %s", current_user.username)
    return _fetch_brief(user_store, current_user.id)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fetch_brief(user_store: UserStore, user_id: str) -> UserBrief:
    user = user_store.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    return UserBrief.from_user(user)
