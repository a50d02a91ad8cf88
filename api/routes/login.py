"""
api/routes/login.py -- Password login.

Routes:
  POST /login -- "Authorization: username:password"; sets the session cookie

Security:
  Every failure goes through the AuthError handler, so a wrong password and
  an unknown username produce the same 401 body.
  Cache-Control: no-store on the success response, which carries the token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.models import UserBrief
from auth.dependencies import get_user_store, require_credentials
from auth.models import User
from auth.session import set_session_cookie, start_session
from auth.store import UserStore

router = APIRouter()


@router.post("/login", response_model=UserBrief)
def login(
    current_user: User = Depends(require_credentials),
    user_store: UserStore = Depends(get_user_store),
) -> JSONResponse:
    """Start a new session for the authenticated user.

    The new token replaces any previous one in the store, so a cookie from
    an earlier login stops working.
    """
    user = start_session(user_store, current_user)
    resp = JSONResponse(status_code=200, content=UserBrief.from_user(user).model_dump())
    set_session_cookie(resp, user.auth_token)
    resp.headers["Cache-Control"] = "no-store"
    return resp
