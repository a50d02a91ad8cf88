"""
auth/errors.py -- Closed taxonomy of authentication failures.

Every way an authentication attempt can fail is one AuthError subclass. Each
kind carries only what a server-side log needs (the attempted username, the
store failure) and never the cleartext password. Each kind maps to exactly one
HTTP status through status_code.

The message (str(err)) is for logs only. The HTTP boundary answers with a
generic body keyed on the status, so NoUser and WrongPassword look identical
to a client and usernames or database causes never leave the server.

from_store_error() is the single place where store failures become auth
failures.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from docstore.errors import BackendError, DocumentError, StoreError, UnknownStoreError


class AuthError(Exception):
    """Base class for authentication failures."""

    kind = "unspecified"
    status_code = 500
    message = "Authentication failed for an unspecified reason"

    def __init__(self) -> None:
        super().__init__(self.message)


class MissingAuth(AuthError):
    kind = "missing_auth"
    status_code = 401
    message = "No usable Authorization header was provided in the request"


class MissingToken(AuthError):
    kind = "missing_token"
    status_code = 401
    message = "No session token cookie was provided in the request"


class BadHeaderCount(AuthError):
    kind = "bad_header_count"
    status_code = 400
    message = "Multiple Authorization headers were found in the request"


class NoUser(AuthError):
    kind = "no_user"
    status_code = 401

    def __init__(self, username: str) -> None:
        self.username = username
        self.message = f"No user was found: {username}"
        super().__init__()


class WrongPassword(AuthError):
    kind = "wrong_password"
    status_code = 401

    def __init__(self, username: str) -> None:
        self.username = username
        self.message = f"An incorrect password was used for user: {username}"
        super().__init__()


class BadToken(AuthError):
    kind = "bad_token"
    status_code = 401
    message = "An invalid session token was provided in the request"


class DBError(AuthError):
    kind = "db_error"
    status_code = 503

    def __init__(self, cause: StoreError) -> None:
        self.cause = cause
        self.message = f"An issue occurred with the document store: {cause}"
        super().__init__()
        self.__cause__ = cause


class Unspecified(AuthError):
    """Authenticator infrastructure failed (e.g. no user store configured)."""


# ---------------------------------------------------------------------------
# Store error mapping
# ---------------------------------------------------------------------------

# Every StoreError kind fails the attempt the same way: the caller cannot tell
# a transient outage from a permanent one at this layer.
_STORE_ERROR_KINDS: dict[type[StoreError], type[DBError]] = {
    BackendError: DBError,
    DocumentError: DBError,
    UnknownStoreError: DBError,
    StoreError: DBError,
}


def from_store_error(exc: StoreError) -> DBError:
    """Map any StoreError to the DBError auth failure, keeping it as the cause."""
    for store_kind in type(exc).__mro__:
        auth_kind = _STORE_ERROR_KINDS.get(store_kind)
        if auth_kind is not None:
            return auth_kind(exc)
    raise TypeError(f"not a store error: {exc!r}")
