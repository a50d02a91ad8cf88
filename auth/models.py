"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, almost no logic). Stores and
authenticators do the work; these classes own the shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from auth.errors import AuthError


@dataclass
class User:
    """An account as persisted in the users collection.

    id is assigned by the document store on insert and is None before that.
    password_hash is always hash_password(salt, <current password>); salt is
    regenerated on every password change. auth_token is present only while a
    session is active: set on login, cleared on password change.

    Timestamps are ISO 8601 UTC strings.
    """

    username: str
    email: str
    password_hash: str
    salt: str
    id: str | None = None
    auth_token: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    last_login: str | None = None


@dataclass(frozen=True)
class Credential:
    """A username/password pair parsed from one request. Never persisted."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class AuthOutcome:
    """Result of one authentication attempt: a resolved user or an AuthError.

    Exactly one of user and error is set. Build with success() / failure();
    the boundary calls unwrap() to get the user or raise the error.
    """

    user: User | None = None
    error: AuthError | None = None

    def __post_init__(self) -> None:
        if (self.user is None) == (self.error is None):
            raise ValueError("AuthOutcome needs exactly one of user or error")

    @classmethod
    def success(cls, user: User) -> AuthOutcome:
        return cls(user=user)

    @classmethod
    def failure(cls, error: AuthError) -> AuthOutcome:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.user is not None

    def unwrap(self) -> User:
        """Return the resolved user, or raise the failure."""
        if self.error is not None:
            raise self.error
        return self.user
