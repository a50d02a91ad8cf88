"""Unit tests for auth/errors.py -- the auth failure taxonomy.

Covers:
- every failure kind maps to its HTTP status
- from_store_error() maps every store error kind to DBError and keeps the cause
- messages carry diagnostics (username) for logs
"""

import pytest

from auth.errors import (
    AuthError,
    BadHeaderCount,
    BadToken,
    DBError,
    MissingAuth,
    MissingToken,
    NoUser,
    Unspecified,
    WrongPassword,
    from_store_error,
)
from docstore.errors import BackendError, DocumentError, StoreError, UnknownStoreError


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (MissingAuth(), 401),
        (MissingToken(), 401),
        (WrongPassword("foo"), 401),
        (NoUser("foo"), 401),
        (BadToken(), 401),
        (BadHeaderCount(), 400),
        (DBError(BackendError("find_one", "users")), 503),
        (Unspecified(), 500),
    ],
)
def test_status_mapping(error: AuthError, status: int) -> None:
    assert error.status_code == status
    assert isinstance(error, AuthError)


def test_kinds_are_distinct() -> None:
    kinds = {cls.kind for cls in (MissingAuth, MissingToken, BadHeaderCount, NoUser, WrongPassword, BadToken, DBError)}
    assert len(kinds) == 7


def test_username_in_message() -> None:
    assert "foo" in str(NoUser("foo"))
    assert "foo" in str(WrongPassword("foo"))


@pytest.mark.parametrize(
    "store_error",
    [
        BackendError("find_one", "users", "connection refused"),
        DocumentError("insert_one", "users", "bad document"),
        UnknownStoreError("update_one", "users"),
        StoreError("find_one", "users"),
    ],
)
def test_from_store_error(store_error: StoreError) -> None:
    mapped = from_store_error(store_error)
    assert isinstance(mapped, DBError)
    assert mapped.cause is store_error
    assert mapped.__cause__ is store_error
    assert mapped.status_code == 503


def test_from_store_error_rejects_other_exceptions() -> None:
    with pytest.raises(TypeError):
        from_store_error(RuntimeError("nope"))
