"""
auth/store.py -- User repository over the document store.

Pattern: Repository + Data Mapper. UserStore is the repository;
_doc_to_user / _user_to_doc are the mappers between users-collection
documents and the User dataclass. Route and authenticator code never builds
document queries directly.

Errors: every method lets docstore.errors.StoreError propagate unchanged.
Authenticators turn it into auth.errors.DBError; routes let the app-level
handler answer 503/500.

Username uniqueness is an application rule, not a store constraint: signup
checks get_by_username() before create_user().

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from auth.models import User
from docstore.errors import DocumentError
from docstore.store import ID_FIELD, DocumentStore

USERS = "users"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records in the users collection.

    Usage:
        store = UserStore(DocumentStore())
        user = store.create_user(User(username="foo", email="foo@example.com", password_hash=h, salt=s))
        store.get_by_username("foo")
        store.close()
    """

    def __init__(self, documents: DocumentStore) -> None:
        self.documents = documents

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive)."""
        doc = self.documents.find_one(USERS, {"username": username})
        return _doc_to_user(doc) if doc is not None else None

    def get_by_token(self, token: str) -> User | None:
        """Look up the user currently holding session token."""
        doc = self.documents.find_one(USERS, {"auth_token": token})
        return _doc_to_user(doc) if doc is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        doc = self.documents.find_one(USERS, {ID_FIELD: user_id})
        return _doc_to_user(doc) if doc is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> User:
        """Insert a new user and return it with the id assigned by the store.

        Missing timestamps are stamped with the current time; a new account
        has created_at == updated_at == last_login.
        """
        now = _now_iso()
        user = replace(
            user,
            id=None,
            created_at=user.created_at or now,
            updated_at=user.updated_at or now,
            last_login=user.last_login or now,
        )
        doc = self.documents.insert_one(USERS, _user_to_doc(user))
        return _doc_to_user(doc)

    def set_auth_token(self, user_id: str, token: str) -> str:
        """Store token as the user's session token and stamp last_login.

        Unconditionally overwrites any previous token. Returns the timestamp
        written to last_login.
        """
        now = _now_iso()
        self.documents.update_one(
            USERS,
            {ID_FIELD: user_id},
            {"$set": {"auth_token": token, "last_login": now}},
        )
        return now

    def set_password(self, user_id: str, salt: str, password_hash: str) -> None:
        """Replace salt and hash and end the user's session."""
        self.documents.update_one(
            USERS,
            {ID_FIELD: user_id},
            {
                "$set": {"salt": salt, "password_hash": password_hash, "updated_at": _now_iso()},
                "$unset": {"auth_token": 1},
            },
        )

    def update_profile(self, user_id: str, **fields) -> None:
        """Update mutable profile fields. Accepted fields: email."""
        unknown = set(fields) - {"email"}
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)!r}")
        if not fields:
            return
        self.documents.update_one(
            USERS,
            {ID_FIELD: user_id},
            {"$set": {**fields, "updated_at": _now_iso()}},
        )

    def ping(self) -> bool:
        return self.documents.ping()

    def close(self) -> None:
        self.documents.close()


# ---------------------------------------------------------------------------
# Document mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _doc_to_user(doc: dict) -> User:
    try:
        return User(
            id=doc[ID_FIELD],
            username=doc["username"],
            email=doc.get("email", ""),
            password_hash=doc["password_hash"],
            salt=doc["salt"],
            auth_token=doc.get("auth_token"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            last_login=doc.get("last_login"),
        )
    except KeyError as exc:
        raise DocumentError("read", USERS, f"user document is missing field {exc}") from exc


def _user_to_doc(user: User) -> dict:
    doc = {
        "username": user.username,
        "email": user.email,
        "password_hash": user.password_hash,
        "salt": user.salt,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
        "last_login": user.last_login,
    }
    # Absent rather than null: a user with no session has no auth_token field.
    if user.auth_token is not None:
        doc["auth_token"] = user.auth_token
    return doc
