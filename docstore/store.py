"""
docstore/store.py -- SQLAlchemy-backed document store.

A tiny document-database adapter: named collections of JSON documents with
find_one / insert_one / update_one over equality queries and $set / $unset
updates. Everything above this module (auth/store.py, the routes) speaks in
plain dicts and never touches SQL.

Uses SQLAlchemy Core (not ORM) with a single table. Every document is one row;
the collection name is a column and the document body is a JSON column, so
swapping SQLite for PostgreSQL is a connection string change, not a rewrite.

Security: all queries use bound parameters. Query keys are validated before
they reach a JSON path expression.

Failures: every SQLAlchemy exception is logged with full detail and re-raised
as a docstore.errors.StoreError subclass with the original chained. There are
no retries at this layer.

Usage:
    store = DocumentStore()                               # SQLite default
    store = DocumentStore("postgresql://user:pw@host/db") # PostgreSQL
    doc = store.insert_one("users", {"username": "foo"})
    store.find_one("users", {"username": "foo"})
    store.update_one("users", {"_id": doc["_id"]}, {"$set": {"email": "foo@example.com"}})
    store.close()

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, MetaData, String, Table, create_engine, event, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import get_settings
from docstore.errors import BackendError, DocumentError, StoreError, UnknownStoreError

logger = logging.getLogger("accountsvc.store")

ID_FIELD = "_id"

_UPDATE_OPERATORS = {"$set", "$unset"}

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_documents = Table(
    "documents",
    _metadata,
    Column("id", String(32), primary_key=True),
    Column("collection", String(64), nullable=False, index=True),
    Column("body", JSON, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_field(name: Any, operation: str, collection: str) -> str:
    if not isinstance(name, str) or not name or name.startswith("$") or '"' in name:
        raise DocumentError(operation, collection, f"invalid field name {name!r}")
    return name


def _encode(document: dict, operation: str, collection: str) -> dict:
    """Return a JSON-safe copy of document or raise DocumentError."""
    if not isinstance(document, dict):
        raise DocumentError(operation, collection, f"expected a dict, got {type(document).__name__}")
    try:
        return json.loads(json.dumps(document))
    except (TypeError, ValueError) as exc:
        raise DocumentError(operation, collection, f"document is not JSON-serializable: {exc}") from exc


def _check_update(update: dict, collection: str) -> None:
    if not isinstance(update, dict) or not update:
        raise DocumentError("update_one", collection, "update must be a non-empty dict")
    unknown = set(update) - _UPDATE_OPERATORS
    if unknown:
        raise DocumentError("update_one", collection, f"unsupported update operators {sorted(unknown)!r}")
    for op, fields in update.items():
        if not isinstance(fields, dict):
            raise DocumentError("update_one", collection, f"{op} expects a dict of fields")
        for name in fields:
            _check_field(name, "update_one", collection)
            if name == ID_FIELD:
                raise DocumentError("update_one", collection, "_id is immutable")


def _apply_update(body: dict, update: dict) -> dict:
    result = dict(body)
    result.update(update.get("$set", {}))
    for name in update.get("$unset", {}):
        result.pop(name, None)
    return result


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class DocumentStore:
    """Collections of JSON documents addressed by equality queries.

    Query semantics: every key in the query must equal the document's field.
    "_id" matches the document id. A value of None matches a document where
    the field is missing or null. Only string and None values are supported.
    """

    def __init__(self, db_url: str | None = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        try:
            _metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise _backend_error("create_all", "*", exc) from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def find_one(self, collection: str, query: dict) -> dict | None:
        """Return the first document in collection matching query, or None."""
        conditions = self._conditions(collection, query, "find_one")
        stmt = select(_documents.c.id, _documents.c.body).where(*conditions).order_by(_documents.c.created_at).limit(1)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).fetchone()
        except SQLAlchemyError as exc:
            raise _backend_error("find_one", collection, exc) from exc
        if row is None:
            return None
        return _row_to_document(row, "find_one", collection)

    def insert_one(self, collection: str, document: dict) -> dict:
        """Insert document and return a copy carrying its assigned "_id"."""
        body = _encode(document, "insert_one", collection)
        doc_id = body.pop(ID_FIELD, None) or uuid.uuid4().hex
        if not isinstance(doc_id, str):
            raise DocumentError("insert_one", collection, "_id must be a string")
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    _documents.insert().values(
                        id=doc_id,
                        collection=collection,
                        body=body,
                        created_at=_now_iso(),
                    )
                )
        except SQLAlchemyError as exc:
            raise _backend_error("insert_one", collection, exc) from exc
        return {ID_FIELD: doc_id, **body}

    def update_one(self, collection: str, query: dict, update: dict) -> None:
        """Apply a $set / $unset update to the first document matching query.

        No match is a no-op. The read and the write share one transaction;
        concurrent updates to the same document are last-write-wins.
        """
        conditions = self._conditions(collection, query, "update_one")
        _check_update(update, collection)
        update = _encode(update, "update_one", collection)
        stmt = select(_documents.c.id, _documents.c.body).where(*conditions).order_by(_documents.c.created_at).limit(1)
        try:
            with self.engine.begin() as conn:
                row = conn.execute(stmt).fetchone()
                if row is None:
                    return
                if not isinstance(row.body, dict):
                    raise _unknown_error("update_one", collection, f"document {row.id} has a non-object body")
                conn.execute(
                    _documents.update().where(_documents.c.id == row.id).values(body=_apply_update(row.body, update))
                )
        except SQLAlchemyError as exc:
            raise _backend_error("update_one", collection, exc) from exc

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.warning("Document store ping failed: %s", exc)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------

    def _conditions(self, collection: str, query: dict, operation: str) -> list:
        if not isinstance(query, dict):
            raise DocumentError(operation, collection, "query must be a dict")
        conditions = [_documents.c.collection == collection]
        for name, value in query.items():
            _check_field(name, operation, collection)
            if value is not None and not isinstance(value, str):
                raise DocumentError(operation, collection, f"unsupported query value for {name!r}")
            if name == ID_FIELD:
                conditions.append(_documents.c.id == value)
                continue
            field = _documents.c.body[name].as_string()
            conditions.append(field.is_(None) if value is None else field == value)
        return conditions


# ---------------------------------------------------------------------------
# Row mapper and error helpers
# ---------------------------------------------------------------------------


def _row_to_document(row, operation: str, collection: str) -> dict:
    if not isinstance(row.body, dict):
        raise _unknown_error(operation, collection, f"document {row.id} has a non-object body")
    return {ID_FIELD: row.id, **row.body}


def _backend_error(operation: str, collection: str, exc: Exception) -> StoreError:
    logger.error("Document store %s on '%s' failed: %r", operation, collection, exc)
    return BackendError(operation, collection, str(exc))


def _unknown_error(operation: str, collection: str, message: str) -> StoreError:
    logger.error("Document store %s on '%s' failed: %s", operation, collection, message)
    return UnknownStoreError(operation, collection, message)
