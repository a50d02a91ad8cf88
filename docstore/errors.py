"""
docstore/errors.py -- Failure kinds raised by the document store adapter.

Every store operation either succeeds or raises a StoreError subclass with the
underlying driver exception chained as __cause__. Callers never see raw
SQLAlchemy exceptions.

status_code is the HTTP status a boundary layer should use when a store
failure escapes outside of authentication: a database that cannot be reached
is a 503 (retry later), anything else is a 500.

Layer rule: no imports from api/, auth/, or core/.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every document store failure."""

    kind = "unknown"
    status_code = 500

    def __init__(self, operation: str, collection: str, message: str = "") -> None:
        self.operation = operation
        self.collection = collection
        self.message = message or "store operation failed"
        super().__init__(f"{operation} on '{collection}': {self.message}")


class BackendError(StoreError):
    """The database itself failed (connection, SQL execution, locking)."""

    kind = "backend"
    status_code = 503


class DocumentError(StoreError):
    """A document, query, or update could not be encoded or is unsupported."""

    kind = "document"


class UnknownStoreError(StoreError):
    """The store returned something it should never return."""

    kind = "unknown"
