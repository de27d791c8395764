# src/zenflow/errors.py

"""
Exception hierarchy.

ZenflowError
├── ValidationError      bad input rejected before any write (also a ValueError)
├── ParseError           malformed backup document
└── StoreError
    ├── DuplicateKeyError  add() with an id that already exists
    ├── NotFoundError      update() of a missing id (also a KeyError)
    └── TransactionError   bulk merge / reset aborted, nothing applied
"""

from __future__ import annotations


class ZenflowError(Exception):
    """Base class for every error raised by zenflow."""


class ValidationError(ZenflowError, ValueError):
    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ParseError(ZenflowError):
    """Backup input is not well-formed structured data."""


class StoreError(ZenflowError):
    """Failure reported by the persistent store."""


class DuplicateKeyError(StoreError):
    def __init__(self, collection: str, entity_id: str) -> None:
        super().__init__(f"{collection}: id {entity_id!r} already exists")
        self.collection = collection
        self.entity_id = entity_id


class NotFoundError(StoreError, KeyError):
    def __init__(self, collection: str, entity_id: str) -> None:
        super().__init__(f"{collection}: no record with id {entity_id!r}")
        self.collection = collection
        self.entity_id = entity_id

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0])


class TransactionError(StoreError):
    """A multi-collection write was rolled back."""
