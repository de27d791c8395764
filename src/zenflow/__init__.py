"""
zenflow - personal task manager with a local SQLite store.

Layout:
    core/        entity schema, query engine, notifications, stats (pure code)
    store/       SQLite-backed persistent store (async API)
    backup/      versioned JSON export/import
    tasks/       high-level task and work-session helpers
    cli/         composition root, slash commands, entrypoint
    connectors/  console REPL
"""

__version__ = "0.1.0"

from zenflow.errors import (
    DuplicateKeyError,
    NotFoundError,
    ParseError,
    StoreError,
    TransactionError,
    ValidationError,
    ZenflowError,
)

__all__ = [
    "__version__",
    "ZenflowError",
    "StoreError",
    "ValidationError",
    "DuplicateKeyError",
    "NotFoundError",
    "ParseError",
    "TransactionError",
]
