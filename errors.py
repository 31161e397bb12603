"""Error types raised by the budget core.

The CLI (or any other front end) translates these into user-facing
messages; nothing below knows about transports.
"""

import sqlite3
from contextlib import contextmanager


class BudgetError(Exception):
    """Base class for all budget errors."""


class InvalidArgument(BudgetError):
    """A caller supplied a malformed value (bad month, unknown type, ...)."""


class NotFound(BudgetError):
    """A referenced category or transaction does not exist."""


class NoOpUpdate(BudgetError):
    """A partial update was requested with no fields supplied."""


class StorageError(BudgetError):
    """The persistence layer failed.

    Args:
        operation: Short name of the operation that failed, e.g. "create category".
    """

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        detail = f"Storage failure during {operation}"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)


@contextmanager
def storage_errors(operation: str):
    """Translate sqlite3 errors raised inside the block into StorageError.

    Only the exception class name is kept in the message so query text
    never leaks into logs or responses. The original error stays
    available as ``__cause__``.
    """
    try:
        yield
    except sqlite3.Error as e:
        raise StorageError(operation, type(e).__name__) from e
