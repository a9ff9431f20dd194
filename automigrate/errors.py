"""
Error types raised by the schema manager.

Every error carries an HTTP-like ``status_code`` and a human readable
``message`` so callers can surface failures without inspecting the cause.
"""
from typing import Any, Dict


class SchemaError(Exception):
    """Base error for schema operations."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"status_code": self.status_code, "message": self.message}


class DatabaseOpenError(SchemaError):
    """Raised when the database cannot be opened, or is used before open()."""

    pass


class TableCreationError(SchemaError):
    """Raised when the CREATE TABLE statement fails."""

    pass


class TransactionError(SchemaError):
    """Raised when the transaction scope itself fails (BEGIN/COMMIT)."""

    pass


class MigrationError(SchemaError):
    """Raised when introspection or a table rebuild fails."""

    pass
