"""
automigrate - keep SQLite tables in line with model definitions

This package provides:
- Schema: opens a database and creates or rebuilds tables from models
- TableModel: a named table with ordered, typed fields
- Error types carrying a status code and message
"""

from .errors import (
    DatabaseOpenError,
    MigrationError,
    SchemaError,
    TableCreationError,
    TransactionError,
)
from .fields import AUDIT_FIELDS, to_sql_field
from .models import Model, TableModel, load_models
from .schema import MigrationPlan, Schema, SchemaResult

__version__ = "0.1.0"

__all__ = [
    "AUDIT_FIELDS",
    "DatabaseOpenError",
    "MigrationError",
    "MigrationPlan",
    "Model",
    "Schema",
    "SchemaError",
    "SchemaResult",
    "TableCreationError",
    "TableModel",
    "TransactionError",
    "load_models",
    "to_sql_field",
]
