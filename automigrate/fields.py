"""
Field type mapping.

Models describe their columns with logical types ("string", "number", ...).
This module maps them onto SQLite column types and appends the audit fields
every managed table carries.
"""
from typing import Dict, Mapping

# Logical type -> SQLite column type
SQL_FIELD_TYPES: Dict[str, str] = {
    "string": "TEXT",
    "text": "TEXT",
    "date": "TEXT",
    "datetime": "TEXT",
    "json": "TEXT",
    "number": "REAL",
    "float": "REAL",
    "real": "REAL",
    "double": "REAL",
    "integer": "INTEGER",
    "int": "INTEGER",
    "boolean": "INTEGER",
    "bool": "INTEGER",
    "blob": "BLOB",
    "bytes": "BLOB",
}

# Added to every managed table, after the model's own fields
AUDIT_FIELDS = ("created_at", "updated_at", "deleted_at")
AUDIT_FIELD_TYPE = "string"


def to_sql_field(logical_type: str) -> str:
    """Map a logical field type to its SQLite column type.

    Raises:
        ValueError: If the type is not known.
    """
    key = str(logical_type).strip().lower()
    if key not in SQL_FIELD_TYPES:
        raise ValueError(
            f"Unknown field type '{logical_type}'. "
            f"Must be one of: {sorted(SQL_FIELD_TYPES)}"
        )
    return SQL_FIELD_TYPES[key]


def with_audit_fields(fields: Mapping[str, str]) -> Dict[str, str]:
    """Return the model fields followed by the audit fields.

    A model field that already uses an audit name keeps its position, but
    its type is forced to the audit type.
    """
    result = dict(fields)
    for name in AUDIT_FIELDS:
        result[name] = AUDIT_FIELD_TYPE
    return result


def is_known_type(logical_type: str) -> bool:
    return str(logical_type).strip().lower() in SQL_FIELD_TYPES
