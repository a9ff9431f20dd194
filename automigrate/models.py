"""
Model definitions understood by the schema manager.

A model is anything exposing ``get_model_name()`` and ``get_model_fields()``.
``TableModel`` is the concrete implementation; it can be declared inline,
loaded from YAML, or derived from a SQLAlchemy table.

Usage:
    from automigrate.models import TableModel, load_models

    notes = TableModel("notes", {"title": "string", "views": "integer"})

    # From models.yaml:
    #   models:
    #     notes:
    #       title: string
    #       views: integer
    models = load_models("config/models.yaml")
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union, runtime_checkable

from sqlalchemy import Table
from sqlalchemy import types as sqltypes

from .config.config_loader import ConfigLoader
from .config.env_config import ConfigError
from .fields import SQL_FIELD_TYPES, is_known_type


@runtime_checkable
class Model(Protocol):
    """Collaborator contract: a table name and an ordered field mapping."""

    def get_model_name(self) -> str: ...

    def get_model_fields(self) -> Mapping[str, str]: ...


class TableModel:
    """A named table with ordered, typed fields."""

    def __init__(self, name: str, fields: Mapping[str, str]):
        if not name:
            raise ValueError("Model name is required")
        unknown = {f: t for f, t in fields.items() if not is_known_type(t)}
        if unknown:
            raise ValueError(
                f"Model '{name}' has unknown field types {unknown}. "
                f"Must be one of: {sorted(SQL_FIELD_TYPES)}"
            )
        self._name = name
        self._fields = dict(fields)

    def get_model_name(self) -> str:
        return self._name

    def get_model_fields(self) -> Dict[str, str]:
        return dict(self._fields)

    def __repr__(self) -> str:
        return f"TableModel({self._name!r}, {self._fields!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TableModel):
            return NotImplemented
        return self._name == other._name and list(self._fields.items()) == list(
            other._fields.items()
        )

    @classmethod
    def from_dict(cls, name: str, fields: Mapping[str, str]) -> "TableModel":
        return cls(name, fields)

    @classmethod
    def from_sqlalchemy(cls, table_or_class: Any) -> "TableModel":
        """Build a model from a SQLAlchemy ``Table`` or declarative class."""
        table = table_or_class if isinstance(table_or_class, Table) else None
        if table is None:
            table = getattr(table_or_class, "__table__", None)
        if not isinstance(table, Table):
            raise TypeError(f"{table_or_class!r} is not a SQLAlchemy table or mapped class")

        fields = {column.name: _logical_type(column.type) for column in table.columns}
        return cls(table.name, fields)


def _logical_type(column_type: sqltypes.TypeEngine) -> str:
    """Map a SQLAlchemy column type onto a logical field type."""
    # Boolean first: some dialect types derive from both
    if isinstance(column_type, sqltypes.Boolean):
        return "boolean"
    if isinstance(column_type, sqltypes.Integer):
        return "integer"
    if isinstance(column_type, sqltypes.Numeric):
        return "number"
    if isinstance(column_type, sqltypes.LargeBinary):
        return "blob"
    if isinstance(column_type, sqltypes.DateTime):
        return "datetime"
    if isinstance(column_type, sqltypes.Date):
        return "date"
    if isinstance(column_type, sqltypes.JSON):
        return "json"
    if isinstance(column_type, sqltypes.Text):
        return "text"
    return "string"


def load_models(path: Union[str, Path], environment: Optional[str] = None) -> List[TableModel]:
    """Load model definitions from a YAML file, in file order.

    Raises:
        ConfigError: If the file is malformed or declares unknown types
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    loader = ConfigLoader(path.parent, environment=environment)
    config = loader.load(path.stem)

    definitions = config.get("models")
    if not isinstance(definitions, dict) or not definitions:
        raise ConfigError(f"{path}: expected a non-empty 'models' mapping")

    models = []
    for name, fields in definitions.items():
        if not isinstance(fields, dict) or not fields:
            raise ConfigError(f"{path}: model '{name}' must map field names to types")
        try:
            models.append(TableModel(str(name), {str(k): str(v) for k, v in fields.items()}))
        except ValueError as e:
            raise ConfigError(f"{path}: {e}")
    return models
