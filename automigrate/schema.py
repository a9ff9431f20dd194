"""
Schema Manager - Keeps SQLite tables in line with model definitions

Given a model (table name + ordered field types) the manager:
- Creates the table when it does not exist
- Leaves it untouched when its columns already match, name for name and in order
- Otherwise rebuilds it through a temporary table, keeping the data of the
  columns the old and new definitions share

Every managed table also carries created_at, updated_at and deleted_at columns.

Usage:
    from automigrate import Schema, TableModel

    with Schema("data/app.db") as schema:
        result = schema.automigrate(TableModel("notes", {"title": "string"}))
        print(result.data["action"])  # created / altered / unchanged
"""

import logging
import sqlite3
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config.env_config import Config, ConfigError
from .db import (
    MEMORY_DATABASE,
    connect,
    foreign_key_violations,
    identifier_key,
    quote_identifier,
    set_foreign_keys,
    table_columns,
    table_exists,
    transaction,
)
from .errors import (
    DatabaseOpenError,
    MigrationError,
    SchemaError,
    TableCreationError,
    TransactionError,
)
from .fields import to_sql_field, with_audit_fields
from .models import Model

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0"
DEFAULT_SIZE = -1
TEMP_TABLE_PREFIX = "temp"

ACTION_CREATED = "created"
ACTION_ALTERED = "altered"
ACTION_UNCHANGED = "unchanged"


@dataclass
class SchemaResult:
    """Successful outcome of a schema operation."""

    status_code: int
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MigrationPlan:
    """What automigrate would do for a model, without doing it."""

    model_name: str
    action: str  # create, alter, none
    expected_columns: List[str] = field(default_factory=list)
    current_columns: List[str] = field(default_factory=list)
    kept_columns: List[str] = field(default_factory=list)
    dropped_columns: List[str] = field(default_factory=list)
    added_columns: List[str] = field(default_factory=list)

    def has_changes(self) -> bool:
        return self.action != "none"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def columns_match(expected: List[str], current: List[str]) -> bool:
    """Ordered equality: same length, same names, same positions."""
    return len(expected) == len(current) and all(a == b for a, b in zip(expected, current))


def column_definitions(fields: Dict[str, str]) -> str:
    """Render ``"name" TYPE, ...`` for a CREATE TABLE statement."""
    return ", ".join(
        f"{quote_identifier(name)} {to_sql_field(kind)}" for name, kind in fields.items()
    )


class Schema:
    """Owns one SQLite connection and reconciles tables with models."""

    def __init__(
        self,
        database_name: str,
        version: Optional[str] = None,
        description: Optional[str] = None,
        size: Optional[int] = None,
        debug: Optional[bool] = None,
    ):
        if not database_name:
            raise ConfigError("Database name is required.")

        self._database_name = str(database_name)
        self._version = version or DEFAULT_VERSION
        self._description = description or f"{self._database_name}; Version: {self._version}"
        self._size = size or DEFAULT_SIZE
        self._debug = Config.AUTOMIGRATE_DEBUG if debug is None else bool(debug)
        self._connection: Optional[sqlite3.Connection] = None

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def version(self) -> str:
        return self._version

    @property
    def description(self) -> str:
        return self._description

    @property
    def size(self) -> int:
        return self._size

    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def path(self) -> str:
        """Database location, resolved against AUTOMIGRATE_DATA_DIR when relative."""
        if self._database_name == MEMORY_DATABASE:
            return MEMORY_DATABASE
        path = Path(self._database_name).expanduser()
        data_dir = Config.AUTOMIGRATE_DATA_DIR
        if data_dir and not path.is_absolute():
            path = Path(data_dir) / path
        return str(path)

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise DatabaseOpenError("Database is not open.")
        return self._connection

    # =========================================================================
    # Connection Management
    # =========================================================================

    def open(self) -> SchemaResult:
        """Open the database, creating it if it does not exist."""
        if self._connection is not None:
            self.close()

        path = self.path
        try:
            self._connection = connect(
                path,
                timeout=Config.AUTOMIGRATE_TIMEOUT,
                debug=self._debug,
                size=self._size,
            )
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Unable to open database {path}: {e}")
            raise DatabaseOpenError("Unable to open database.") from e

        logger.info(f"Opened database {path} (version {self._version})")
        return SchemaResult(
            status_code=200,
            message="Database opened successfully.",
            data={
                "database_name": self._database_name,
                "path": path,
                "version": self._version,
                "description": self._description,
                "size": self._size,
            },
        )

    def close(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
        finally:
            self._connection = None
        logger.debug(f"Closed database {self._database_name}")

    def __enter__(self) -> "Schema":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # Introspection
    # =========================================================================

    def get_columns(self, table_name: str) -> List[str]:
        """Current column names of a table, in order; empty if it does not exist."""
        columns = table_columns(self.connection, table_name)
        logger.debug(f"Table {table_name} columns: {columns}")
        return columns

    def _model_fields(self, model: Model) -> Tuple[str, Dict[str, str]]:
        return model.get_model_name(), with_audit_fields(model.get_model_fields())

    def plan(self, model: Model) -> MigrationPlan:
        """Work out what automigrate would do for ``model``. Issues no DDL."""
        name, fields = self._model_fields(model)
        expected = list(fields)
        current = self.get_columns(name)

        if not current:
            return MigrationPlan(
                model_name=name,
                action="create",
                expected_columns=expected,
                added_columns=expected,
            )

        current_keys = {identifier_key(c) for c in current}
        expected_keys = {identifier_key(c) for c in expected}
        plan = MigrationPlan(
            model_name=name,
            action="none" if columns_match(expected, current) else "alter",
            expected_columns=expected,
            current_columns=current,
            kept_columns=[c for c in expected if identifier_key(c) in current_keys],
            dropped_columns=[c for c in current if identifier_key(c) not in expected_keys],
            added_columns=[c for c in expected if identifier_key(c) not in current_keys],
        )
        return plan

    # =========================================================================
    # Table Operations
    # =========================================================================

    def create_table(self, model: Model) -> SchemaResult:
        """Create the model's table if it does not exist yet."""
        conn = self.connection
        name, fields = self._model_fields(model)

        try:
            table = quote_identifier(name)
            definitions = column_definitions(fields)
        except ValueError as e:
            logger.error(f"Table creation error for {name}: {e}")
            raise TableCreationError("Table creation error.") from e

        statement_error: Optional[sqlite3.Error] = None
        try:
            with transaction(conn):
                try:
                    conn.execute(f"CREATE TABLE IF NOT EXISTS {table}({definitions})")
                except sqlite3.Error as e:
                    statement_error = e
                    raise
        except sqlite3.Error as e:
            if statement_error is not None:
                logger.error(f"Table creation error for {name}: {e}")
                raise TableCreationError("Table creation error.") from e
            logger.error(f"Database transaction error (create_table {name}): {e}")
            raise TransactionError("An error occurred.") from e

        logger.info(f"Created table {name} with columns {list(fields)}")
        return SchemaResult(
            status_code=200,
            message="Table successfully created",
            data={"model_name": name, "fields": fields, "action": ACTION_CREATED},
        )

    def alter_table(self, model: Model) -> SchemaResult:
        """Rebuild the model's table with the new column definition.

        The rebuild runs in a single transaction: create ``temp<name>``, copy
        every row with the shared columns, drop the old table, rename. Columns
        that only exist in the old table are discarded; the row count is kept
        even when no column is shared. If ``temp<name>`` is already taken a
        numbered suffix is used, so no other table is ever dropped. On failure
        everything is rolled back and the original table is left as it was.
        """
        conn = self.connection
        name, fields = self._model_fields(model)
        expected = list(fields)

        try:
            table = quote_identifier(name)
            definitions = column_definitions(fields)
        except ValueError as e:
            logger.error(f"Cannot alter table {name}: {e}")
            raise MigrationError(str(e)) from e

        try:
            set_foreign_keys(conn, False)
            try:
                old_columns = table_columns(conn, name)
                old_keys = {identifier_key(c) for c in old_columns}
                expected_keys = {identifier_key(c) for c in expected}
                shared = [c for c in expected if identifier_key(c) in old_keys]
                dropped = [c for c in old_columns if identifier_key(c) not in expected_keys]

                if shared:
                    target = ", ".join(quote_identifier(c) for c in shared)
                    source = target
                else:
                    # Nothing to carry over; still one new row per old row
                    target = quote_identifier(expected[0])
                    source = "NULL"

                with transaction(conn):
                    temp_table = quote_identifier(self._free_temp_name(name))
                    conn.execute(f"CREATE TABLE {temp_table}({definitions})")
                    if old_columns:
                        conn.execute(
                            f"INSERT INTO {temp_table}({target}) SELECT {source} FROM {table}"
                        )
                    conn.execute(f"DROP TABLE IF EXISTS {table}")
                    conn.execute(f"ALTER TABLE {temp_table} RENAME TO {table}")

                for violation in foreign_key_violations(conn, name):
                    logger.warning(f"Foreign key violation after rebuilding {name}: {violation}")
            finally:
                set_foreign_keys(conn, True)
        except sqlite3.Error as e:
            logger.error(f"Failed to alter table {name}, changes rolled back: {e}")
            raise MigrationError(str(e)) from e

        if dropped:
            logger.warning(f"Rebuilt table {name}, dropped columns {dropped}")
        logger.info(f"Altered table {name}: columns {expected}, data kept for {shared}")
        return SchemaResult(
            status_code=200,
            message="Table successfully altered",
            data={
                "model_name": name,
                "fields": fields,
                "action": ACTION_ALTERED,
                "kept_columns": shared,
                "dropped_columns": dropped,
            },
        )

    def _free_temp_name(self, name: str) -> str:
        """First of temp<name>, temp<name>_1, ... not used by an existing table."""
        candidate = f"{TEMP_TABLE_PREFIX}{name}"
        suffix = 0
        while table_exists(self.connection, candidate):
            suffix += 1
            candidate = f"{TEMP_TABLE_PREFIX}{name}_{suffix}"
        return candidate

    def automigrate(self, model: Model) -> SchemaResult:
        """Create, leave alone, or rebuild the model's table as needed.

        Raises:
            MigrationError: On any failure, wrapping the cause's message
        """
        try:
            name, fields = self._model_fields(model)
            current = self.get_columns(name)

            if not current:
                return self.create_table(model)

            if columns_match(list(fields), current):
                logger.debug(f"Table {name} is up to date")
                return SchemaResult(
                    status_code=200,
                    message="Table is up to date",
                    data={"model_name": name, "fields": fields, "action": ACTION_UNCHANGED},
                )

            logger.info(f"Table {name} columns {current} differ from model {list(fields)}")
            return self.alter_table(model)
        except MigrationError:
            raise
        except SchemaError as e:
            raise MigrationError(e.message, e.status_code) from e
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Automigrate failed: {e}")
            raise MigrationError(str(e)) from e

    def automigrate_all(self, models: Iterable[Model]) -> List[SchemaResult]:
        """Automigrate each model in order, stopping at the first failure."""
        results = []
        for model in models:
            results.append(self.automigrate(model))
        return results
