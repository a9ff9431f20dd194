"""
SQLite Connection Helpers

Thin layer over the standard library sqlite3 binding used by the schema
manager:
    - Connection factory with pragmas, SQL tracing and an optional size cap
    - Explicit transaction scope (BEGIN / COMMIT / ROLLBACK)
    - Identifier quoting
    - Table introspection through pragma table-valued functions

Usage:
    from automigrate.db import connect, transaction, table_columns

    conn = connect(Path("data/app.db"), debug=True)
    with transaction(conn):
        conn.execute('CREATE TABLE IF NOT EXISTS "notes"("body" TEXT)')
    print(table_columns(conn, "notes"))
"""

import logging
import math
import sqlite3
import string
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

# Statement tracing goes to its own logger so it can be filtered separately
sql_logger = logging.getLogger("automigrate.sql")

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

MEMORY_DATABASE = ":memory:"

# Database configuration
DB_CONFIG = {
    "timeout": 30.0,
    "pragmas": {
        "busy_timeout": 30000,
        "synchronous": "NORMAL",
    },
}


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    """Apply the configured connection pragmas."""
    for pragma, value in DB_CONFIG["pragmas"].items():
        try:
            conn.execute(f"PRAGMA {pragma}={value}")
        except sqlite3.Error as e:
            logger.debug(f"Pragma {pragma} not applied: {e}")


def _apply_size_limit(conn: sqlite3.Connection, size: int) -> None:
    """Cap the database file at roughly ``size`` bytes."""
    page_size = conn.execute("PRAGMA page_size").fetchone()[0]
    max_pages = max(1, math.ceil(size / page_size))
    conn.execute(f"PRAGMA max_page_count={max_pages}")
    logger.debug(f"Database capped at {max_pages} pages of {page_size} bytes")


def connect(
    db_path: Union[str, Path],
    timeout: Optional[float] = None,
    debug: bool = False,
    size: int = -1,
) -> sqlite3.Connection:
    """Open (or create) a database in autocommit mode.

    Transactions are never opened implicitly; use :func:`transaction` to
    group statements.

    Args:
        db_path: Database file path, or ":memory:"
        timeout: Seconds to wait on a locked database
        debug: Trace every executed statement on the ``automigrate.sql`` logger
        size: Maximum database size in bytes; values <= 0 mean no cap

    Raises:
        sqlite3.Error: If the database cannot be opened
        OSError: If the parent directory cannot be created
    """
    if timeout is None:
        timeout = DB_CONFIG["timeout"]

    if str(db_path) != MEMORY_DATABASE:
        db_path = Path(db_path)
        # Ensure directory exists
        db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), timeout=timeout, isolation_level=None)
    try:
        conn.row_factory = sqlite3.Row
        _apply_pragmas(conn)
        if debug:
            conn.set_trace_callback(sql_logger.debug)
        if size and size > 0:
            _apply_size_limit(conn, size)
        # Touch the schema so a corrupt or non-database file fails here
        conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
    except sqlite3.Error:
        conn.close()
        raise

    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the enclosed statements in one transaction.

    Commits when the block completes, rolls back and re-raises when it
    raises.
    """
    conn.execute("BEGIN")
    try:
        yield conn
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    else:
        conn.execute("COMMIT")


def quote_identifier(name: str) -> str:
    """Quote a table or column name for use in SQL."""
    if not name:
        raise ValueError("Identifier must not be empty")
    return '"' + str(name).replace('"', '""') + '"'


def table_columns(conn: sqlite3.Connection, table_name: str) -> List[str]:
    """Return the table's column names in declaration order.

    An empty list means the table does not exist.
    """
    cursor = conn.execute("SELECT name FROM pragma_table_info(?) ORDER BY cid", (table_name,))
    return [row[0] for row in cursor.fetchall()]


def identifier_key(name: str) -> str:
    """Comparison key for identifiers. SQLite folds ASCII letters only."""
    return name.translate(_ASCII_LOWER)


def table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name = ? COLLATE NOCASE",
        (table_name,),
    ).fetchone()
    return row is not None


def set_foreign_keys(conn: sqlite3.Connection, enabled: bool) -> None:
    """Toggle foreign key enforcement. Has no effect inside a transaction."""
    conn.execute(f"PRAGMA foreign_keys={'on' if enabled else 'off'}")


def foreign_key_violations(
    conn: sqlite3.Connection, table_name: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Run ``PRAGMA foreign_key_check`` and return the violations found."""
    if table_name:
        cursor = conn.execute(f"PRAGMA foreign_key_check({quote_identifier(table_name)})")
    else:
        cursor = conn.execute("PRAGMA foreign_key_check")
    return [
        {"table": row[0], "rowid": row[1], "parent": row[2], "fkid": row[3]}
        for row in cursor.fetchall()
    ]
