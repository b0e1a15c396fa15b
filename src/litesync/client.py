"""SQLite client wrapper."""

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from litesync.exceptions import ReadError

logger = logging.getLogger(__name__)


def open_database(path: str | Path, readonly: bool = False) -> sqlite3.Connection:
    """Open a SQLite database in explicit-transaction mode.

    ``isolation_level=None`` disables the sqlite3 module's implicit BEGIN so
    that ``SQLiteClient.transaction`` controls transaction boundaries.
    """
    if readonly:
        uri = f"{Path(path).resolve().as_uri()}?mode=ro"
        return sqlite3.connect(uri, uri=True, isolation_level=None)
    return sqlite3.connect(str(path), isolation_level=None)


class SQLiteClient:
    """Client for executing SQL against a caller-owned SQLite connection.

    The client never opens or closes the connection it wraps.
    """

    def __init__(self, connection: sqlite3.Connection, label: str = "db"):
        self.connection = connection
        self.label = label

    def fetchall(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[dict[str, Any]]:
        """Execute a query and return results as list of dicts."""
        columns, rows = self.fetch_rows(sql, params)
        return [dict(zip(columns, row)) for row in rows]

    def fetch_rows(
        self, sql: str, params: Sequence[Any] = ()
    ) -> tuple[list[str], list[tuple]]:
        """Execute a query and return ``(column_names, rows)``."""
        try:
            cursor = self.connection.execute(sql, params)
            columns = [desc[0] for desc in cursor.description or ()]
            return columns, cursor.fetchall()
        except sqlite3.Error as e:
            raise ReadError(f"Query against {self.label} failed: {e}") from e

    def fetch_column(self, sql: str, params: Sequence[Any] = ()) -> list[Any]:
        """Execute a query and return the first column of every row."""
        _, rows = self.fetch_rows(sql, params)
        return [row[0] for row in rows]

    def fetch_value(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute a query and return the first column of the first row."""
        _, rows = self.fetch_rows(sql, params)
        return rows[0][0] if rows else None

    def iterate(
        self, sql: str, params: Sequence[Any] = ()
    ) -> tuple[list[str], Iterator[tuple]]:
        """Execute a query and return ``(column_names, row_iterator)``.

        Rows are streamed from the cursor instead of materialized.
        """
        try:
            cursor = self.connection.execute(sql, params)
        except sqlite3.Error as e:
            raise ReadError(f"Query against {self.label} failed: {e}") from e
        columns = [desc[0] for desc in cursor.description or ()]
        return columns, iter(cursor)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute a statement and return the affected row count."""
        logger.debug(f"[{self.label}] {sql}")
        return self.connection.execute(sql, params).rowcount

    def execute_many(self, sql: str, rows: Sequence[Sequence[Any]]) -> int:
        """Execute a statement once per parameter row."""
        logger.debug(f"[{self.label}] {sql} x{len(rows)}")
        return self.connection.executemany(sql, rows).rowcount

    @contextmanager
    def transaction(self, skip: bool = False) -> Iterator[None]:
        """Run the enclosed statements in one transaction.

        Joins the caller's transaction instead of opening a new one when
        ``skip`` is set or a transaction is already open on the connection.
        """
        if skip or self.connection.in_transaction:
            yield
            return

        self.connection.execute("BEGIN")
        try:
            yield
        except BaseException:
            self.connection.rollback()
            raise
        else:
            self.connection.commit()
