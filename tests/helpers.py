"""Shared test helpers for litesync tests."""

import sqlite3
from pathlib import Path
from typing import Any

from litesync.client import SQLiteClient, open_database


def make_db(*statements: str, path: Path | None = None) -> sqlite3.Connection:
    """Create a database in explicit-transaction mode and run setup statements."""
    conn = open_database(path) if path is not None else sqlite3.connect(
        ":memory:", isolation_level=None
    )
    for stmt in statements:
        conn.execute(stmt)
    return conn


def make_client(*statements: str, label: str = "db") -> SQLiteClient:
    """Create an in-memory database wrapped in a SQLiteClient."""
    return SQLiteClient(make_db(*statements), label)


def insert_rows(conn: sqlite3.Connection, table: str, rows: list[tuple]) -> None:
    """Insert positional rows into a table."""
    if not rows:
        return
    placeholders = ", ".join("?" * len(rows[0]))
    conn.executemany(f'INSERT INTO "{table}" VALUES ({placeholders})', rows)


def fetch_rows(conn: sqlite3.Connection, table: str, order_by: str = "id") -> list[tuple]:
    """Read all rows of a table in a stable order."""
    return conn.execute(f'SELECT * FROM "{table}" ORDER BY "{order_by}"').fetchall()


def column_names(conn: sqlite3.Connection, table: str) -> list[str]:
    return [row[1] for row in conn.execute(f'PRAGMA table_info("{table}")')]


class StatementRecorder:
    """Collect statements executed on a connection via the trace callback."""

    def __init__(self, conn: sqlite3.Connection):
        self.statements: list[str] = []
        conn.set_trace_callback(self.statements.append)

    def starting_with(self, prefix: str) -> list[str]:
        return [s for s in self.statements if s.lstrip().upper().startswith(prefix)]


class RecordingProgress:
    """ProgressSink that records every call."""

    def __init__(self) -> None:
        self.started: list[tuple[str, int]] = []
        self.updates: list[int] = []
        self.closed = 0

    def start(self, description: str, total: int) -> None:
        self.started.append((description, total))

    def update(self, done: int) -> None:
        self.updates.append(done)

    def close(self) -> None:
        self.closed += 1


USERS_SQL = "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)"
POSTS_SQL = "CREATE TABLE posts (id INTEGER PRIMARY KEY, title TEXT, user_id INTEGER)"


def posts_rows(ids: list[int]) -> list[tuple[Any, ...]]:
    return [(i, f"post {i}", 1) for i in ids]
