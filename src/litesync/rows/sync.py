"""Batched row deletion and copy-forward for one table."""

import logging
import sqlite3
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from litesync.client import SQLiteClient
from litesync.exceptions import RowSyncError
from litesync.quoting import SQLITE_QUOTER, Quoter
from litesync.rows.identity import RowKeyDiff

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 200


def _sort_key(key: Any) -> tuple[str, Any]:
    return (type(key).__name__, key)


def batches(keys: Iterable[Any], size: int) -> Iterator[list[Any]]:
    """Partition keys into sorted chunks of at most ``size``.

    A size of 0 yields everything as a single chunk.
    """
    ordered = sorted(keys, key=_sort_key)
    if not ordered:
        return
    if size <= 0:
        yield ordered
        return
    for start in range(0, len(ordered), size):
        yield ordered[start : start + size]


@dataclass
class TableSyncResult:
    """Outcome of syncing the rows of one table."""

    table: str
    deleted: int = 0
    inserted: int = 0
    updated: int = 0

    @property
    def changed(self) -> int:
        return self.deleted + self.inserted + self.updated


class RowSyncApplier:
    """Apply a ``RowKeyDiff`` to the destination in bounded batches.

    Args:
        source: Client for the source database (read only).
        destination: Client for the destination database.
        quoter: Identifier quoter.
        batch_size: Maximum keys per statement; 0 disables batching.
    """

    def __init__(
        self,
        source: SQLiteClient,
        destination: SQLiteClient,
        quoter: Quoter = SQLITE_QUOTER,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 0:
            raise ValueError(f"batch_size must be >= 0, got {batch_size}")
        self._source = source
        self._destination = destination
        self._quote = quoter
        self.batch_size = batch_size

    def sync_table(
        self,
        table: str,
        key_column: str,
        diff: RowKeyDiff,
        skip_transaction: bool = False,
    ) -> TableSyncResult:
        """Delete, insert and refresh rows of one table in one transaction.

        Raises:
            RowSyncError: If any batch fails; the table's transaction is
                rolled back.
        """
        result = TableSyncResult(table=table)
        if diff.is_empty:
            return result

        with self._destination.transaction(skip=skip_transaction):
            result.deleted = self.delete_rows(table, key_column, diff.deleted)
            result.inserted = self.copy_rows(table, key_column, diff.created)
            result.updated = self.copy_rows(
                table, key_column, diff.updated, replace=True
            )

        logger.info(
            f"Synced {table}: {result.deleted} deleted, "
            f"{result.inserted} inserted, {result.updated} updated"
        )
        return result

    def delete_rows(self, table: str, key_column: str, keys: Iterable[Any]) -> int:
        """Delete destination rows by key, one statement per batch."""
        count = 0
        for batch in batches(keys, self.batch_size):
            try:
                self._delete_batch(table, key_column, batch)
            except sqlite3.Error as e:
                raise RowSyncError(table, batch, e) from e
            count += len(batch)
        return count

    def copy_rows(
        self,
        table: str,
        key_column: str,
        keys: Iterable[Any],
        replace: bool = False,
    ) -> int:
        """Copy full source rows into the destination by key.

        With ``replace`` the destination rows for each batch are deleted
        first, so existing rows are overwritten with source values.
        """
        count = 0
        columns: list[str] | None = None
        for batch in batches(keys, self.batch_size):
            if columns is None:
                columns = self._insertable_columns(table)
            rows = self._read_batch(table, key_column, columns, batch)
            try:
                if replace:
                    self._delete_batch(table, key_column, batch)
                if rows:
                    self._destination.execute_many(
                        f"INSERT INTO {self._quote(table)} "
                        f"({self._quote.quote_all(columns)}) "
                        f"VALUES ({_placeholders(len(columns))})",
                        rows,
                    )
            except sqlite3.Error as e:
                raise RowSyncError(table, batch, e) from e
            logger.debug(f"Copied {len(rows)} row(s) into {table}")
            count += len(rows)
        return count

    def _delete_batch(self, table: str, key_column: str, batch: list[Any]) -> None:
        where, params = self._key_filter(key_column, batch)
        self._destination.execute(f"DELETE FROM {self._quote(table)} WHERE {where}", params)
        logger.debug(f"Deleted batch of {len(batch)} key(s) from {table}")

    def _read_batch(
        self, table: str, key_column: str, columns: list[str], batch: list[Any]
    ) -> list[tuple]:
        where, params = self._key_filter(key_column, batch)
        _, rows = self._source.fetch_rows(
            f"SELECT {self._quote.quote_all(columns)} FROM {self._quote(table)} "
            f"WHERE {where}",
            params,
        )
        return rows

    def _key_filter(self, key_column: str, batch: list[Any]) -> tuple[str, list[Any]]:
        """Build a WHERE clause matching the batch keys.

        ``IN`` never matches NULL, so a NULL key gets an ``IS NULL`` term.
        """
        column = self._quote(key_column)
        params = [key for key in batch if key is not None]
        terms = [f"{column} IN ({_placeholders(len(params))})"] if params else []
        if len(params) < len(batch):
            terms.append(f"{column} IS NULL")
        return " OR ".join(terms), params

    def _insertable_columns(self, table: str) -> list[str]:
        """Source columns that accept explicit values (generated ones excluded)."""
        rows = self._source.fetchall(f"PRAGMA table_xinfo({self._quote(table)})")
        return [row["name"] for row in rows if row["hidden"] == 0]


def _placeholders(count: int) -> str:
    return ", ".join("?" * count)
