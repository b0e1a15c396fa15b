"""Sync execution: schema first, then rows table by table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from litesync.client import SQLiteClient
from litesync.config import Config
from litesync.exceptions import ConfigError
from litesync.quoting import SQLITE_QUOTER, Quoter
from litesync.rows.identity import (
    BUILTIN_STAMP_COLUMNS,
    RowIdentityReader,
    RowKeyDiff,
    diff_keys,
)
from litesync.rows.sync import RowSyncApplier, TableSyncResult
from litesync.schema.apply import SchemaApplier
from litesync.schema.diff import SchemaChange, SchemaDiffer
from litesync.schema.introspect import SEQUENCE_TABLE, SchemaIntrospector

__all__ = ["SyncReport", "SyncRunner"]

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Summary of one sync run."""

    schema_changes: list[SchemaChange] = field(default_factory=list)
    tables: list[TableSyncResult] = field(default_factory=list)

    @property
    def rows_changed(self) -> int:
        return sum(t.changed for t in self.tables)


class SyncRunner:
    """Bring a destination database in line with a source database.

    Schema sync commits (or rolls back) before any row sync starts. Rows are
    synced one table per transaction, so a failure leaves earlier tables
    committed. Everything is recomputed from scratch on every run, which
    makes re-running after a failure safe.
    """

    def __init__(
        self,
        source: SQLiteClient,
        destination: SQLiteClient,
        config: Optional[Config] = None,
        quoter: Quoter = SQLITE_QUOTER,
        differ: Optional[SchemaDiffer] = None,
    ) -> None:
        self._source = source
        self._destination = destination
        self._config = config or Config()
        self._quote = quoter
        self._differ = differ or SchemaDiffer()
        self._source_keys = RowIdentityReader(source, quoter, self._config.key_columns)
        self._dest_keys = RowIdentityReader(destination, quoter, self._config.key_columns)

    def plan_schema(self) -> list[SchemaChange]:
        """Diff the current source schema against the destination schema."""
        source_schema = SchemaIntrospector(self._source, self._quote).introspect_schema()
        dest_schema = SchemaIntrospector(self._destination, self._quote).introspect_schema()
        return self._differ.diff(source_schema, dest_schema)

    def sync_schema(self, skip_transaction: bool = False) -> list[SchemaChange]:
        """Apply the schema diff to the destination and return it."""
        changes = self.plan_schema()
        SchemaApplier(self._destination, self._quote).apply(
            changes, skip_transaction=skip_transaction
        )
        return changes

    def table_names(self) -> list[str]:
        """Source tables selected for row sync.

        ``sqlite_sequence`` only exists once an AUTOINCREMENT table has been
        created, so it is skipped unless the destination has it too.
        """
        names = SchemaIntrospector(self._source, self._quote).table_names()
        if SEQUENCE_TABLE in names:
            dest_names = SchemaIntrospector(self._destination, self._quote).table_names()
            if SEQUENCE_TABLE not in dest_names:
                names.remove(SEQUENCE_TABLE)
        if self._config.tables is None:
            return names
        wanted = set(self._config.tables)
        return [n for n in names if n in wanted]

    def key_column(self, table: str) -> str:
        """Resolve the identity column, falling back to a single-column primary key.

        The fallback only applies when no override is configured for the table.

        Raises:
            ConfigError: If neither the configured column nor a single-column
                primary key exists.
        """
        column = self._source_keys.key_column(table)
        if self._source_keys.has_column(table, column):
            return column

        if table not in self._config.key_columns:
            parsed = SchemaIntrospector(self._source, self._quote).introspect_table(table)
            if parsed is not None and parsed.primary_key and len(parsed.primary_key.columns) == 1:
                return parsed.primary_key.columns[0]

        raise ConfigError(
            f"Table '{table}' has no identity column '{column}' and no "
            f"single-column primary key; set key_columns for it"
        )

    def diff_rows(self, table: str) -> tuple[str, RowKeyDiff]:
        """Compute the key-level diff of one table."""
        key_column = self.key_column(table)
        source_keys = self._source_keys.read_keys(table, key_column)
        dest_keys = self._dest_keys.read_keys(table, key_column)

        source_stamps = dest_stamps = None
        stamp = BUILTIN_STAMP_COLUMNS.get(table, self._config.updated_at_column)
        if (
            stamp
            and self._source_keys.has_column(table, stamp)
            and self._dest_keys.has_column(table, stamp)
        ):
            source_stamps = self._source_keys.read_overview(table, stamp, key_column)
            dest_stamps = self._dest_keys.read_overview(table, stamp, key_column)

        return key_column, diff_keys(source_keys, dest_keys, source_stamps, dest_stamps)

    def sync_rows(self, tables: Optional[list[str]] = None) -> list[TableSyncResult]:
        """Sync rows for each table, one transaction per table."""
        applier = RowSyncApplier(
            self._source,
            self._destination,
            self._quote,
            batch_size=self._config.batch_size,
        )
        results = []
        for table in tables if tables is not None else self.table_names():
            key_column, diff = self.diff_rows(table)
            results.append(applier.sync_table(table, key_column, diff))
        return results

    def run(self, schema_only: bool = False) -> SyncReport:
        """Run a full sync: schema, then rows."""
        report = SyncReport()
        report.schema_changes = self.sync_schema()
        if schema_only:
            return report

        report.tables = self.sync_rows()
        logger.info(
            f"Sync complete: {len(report.schema_changes)} schema change(s), "
            f"{report.rows_changed} row change(s) across {len(report.tables)} table(s)"
        )
        return report
