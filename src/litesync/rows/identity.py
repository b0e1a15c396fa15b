"""Row identity reading and key-set diffing."""

import logging
from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from litesync.client import SQLiteClient
from litesync.quoting import SQLITE_QUOTER, Quoter

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)

DEFAULT_KEY_COLUMN = "id"

# Tables whose identity column is not ``id``.
BUILTIN_KEY_COLUMNS: dict[str, str] = {
    "sqlite_sequence": "name",
    "knex_migrations_lock": "index",
}

# Tables whose shared rows are refreshed when this column differs.
BUILTIN_STAMP_COLUMNS: dict[str, str] = {
    "sqlite_sequence": "seq",
}


@dataclass
class RowKeyDiff(Generic[K]):
    """Key-level difference between one table in source and destination.

    ``created`` keys exist only in the source, ``deleted`` keys only in the
    destination. ``updated`` keys exist on both sides but carry a different
    modification stamp; it stays empty when no stamp column is tracked.
    """

    created: set[K] = field(default_factory=set)
    deleted: set[K] = field(default_factory=set)
    updated: set[K] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.deleted or self.updated)


def diff_keys(
    source: set[K],
    destination: set[K],
    source_stamps: Optional[Mapping[K, Any]] = None,
    dest_stamps: Optional[Mapping[K, Any]] = None,
) -> RowKeyDiff[K]:
    """Compute the symmetric difference of two key sets.

    When both stamp maps are given, shared keys whose stamps differ are
    reported as ``updated``.
    """
    updated: set[K] = set()
    if source_stamps is not None and dest_stamps is not None:
        updated = {
            key
            for key in source & destination
            if source_stamps.get(key) != dest_stamps.get(key)
        }
    return RowKeyDiff(
        created=source - destination,
        deleted=destination - source,
        updated=updated,
    )


class RowIdentityReader:
    """Read the identity column values of a table.

    Args:
        client: Client for the database to read.
        quoter: Identifier quoter.
        key_columns: Per-table identity column overrides. These win over the
            built-in overrides, which win over the ``id`` default.
    """

    def __init__(
        self,
        client: SQLiteClient,
        quoter: Quoter = SQLITE_QUOTER,
        key_columns: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._client = client
        self._quote = quoter
        self._key_columns = dict(key_columns or {})

    def key_column(self, table: str) -> str:
        """Resolve the identity column for a table."""
        if table in self._key_columns:
            return self._key_columns[table]
        return BUILTIN_KEY_COLUMNS.get(table, DEFAULT_KEY_COLUMN)

    def read_keys(self, table: str, key_column: Optional[str] = None) -> set[Any]:
        """Return every identity value currently present in the table."""
        column = key_column or self.key_column(table)
        keys = set(
            self._client.fetch_column(
                f"SELECT {self._quote(column)} FROM {self._quote(table)}"
            )
        )
        logger.debug(f"[{self._client.label}] {table}: {len(keys)} keys")
        return keys

    def read_overview(
        self, table: str, stamp_column: str, key_column: Optional[str] = None
    ) -> dict[Any, Any]:
        """Return ``{key: stamp}`` for every row of the table."""
        column = key_column or self.key_column(table)
        _, rows = self._client.fetch_rows(
            f"SELECT {self._quote(column)}, {self._quote(stamp_column)} "
            f"FROM {self._quote(table)}"
        )
        return {key: stamp for key, stamp in rows}

    def has_column(self, table: str, column: str) -> bool:
        """Check whether the table declares a column."""
        rows = self._client.fetchall(f"PRAGMA table_info({self._quote(table)})")
        return any(row["name"] == column for row in rows)
