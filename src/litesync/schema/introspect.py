"""Schema introspection from sqlite_master using SQLiteClient."""

import logging
from typing import Any, Optional, Protocol

from litesync.quoting import SQLITE_QUOTER, Quoter
from litesync.schema.models import Column, PrimaryKey, Schema, SchemaObject, Table
from litesync.types import ObjectKind

logger = logging.getLogger(__name__)

SEQUENCE_TABLE = "sqlite_sequence"
INTERNAL_PREFIX = "sqlite_"


class SQLClient(Protocol):
    """Protocol for SQL client used by introspector."""

    def fetchall(self, sql: str, params: Any = ()) -> list[dict[str, Any]]: ...


class SchemaIntrospector:
    """Introspect schema objects and table definitions of one database."""

    def __init__(self, client: SQLClient, quoter: Quoter = SQLITE_QUOTER) -> None:
        self._client = client
        self._quote = quoter

    def introspect_schema(self) -> Schema:
        """Read every table and index that has a stored definition.

        Objects without definition text (implicit auto-indexes) and
        engine-internal ``sqlite_*`` objects are skipped.
        """
        rows = self._client.fetchall(
            """
            SELECT type, name, tbl_name, sql
            FROM sqlite_master
            WHERE sql IS NOT NULL
              AND type IN ('table', 'index')
            ORDER BY CASE type WHEN 'table' THEN 0 ELSE 1 END, rowid
            """
        )
        objects = []
        for row in rows:
            name = row["name"]
            if name.startswith(INTERNAL_PREFIX):
                continue
            kind = ObjectKind(row["type"])
            parsed = self.introspect_table(name) if kind is ObjectKind.TABLE else None
            objects.append(
                SchemaObject(
                    kind=kind,
                    name=name,
                    sql=row["sql"],
                    table_name=row["tbl_name"],
                    parsed=parsed,
                )
            )
        logger.debug(f"Introspected {len(objects)} schema objects")
        return Schema(objects=objects)

    def introspect_table(self, table_name: str) -> Optional[Table]:
        """Parse a table definition. Returns None if the table does not exist."""
        rows = self._client.fetchall(f"PRAGMA table_info({self._quote(table_name)})")
        if not rows:
            return None

        columns = [
            Column(
                name=row["name"],
                type=row["type"] or "",
                nullable=not row["notnull"],
                default=row["dflt_value"],
                primary_key_position=row["pk"],
            )
            for row in rows
        ]
        pk_columns = sorted(
            (c for c in columns if c.primary_key_position),
            key=lambda c: c.primary_key_position,
        )
        primary_key = PrimaryKey(columns=[c.name for c in pk_columns]) if pk_columns else None
        return Table(name=table_name, columns=columns, primary_key=primary_key)

    def table_names(self, include_sequence: bool = True) -> list[str]:
        """List tables whose rows take part in row sync.

        ``sqlite_sequence`` is the only internal table included, since it
        carries AUTOINCREMENT counters that belong to the mirrored data. It is
        listed last so its counters are copied after the rows they count.
        """
        rows = self._client.fetchall(
            """
            SELECT name
            FROM sqlite_master
            WHERE type = 'table'
              AND sql IS NOT NULL
            ORDER BY rowid
            """
        )
        names = [
            row["name"] for row in rows if not row["name"].startswith(INTERNAL_PREFIX)
        ]
        if include_sequence and any(row["name"] == SEQUENCE_TABLE for row in rows):
            names.append(SEQUENCE_TABLE)
        return names
