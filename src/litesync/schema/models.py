"""Schema representation classes."""

import re
from dataclasses import dataclass, field, replace
from typing import Optional

from litesync.types import ObjectKind

_WHITESPACE = re.compile(r"\s+")


def normalize_sql(sql: str) -> str:
    """Collapse whitespace runs so formatting-only edits compare equal."""
    return _WHITESPACE.sub(" ", sql).strip()


@dataclass
class Column:
    """Column definition as reported by the engine's own DDL parser."""

    name: str
    type: str
    nullable: bool = True
    default: Optional[str] = None
    primary_key_position: int = 0

    def __post_init__(self) -> None:
        """Strip whitespace from type. Use normalized_type for comparisons."""
        self.type = self.type.strip()

    @property
    def normalized_type(self) -> str:
        """Return uppercase type for case-insensitive comparisons."""
        return self.type.upper()

    def without_nullability(self) -> "Column":
        """Copy with nullability normalized away.

        Nullability reported for a column can differ between two otherwise
        identical definitions (e.g. implicit NOT NULL on primary keys), so
        column comparison ignores it.
        """
        return replace(self, nullable=True, type=self.normalized_type)


@dataclass
class PrimaryKey:
    """Primary key definition."""

    columns: list[str]


@dataclass
class Table:
    """Parsed table definition."""

    name: str
    columns: list[Column]
    primary_key: Optional[PrimaryKey] = None

    def get_column(self, name: str) -> Optional[Column]:
        """Get a column by name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]


@dataclass
class SchemaObject:
    """A named object from sqlite_master with its defining statement."""

    kind: ObjectKind
    name: str
    sql: str
    table_name: str
    parsed: Optional[Table] = None

    @property
    def identity(self) -> tuple[ObjectKind, str]:
        return (self.kind, self.name)

    @property
    def normalized_sql(self) -> str:
        return normalize_sql(self.sql)


@dataclass
class Schema:
    """Point-in-time structural snapshot of one database.

    Objects are kept in reader order: tables first, then indexes.
    """

    objects: list[SchemaObject] = field(default_factory=list)

    def get(self, kind: ObjectKind, name: str) -> Optional[SchemaObject]:
        """Get an object by identity."""
        for obj in self.objects:
            if obj.kind is kind and obj.name == name:
                return obj
        return None

    def get_table(self, name: str) -> Optional[Table]:
        """Get a parsed table definition by name."""
        obj = self.get(ObjectKind.TABLE, name)
        return obj.parsed if obj is not None else None

    def tables(self) -> list[SchemaObject]:
        return [o for o in self.objects if o.kind is ObjectKind.TABLE]

    def indexes(self) -> list[SchemaObject]:
        return [o for o in self.objects if o.kind is ObjectKind.INDEX]

    def table_names(self) -> set[str]:
        """Get all table names."""
        return {o.name for o in self.tables()}
