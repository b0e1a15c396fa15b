"""Schema introspection, diffing and application."""

from litesync.schema.apply import SchemaApplier
from litesync.schema.diff import ColumnChange, SchemaChange, SchemaDiffer
from litesync.schema.introspect import SchemaIntrospector
from litesync.schema.models import (
    Column,
    PrimaryKey,
    Schema,
    SchemaObject,
    Table,
)

__all__ = [
    "Column",
    "ColumnChange",
    "PrimaryKey",
    "Schema",
    "SchemaApplier",
    "SchemaChange",
    "SchemaDiffer",
    "SchemaIntrospector",
    "SchemaObject",
    "Table",
]
