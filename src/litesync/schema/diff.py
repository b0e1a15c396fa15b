"""Compare schemas and generate changes."""

from dataclasses import dataclass, field
from typing import Optional

from litesync.schema.models import Column, Schema, SchemaObject, Table
from litesync.types import ChangeType, ColumnChangeType, ObjectKind


@dataclass
class ColumnChange:
    """A single column-level difference inside an altered table."""

    change_type: ColumnChangeType
    column_name: str
    column: Optional[Column] = None


@dataclass
class SchemaChange:
    """Represents a single schema change.

    ``obj`` carries the full source object for creates and alters, so the
    destination DDL can be regenerated without re-reading the source.
    """

    change_type: ChangeType
    name: str
    obj: Optional[SchemaObject] = None
    column_changes: list[ColumnChange] = field(default_factory=list)
    is_destructive: bool = False


class SchemaDiffer:
    """Compare two schemas and generate an ordered list of changes.

    Args:
        field_level: Recurse into column-level diffs for altered tables.
            When disabled, altered tables carry no column changes and only
            whole-definition text equality is used.
    """

    def __init__(self, field_level: bool = True) -> None:
        self.field_level = field_level

    def diff(self, source: Schema, destination: Schema) -> list[SchemaChange]:
        """Compare source to destination and return changes for destination.

        Creates and alters follow source order, drops follow destination
        order. Tables and indexes share one name space, so a destination
        object whose name is taken by a source object of the other kind is
        dropped before anything is created.
        """
        changes: list[SchemaChange] = []
        dest_index = {obj.identity: obj for obj in destination.objects}
        source_ids = {obj.identity for obj in source.objects}
        source_names = {obj.name for obj in source.objects}

        displaced = {
            obj.identity
            for obj in destination.objects
            if obj.identity not in source_ids and obj.name in source_names
        }
        changes.extend(
            self._dropped(obj) for obj in destination.objects if obj.identity in displaced
        )

        rebuilt_tables = {
            obj.name
            for obj in source.tables()
            if obj.identity in dest_index and not self._same(obj, dest_index[obj.identity])
        }

        for src_obj in source.objects:
            dest_obj = dest_index.get(src_obj.identity)
            if dest_obj is None:
                changes.append(
                    SchemaChange(
                        change_type=ChangeType.created(src_obj.kind),
                        name=src_obj.name,
                        obj=src_obj,
                    )
                )
            elif not self._same(src_obj, dest_obj):
                changes.append(self._altered(src_obj, dest_obj))
            elif src_obj.kind is ObjectKind.INDEX and src_obj.table_name in rebuilt_tables:
                # Dropping a table drops its indexes too.
                changes.append(
                    SchemaChange(
                        change_type=ChangeType.ALTER_INDEX,
                        name=src_obj.name,
                        obj=src_obj,
                    )
                )

        for dest_obj in destination.objects:
            if dest_obj.identity not in source_ids and dest_obj.identity not in displaced:
                changes.append(self._dropped(dest_obj))

        return changes

    def _dropped(self, obj: SchemaObject) -> SchemaChange:
        return SchemaChange(
            change_type=ChangeType.dropped(obj.kind),
            name=obj.name,
            is_destructive=obj.kind is ObjectKind.TABLE,
        )

    def _same(self, source: SchemaObject, destination: SchemaObject) -> bool:
        return source.normalized_sql == destination.normalized_sql

    def _altered(self, source: SchemaObject, destination: SchemaObject) -> SchemaChange:
        column_changes: list[ColumnChange] = []
        if (
            self.field_level
            and source.parsed is not None
            and destination.parsed is not None
        ):
            column_changes = diff_columns(source.parsed, destination.parsed)

        return SchemaChange(
            change_type=ChangeType.altered(source.kind),
            name=source.name,
            obj=source,
            column_changes=column_changes,
            is_destructive=source.kind is ObjectKind.TABLE,
        )


def diff_columns(source: Table, destination: Table) -> list[ColumnChange]:
    """Compare columns between two definitions of the same table.

    Nullability is ignored when deciding whether a shared column changed.
    """
    changes: list[ColumnChange] = []
    dest_cols = {c.name: c for c in destination.columns}
    source_names = {c.name for c in source.columns}

    for src_col in source.columns:
        dest_col = dest_cols.get(src_col.name)
        if dest_col is None:
            changes.append(
                ColumnChange(ColumnChangeType.ADD_COLUMN, src_col.name, src_col)
            )
        elif src_col.without_nullability() != dest_col.without_nullability():
            changes.append(
                ColumnChange(ColumnChangeType.ALTER_COLUMN, src_col.name, src_col)
            )

    for dest_col in destination.columns:
        if dest_col.name not in source_names:
            changes.append(ColumnChange(ColumnChangeType.DROP_COLUMN, dest_col.name))

    return changes
