"""Export schema snapshots to YAML files."""

from pathlib import Path
from typing import Any

import yaml

from litesync.schema.models import Column, Schema, Table


def table_to_dict(table: Table, indexes: list[dict[str, str]] | None = None) -> dict[str, Any]:
    """Convert a Table model to a dictionary suitable for YAML export."""
    data: dict[str, Any] = {"table": table.name}
    data["columns"] = [_column_to_dict(col) for col in table.columns]

    if table.primary_key:
        data["primary_key"] = {"columns": table.primary_key.columns}

    if indexes:
        data["indexes"] = indexes

    return data


def _column_to_dict(col: Column) -> dict[str, Any]:
    """Convert a Column model to a dictionary."""
    data: dict[str, Any] = {"name": col.name, "type": col.type}

    if not col.nullable:
        data["nullable"] = False

    if col.default is not None:
        data["default"] = col.default

    return data


def export_table_yaml(table: Table, indexes: list[dict[str, str]] | None = None) -> str:
    """Export a single table to YAML string."""
    data = table_to_dict(table, indexes)
    return yaml.dump(
        data, default_flow_style=False, sort_keys=False, allow_unicode=True
    )


def export_schema_to_directory(schema: Schema, output_dir: Path) -> list[Path]:
    """Export every parsed table in a schema to its own YAML file.

    Indexes are listed under the table they belong to. Returns list of
    created file paths.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    created_files = []

    for obj in sorted(schema.tables(), key=lambda o: o.name):
        if obj.parsed is None:
            continue

        indexes = [
            {"name": idx.name, "sql": idx.normalized_sql}
            for idx in schema.indexes()
            if idx.table_name == obj.name
        ]
        file_path = output_dir / f"{obj.name}.yaml"
        file_path.write_text(export_table_yaml(obj.parsed, indexes), encoding="utf-8")
        created_files.append(file_path)

    return created_files
