"""Command-line interface for litesync."""

import argparse
import logging
import sys
from contextlib import closing
from pathlib import Path

from litesync.client import SQLiteClient, open_database
from litesync.config import Config, parse_key_columns
from litesync.data.exporter import TableExporter
from litesync.data.progress import TqdmProgress
from litesync.exceptions import ConfigError
from litesync.runner import SyncRunner
from litesync.schema.apply import SchemaApplier
from litesync.schema.diff import SchemaDiffer
from litesync.schema.exporter import export_schema_to_directory
from litesync.schema.introspect import SchemaIntrospector


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="litesync",
        description="Mirror one SQLite database into another",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, help="Path to litesync.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    diff_parser = subparsers.add_parser("diff", help="Show schema and row diff")
    diff_parser.add_argument("source", type=Path)
    diff_parser.add_argument("destination", type=Path)
    diff_parser.add_argument(
        "--sql", action="store_true", help="Print the statements sync would run"
    )
    diff_parser.add_argument(
        "--text-only",
        action="store_true",
        help="Compare definition text only, skip column-level detail",
    )
    diff_parser.add_argument(
        "--rows", action="store_true", help="Also diff row keys of every table"
    )

    sync_parser = subparsers.add_parser("sync", help="Sync destination to source")
    sync_parser.add_argument("source", type=Path)
    sync_parser.add_argument("destination", type=Path)
    sync_parser.add_argument("--schema-only", action="store_true")
    sync_parser.add_argument("--batch-size", type=int)
    sync_parser.add_argument("--tables", nargs="+", help="Only sync these tables' rows")
    sync_parser.add_argument(
        "--key-columns", help="Identity overrides, e.g. tags=slug,logs=uuid"
    )
    sync_parser.add_argument(
        "--updated-at", help="Refresh shared rows whose COLUMN value differs"
    )

    export_parser = subparsers.add_parser("export", help="Dump tables to JSON lines")
    export_parser.add_argument("database", type=Path)
    export_parser.add_argument("output_dir", type=Path, nargs="?")
    export_parser.add_argument("--tables", nargs="+")
    export_parser.add_argument("--no-progress", action="store_true")

    schema_parser = subparsers.add_parser("schema", help="Write table definitions as YAML")
    schema_parser.add_argument("database", type=Path)
    schema_parser.add_argument("output_dir", type=Path)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s"
    )

    commands = {
        "diff": cmd_diff,
        "sync": cmd_sync,
        "export": cmd_export,
        "schema": cmd_schema,
    }
    return commands[args.command](args)


def _require_file(path: Path) -> None:
    if not path.is_file():
        raise ConfigError(f"Database file not found: {path}")


def cmd_diff(args: argparse.Namespace) -> int:
    """Show what sync would change, without touching the destination."""
    try:
        _require_file(args.source)
        _require_file(args.destination)
        config = Config.from_env(config_path=getattr(args, "config", None))

        with closing(open_database(args.source, readonly=True)) as src_conn, closing(
            open_database(args.destination, readonly=True)
        ) as dest_conn:
            source = SQLiteClient(src_conn, "source")
            destination = SQLiteClient(dest_conn, "destination")
            runner = SyncRunner(
                source,
                destination,
                config,
                differ=SchemaDiffer(field_level=not args.text_only),
            )
            changes = runner.plan_schema()

            if not changes:
                print("No schema changes detected")
            else:
                print(f"Found {len(changes)} schema changes:")
                applier = SchemaApplier(destination)
                for change in changes:
                    prefix = "[DESTRUCTIVE] " if change.is_destructive else ""
                    print(f"  {prefix}{change.change_type.value}: {change.name}")
                    for col in change.column_changes:
                        print(f"      {col.change_type.value}: {col.column_name}")
                    if args.sql:
                        for stmt in applier.statements(change):
                            print(f"    {stmt};")

            if getattr(args, "rows", False):
                shared = SchemaIntrospector(destination).table_names()
                for table in runner.table_names():
                    if table not in shared:
                        print(f"  {table}: missing in destination")
                        continue
                    _, diff = runner.diff_rows(table)
                    print(
                        f"  {table}: {len(diff.created)} created, "
                        f"{len(diff.deleted)} deleted, {len(diff.updated)} updated"
                    )
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Diff error: {e}", file=sys.stderr)
        return 1


def cmd_sync(args: argparse.Namespace) -> int:
    """Sync schema and rows from source to destination."""
    try:
        _require_file(args.source)
        key_columns = parse_key_columns(args.key_columns) if args.key_columns else None
        config = Config.from_env(
            batch_size=args.batch_size,
            key_columns=key_columns,
            updated_at_column=args.updated_at,
            tables=args.tables,
            config_path=getattr(args, "config", None),
        )

        with closing(open_database(args.source, readonly=True)) as src_conn, closing(
            open_database(args.destination)
        ) as dest_conn:
            runner = SyncRunner(
                SQLiteClient(src_conn, "source"),
                SQLiteClient(dest_conn, "destination"),
                config,
            )
            report = runner.run(schema_only=args.schema_only)

        print(f"Applied {len(report.schema_changes)} schema change(s)")
        for result in report.tables:
            if result.changed:
                print(
                    f"  {result.table}: -{result.deleted} +{result.inserted} "
                    f"~{result.updated}"
                )
        if not args.schema_only:
            print(f"Synced {report.rows_changed} row(s) across {len(report.tables)} table(s)")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Sync error: {e}", file=sys.stderr)
        return 1


def cmd_export(args: argparse.Namespace) -> int:
    """Dump tables to ``<dir>/<table>`` JSON-lines files."""
    try:
        _require_file(args.database)
        config = Config.from_env(
            tables=args.tables, config_path=getattr(args, "config", None)
        )
        output_dir = args.output_dir or Path(config.export_dir)

        with closing(open_database(args.database, readonly=True)) as conn:
            exporter = TableExporter(
                SQLiteClient(conn, "source"),
                progress=TqdmProgress(disable=args.no_progress),
            )
            results = exporter.export_all(output_dir, config.tables)

        for result in results:
            print(f"  {result.table}: {result.rows} rows -> {result.path}")
        print(f"Exported {len(results)} table(s) to {output_dir}")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Export error: {e}", file=sys.stderr)
        return 1


def cmd_schema(args: argparse.Namespace) -> int:
    """Write a YAML snapshot of the database's table definitions."""
    try:
        _require_file(args.database)
        with closing(open_database(args.database, readonly=True)) as conn:
            schema = SchemaIntrospector(SQLiteClient(conn, "source")).introspect_schema()

        created = export_schema_to_directory(schema, args.output_dir)
        print(f"Wrote {len(created)} table definition(s) to {args.output_dir}")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Schema error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
