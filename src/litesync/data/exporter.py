"""Export table rows to newline-delimited JSON snapshot files."""

import json
import logging
import math
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from litesync.client import SQLiteClient
from litesync.data.progress import NullProgress, ProgressSink
from litesync.exceptions import ExportError, ReadError
from litesync.quoting import SQLITE_QUOTER, Quoter
from litesync.schema.introspect import SchemaIntrospector

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Outcome of exporting one table."""

    table: str
    path: Path
    rows: int


def _encode_value(value: Any) -> Any:
    """JSON fallback for values json cannot encode natively (BLOBs)."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _finite(value: Any) -> Any:
    """Spell out REAL infinities, which JSON has no literal for."""
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value


def encode_record(row: tuple) -> str:
    """Serialize one row as a positional JSON array line."""
    values = [_finite(value) for value in row]
    return (
        json.dumps(values, ensure_ascii=False, allow_nan=False, default=_encode_value)
        + "\n"
    )


class TableExporter:
    """Stream full table contents to ``<dir>/<table>`` files.

    Each run truncates the target file. A file left behind by a failed run
    carries no completion marker and must be treated as invalid.
    """

    def __init__(
        self,
        client: SQLiteClient,
        quoter: Quoter = SQLITE_QUOTER,
        progress: Optional[ProgressSink] = None,
    ) -> None:
        self._client = client
        self._quote = quoter
        self._progress = progress or NullProgress()

    def export_table(self, table: str, output_dir: Path) -> ExportResult:
        """Write every row of ``table`` to ``output_dir / table``.

        Raises:
            ReadError: If counting or reading the table fails.
            ExportError: If the file cannot be written.
        """
        output_dir = Path(output_dir)
        path = output_dir / table
        total = self._client.fetch_value(f"SELECT COUNT(*) FROM {self._quote(table)}") or 0
        _, rows = self._client.iterate(f"SELECT * FROM {self._quote(table)}")

        self._progress.start(table, total)
        done = 0
        reported = 0
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                for row in rows:
                    f.write(encode_record(row))
                    done += 1
                    if total and (done - reported) * 100 > total:
                        self._progress.update(done)
                        reported = done
            self._progress.update(done)
        except OSError as e:
            raise ExportError(f"Failed to export table '{table}' to {path}: {e}") from e
        except sqlite3.Error as e:
            raise ReadError(f"Reading table '{table}' failed mid-export: {e}") from e
        finally:
            self._progress.close()

        logger.info(f"Exported {done} row(s) from {table} to {path}")
        return ExportResult(table=table, path=path, rows=done)

    def export_all(
        self, output_dir: Path, tables: Optional[list[str]] = None
    ) -> list[ExportResult]:
        """Export the given tables, or every table of the database."""
        if tables is None:
            tables = SchemaIntrospector(self._client, self._quote).table_names()
        return [self.export_table(name, output_dir) for name in tables]
