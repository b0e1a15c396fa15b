"""Table data export."""

from litesync.data.exporter import ExportResult, TableExporter, encode_record
from litesync.data.progress import NullProgress, ProgressSink, TqdmProgress

__all__ = [
    "ExportResult",
    "NullProgress",
    "ProgressSink",
    "TableExporter",
    "TqdmProgress",
    "encode_record",
]
