"""litesync: mirror one SQLite database into another."""

from litesync.client import SQLiteClient, open_database
from litesync.config import Config
from litesync.exceptions import (
    ConfigError,
    ExportError,
    LitesyncError,
    ReadError,
    RowSyncError,
    SchemaApplyError,
    UnknownDiffKindError,
)
from litesync.quoting import Quoter
from litesync.runner import SyncReport, SyncRunner

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigError",
    "ExportError",
    "LitesyncError",
    "Quoter",
    "ReadError",
    "RowSyncError",
    "SQLiteClient",
    "SchemaApplyError",
    "SyncReport",
    "SyncRunner",
    "UnknownDiffKindError",
    "open_database",
]
