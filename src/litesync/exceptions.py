"""Exception classes for litesync."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from litesync.schema.diff import SchemaChange

__all__ = [
    "LitesyncError",
    "ReadError",
    "SchemaApplyError",
    "RowSyncError",
    "UnknownDiffKindError",
    "ExportError",
    "ConfigError",
]


class LitesyncError(Exception):
    """Base exception for litesync."""


class ReadError(LitesyncError):
    """A query against the source or destination database failed."""


class SchemaApplyError(LitesyncError):
    """A structural change could not be applied to the destination."""

    def __init__(self, change: "SchemaChange", cause: BaseException):
        self.change = change
        self.cause = cause
        super().__init__(
            f"Failed to apply {change.change_type.value} for '{change.name}': {cause}"
        )


class RowSyncError(LitesyncError):
    """A batched delete or copy failed while syncing a table."""

    def __init__(self, table: str, batch: list[Any], cause: BaseException):
        self.table = table
        self.batch = batch
        self.cause = cause
        super().__init__(
            f"Row sync failed for table '{table}' "
            f"(batch of {len(batch)} keys): {cause}"
        )


class UnknownDiffKindError(LitesyncError):
    """A diff entry carries a change type the applier does not handle."""

    def __init__(self, change_type: Any):
        self.change_type = change_type
        super().__init__(f"Unknown schema diff type: {change_type!r}")


class ExportError(LitesyncError):
    """Error exporting table data."""


class ConfigError(LitesyncError):
    """Error in configuration."""
