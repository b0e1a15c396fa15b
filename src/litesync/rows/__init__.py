"""Row identity diffing and batched row sync."""

from litesync.rows.identity import RowIdentityReader, RowKeyDiff, diff_keys
from litesync.rows.sync import RowSyncApplier, TableSyncResult, batches

__all__ = [
    "RowIdentityReader",
    "RowKeyDiff",
    "RowSyncApplier",
    "TableSyncResult",
    "batches",
    "diff_keys",
]
