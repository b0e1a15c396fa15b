"""Apply schema changes to a destination database."""

import logging
import sqlite3

from litesync.client import SQLiteClient
from litesync.exceptions import SchemaApplyError, UnknownDiffKindError
from litesync.quoting import SQLITE_QUOTER, Quoter
from litesync.schema.diff import SchemaChange
from litesync.types import ChangeType

logger = logging.getLogger(__name__)


class SchemaApplier:
    """Execute schema changes against the destination.

    Altered objects are rebuilt: the destination object is dropped and the
    source definition executed again. No in-place ``ALTER`` is attempted.
    """

    def __init__(self, client: SQLiteClient, quoter: Quoter = SQLITE_QUOTER) -> None:
        self._client = client
        self._quote = quoter

    def statements(self, change: SchemaChange) -> list[str]:
        """Render the SQL statements for a single change."""
        generators = {
            ChangeType.CREATE_TABLE: self._gen_create,
            ChangeType.CREATE_INDEX: self._gen_create,
            ChangeType.ALTER_TABLE: self._gen_rebuild,
            ChangeType.ALTER_INDEX: self._gen_rebuild,
            ChangeType.DROP_TABLE: self._gen_drop,
            ChangeType.DROP_INDEX: self._gen_drop,
        }
        generator = generators.get(change.change_type)
        if generator is None:
            raise UnknownDiffKindError(change.change_type)
        return generator(change)

    def apply(self, changes: list[SchemaChange], skip_transaction: bool = False) -> None:
        """Apply all changes, in one transaction unless ``skip_transaction``.

        Raises:
            SchemaApplyError: If any statement fails. The transaction is
                rolled back before the error propagates.
            UnknownDiffKindError: If a change carries an unhandled type.
        """
        if not changes:
            logger.info("Schema is up to date.")
            return

        with self._client.transaction(skip=skip_transaction):
            for change in changes:
                statements = self.statements(change)
                logger.info(f"Applying {change.change_type.value}: {change.name}")
                try:
                    for stmt in statements:
                        self._client.execute(stmt)
                except sqlite3.Error as e:
                    raise SchemaApplyError(change, e) from e

        logger.info(f"Applied {len(changes)} schema change(s)")

    def _gen_create(self, change: SchemaChange) -> list[str]:
        return [self._definition(change)]

    def _gen_rebuild(self, change: SchemaChange) -> list[str]:
        return self._gen_drop(change) + [self._definition(change)]

    def _gen_drop(self, change: SchemaChange) -> list[str]:
        kind = change.change_type.kind.value.upper()
        return [f"DROP {kind} IF EXISTS {self._quote(change.name)}"]

    def _definition(self, change: SchemaChange) -> str:
        if change.obj is None:
            raise SchemaApplyError(
                change, ValueError("change carries no source definition")
            )
        return change.obj.sql
