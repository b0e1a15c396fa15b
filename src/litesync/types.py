"""Core type definitions for litesync."""

from enum import Enum
from typing import TypeAlias, Union

TableName: TypeAlias = str
ColumnName: TypeAlias = str
Key: TypeAlias = Union[int, float, str, bytes]

__all__ = [
    "TableName",
    "ColumnName",
    "Key",
    "ObjectKind",
    "ChangeType",
    "ColumnChangeType",
]


class ObjectKind(Enum):
    """Kinds of schema objects tracked in sqlite_master."""

    TABLE = "table"
    INDEX = "index"


class ChangeType(Enum):
    """Types of structural changes the differ can emit."""

    CREATE_TABLE = "create_table"
    DROP_TABLE = "drop_table"
    ALTER_TABLE = "alter_table"
    CREATE_INDEX = "create_index"
    DROP_INDEX = "drop_index"
    ALTER_INDEX = "alter_index"

    @classmethod
    def created(cls, kind: ObjectKind) -> "ChangeType":
        return cls.CREATE_TABLE if kind is ObjectKind.TABLE else cls.CREATE_INDEX

    @classmethod
    def altered(cls, kind: ObjectKind) -> "ChangeType":
        return cls.ALTER_TABLE if kind is ObjectKind.TABLE else cls.ALTER_INDEX

    @classmethod
    def dropped(cls, kind: ObjectKind) -> "ChangeType":
        return cls.DROP_TABLE if kind is ObjectKind.TABLE else cls.DROP_INDEX

    @property
    def kind(self) -> ObjectKind:
        """Object kind this change applies to."""
        if self.value.endswith("_table"):
            return ObjectKind.TABLE
        return ObjectKind.INDEX


class ColumnChangeType(Enum):
    """Types of column-level changes within an altered table."""

    ADD_COLUMN = "add_column"
    DROP_COLUMN = "drop_column"
    ALTER_COLUMN = "alter_column"
