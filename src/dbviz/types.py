"""Core type definitions for dbviz."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional, TypeAlias

TableName: TypeAlias = str
ColumnName: TypeAlias = str
DatabaseName: TypeAlias = str
DriverName: TypeAlias = str

__all__ = [
    "TableName",
    "ColumnName",
    "DatabaseName",
    "DriverName",
    "ReferentialAction",
    "EngineCapabilities",
]


class ReferentialAction(str, Enum):
    """Foreign key ON DELETE / ON UPDATE actions as reported by catalogs."""

    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    NO_ACTION = "NO ACTION"

    @classmethod
    def normalize(cls, value: Optional[str]) -> str:
        """Return the catalog spelling of an action, RESTRICT when unreported."""
        if value is None or not str(value).strip():
            return cls.RESTRICT.value
        return str(value).strip().upper()


@dataclass(frozen=True)
class EngineCapabilities:
    """Closed description of what an engine adapter reports about its server."""

    engine: str
    version: str = "unknown"
    supports_foreign_keys: bool = False
    supports_views: bool = False
    max_table_name_length: Optional[int] = None
    max_column_name_length: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
