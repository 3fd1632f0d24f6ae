"""Schema snapshot classes.

Every class here is a frozen value object produced by an engine adapter in a
single pass. Sequences are stored as tuples so a snapshot cannot change after
construction, and nothing holds a connection.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from dbviz.types import ReferentialAction

PRIMARY_INDEX_NAME = "PRIMARY"


def _freeze(obj: object, name: str) -> None:
    object.__setattr__(obj, name, tuple(getattr(obj, name)))


@dataclass(frozen=True)
class Column:
    """Column definition."""

    name: str
    type: str
    nullable: bool = True
    default: Optional[str] = None
    auto_increment: bool = False
    comment: Optional[str] = None
    max_length: Optional[int] = None

    def __post_init__(self) -> None:
        """Strip whitespace from type. Use normalized_type for comparisons."""
        object.__setattr__(self, "type", self.type.strip())

    @property
    def normalized_type(self) -> str:
        """Return uppercase type for case-insensitive comparisons."""
        return self.type.upper()


@dataclass(frozen=True)
class Index:
    """Index definition. Column order is part of the index identity."""

    name: str
    columns: tuple[str, ...] = ()
    unique: bool = False
    primary: bool = False

    def __post_init__(self) -> None:
        _freeze(self, "columns")


@dataclass(frozen=True)
class ForeignKey:
    """
    Foreign key constraint.

    local_columns[i] references referenced_columns[i]; both sequences always
    have the same length.
    """

    name: str
    local_columns: tuple[str, ...]
    referenced_table: str
    referenced_columns: tuple[str, ...]
    on_delete: str = ReferentialAction.RESTRICT.value
    on_update: str = ReferentialAction.RESTRICT.value

    def __post_init__(self) -> None:
        _freeze(self, "local_columns")
        _freeze(self, "referenced_columns")
        if len(self.local_columns) != len(self.referenced_columns):
            raise ValueError(
                f"Foreign key '{self.name}' has {len(self.local_columns)} local "
                f"column(s) but {len(self.referenced_columns)} referenced column(s)"
            )
        object.__setattr__(
            self, "on_delete", ReferentialAction.normalize(self.on_delete)
        )
        object.__setattr__(
            self, "on_update", ReferentialAction.normalize(self.on_update)
        )

    def column_pairs(self) -> Iterator[tuple[str, str]]:
        """Yield (local, referenced) column pairs in constraint order."""
        return zip(self.local_columns, self.referenced_columns)


@dataclass(frozen=True)
class Table:
    """Table definition."""

    name: str
    schema: Optional[str] = None
    columns: tuple[Column, ...] = ()
    indexes: tuple[Index, ...] = ()
    foreign_keys: tuple[ForeignKey, ...] = ()
    comment: Optional[str] = None
    type: Optional[str] = None

    def __post_init__(self) -> None:
        _freeze(self, "columns")
        _freeze(self, "indexes")
        _freeze(self, "foreign_keys")

    def get_column(self, name: str) -> Optional[Column]:
        """Get a column by name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def column_names(self) -> list[str]:
        """Column names in ordinal order."""
        return [col.name for col in self.columns]

    def primary_key(self) -> Optional[Index]:
        """Get the primary index, if the table has one."""
        for index in self.indexes:
            if index.primary:
                return index
        return None

    def has_foreign_keys(self) -> bool:
        return len(self.foreign_keys) > 0


@dataclass(frozen=True)
class Schema:
    """Complete snapshot of one database."""

    name: str
    engine: str
    tables: tuple[Table, ...] = ()
    _table_map: dict[str, Table] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        _freeze(self, "tables")
        table_map: dict[str, Table] = {}
        for table in self.tables:
            if table.name in table_map:
                raise ValueError(
                    f"Duplicate table name '{table.name}' in schema '{self.name}'"
                )
            table_map[table.name] = table
        object.__setattr__(self, "_table_map", table_map)

    def __hash__(self) -> int:
        """Hash based on name and engine only."""
        return hash((self.name, self.engine))

    def get_table(self, name: str) -> Optional[Table]:
        """Get a table by name."""
        return self._table_map.get(name)

    def table_names(self) -> list[str]:
        """Get all table names, sorted."""
        return sorted(self._table_map)

    def sorted_tables(self) -> list[Table]:
        """Tables sorted by name."""
        return sorted(self.tables, key=lambda t: t.name)

    def tables_with_foreign_keys(self) -> list[Table]:
        """Tables owning at least one outgoing foreign key."""
        return [t for t in self.tables if t.has_foreign_keys()]

    def is_empty(self) -> bool:
        return not self.tables


def sort_by_name(items: Iterable) -> list:
    """Sort indexes, foreign keys or tables by their name attribute."""
    return sorted(items, key=lambda item: item.name)
