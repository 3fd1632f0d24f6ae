"""Convert schema snapshots to plain dictionaries for structured output.

Each output field is declared once in a rule table with its key, accessor and
omission rule, so JSON and YAML output share one serialization.

Omission convention:
- name, type, nullable and columns are always present;
- optional scalars (schema, type, comment, default, maxLength, onDelete,
  onUpdate) are omitted when None or empty;
- boolean flags (autoIncrement, unique, primary) are omitted when false;
- indexes and foreignKeys are omitted when the table has none.
"""

from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Iterable, NamedTuple

from dbviz.schema.models import Column, ForeignKey, Index, Schema, Table, sort_by_name


class Omit(Enum):
    """When a field is left out of the output."""

    ALWAYS_EMIT = "always_emit"
    IF_NONE = "if_none"
    IF_FALSE = "if_false"
    IF_EMPTY = "if_empty"

    def drops(self, value: Any) -> bool:
        if self is Omit.ALWAYS_EMIT:
            return False
        if self is Omit.IF_NONE:
            return value is None
        if self is Omit.IF_FALSE:
            return value is False or value is None
        return value is None or len(value) == 0


class Field(NamedTuple):
    key: str
    get: Callable[[Any], Any]
    omit: Omit


def _names(attr: str) -> Callable[[Any], list[str]]:
    getter = attrgetter(attr)
    return lambda obj: list(getter(obj))


COLUMN_FIELDS: tuple[Field, ...] = (
    Field("name", attrgetter("name"), Omit.ALWAYS_EMIT),
    Field("type", attrgetter("type"), Omit.ALWAYS_EMIT),
    Field("nullable", attrgetter("nullable"), Omit.ALWAYS_EMIT),
    Field("default", attrgetter("default"), Omit.IF_NONE),
    Field("autoIncrement", attrgetter("auto_increment"), Omit.IF_FALSE),
    Field("maxLength", attrgetter("max_length"), Omit.IF_NONE),
    Field("comment", attrgetter("comment"), Omit.IF_EMPTY),
)

INDEX_FIELDS: tuple[Field, ...] = (
    Field("name", attrgetter("name"), Omit.ALWAYS_EMIT),
    Field("columns", _names("columns"), Omit.ALWAYS_EMIT),
    Field("unique", attrgetter("unique"), Omit.IF_FALSE),
    Field("primary", attrgetter("primary"), Omit.IF_FALSE),
)

FOREIGN_KEY_FIELDS: tuple[Field, ...] = (
    Field("name", attrgetter("name"), Omit.ALWAYS_EMIT),
    Field("localColumns", _names("local_columns"), Omit.ALWAYS_EMIT),
    Field("referencedTable", attrgetter("referenced_table"), Omit.ALWAYS_EMIT),
    Field("referencedColumns", _names("referenced_columns"), Omit.ALWAYS_EMIT),
    Field("onDelete", attrgetter("on_delete"), Omit.IF_EMPTY),
    Field("onUpdate", attrgetter("on_update"), Omit.IF_EMPTY),
)

TABLE_FIELDS: tuple[Field, ...] = (
    Field("name", attrgetter("name"), Omit.ALWAYS_EMIT),
    Field("schema", attrgetter("schema"), Omit.IF_EMPTY),
    Field("type", attrgetter("type"), Omit.IF_EMPTY),
    Field("comment", attrgetter("comment"), Omit.IF_EMPTY),
    Field(
        "columns",
        lambda t: [column_to_dict(c) for c in t.columns],
        Omit.ALWAYS_EMIT,
    ),
    Field(
        "indexes",
        lambda t: [index_to_dict(i) for i in sort_by_name(t.indexes)],
        Omit.IF_EMPTY,
    ),
    Field(
        "foreignKeys",
        lambda t: [foreign_key_to_dict(fk) for fk in sort_by_name(t.foreign_keys)],
        Omit.IF_EMPTY,
    ),
)


def _apply(obj: Any, fields: Iterable[Field]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for f in fields:
        value = f.get(obj)
        if not f.omit.drops(value):
            data[f.key] = value
    return data


def column_to_dict(column: Column) -> dict[str, Any]:
    return _apply(column, COLUMN_FIELDS)


def index_to_dict(index: Index) -> dict[str, Any]:
    return _apply(index, INDEX_FIELDS)


def foreign_key_to_dict(foreign_key: ForeignKey) -> dict[str, Any]:
    return _apply(foreign_key, FOREIGN_KEY_FIELDS)


def table_to_dict(table: Table) -> dict[str, Any]:
    """Convert a Table to a dictionary; indexes and foreign keys sorted by name."""
    return _apply(table, TABLE_FIELDS)


def schema_to_dict(schema: Schema) -> dict[str, Any]:
    """Convert a Schema to the structured document, tables sorted by name."""
    return {
        "schema": {
            "name": schema.name,
            "engine": schema.engine,
            "tables": [table_to_dict(t) for t in schema.sorted_tables()],
        }
    }
