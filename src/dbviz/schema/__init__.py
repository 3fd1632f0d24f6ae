"""Schema snapshot and introspection modules."""

from dbviz.schema.introspect import SchemaIntrospector
from dbviz.schema.models import (
    Column,
    ForeignKey,
    Index,
    Schema,
    Table,
)

__all__ = [
    "Column",
    "ForeignKey",
    "Index",
    "Schema",
    "SchemaIntrospector",
    "Table",
]
