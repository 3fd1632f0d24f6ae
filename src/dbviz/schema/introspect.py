"""Engine adapter contract for schema introspection."""

from typing import Any, Optional, Protocol, runtime_checkable

from dbviz.schema.models import Schema, Table
from dbviz.types import EngineCapabilities


@runtime_checkable
class SchemaIntrospector(Protocol):
    """
    Reads catalog metadata for one engine and assembles schema snapshots.

    Semantics:
    - Only catalog queries are issued; never row data, never DDL/DML.
    - schema() without a database name is memoized per instance; an
      explicit database name always re-queries.
    - Missing optional features (e.g. no foreign key support) produce empty
      collections, not errors.
    - Query failures raise SchemaAccessError or PermissionDeniedError.
    """

    @property
    def database(self) -> str:
        """The database this adapter is bound to."""
        ...

    def schema(self, database: Optional[str] = None) -> Schema:
        """Return a full snapshot of the bound or the named database."""
        ...

    def table(self, name: str, database: Optional[str] = None) -> Optional[Table]:
        """Return one table, or None if it does not exist."""
        ...

    def table_names(self, database: Optional[str] = None) -> list[str]:
        """Return sorted, distinct table names."""
        ...

    def tables_with_foreign_keys(self) -> list[Table]:
        """Return tables of the bound database with outgoing foreign keys."""
        ...

    def is_empty(self) -> bool:
        """Return True if the bound database has no tables."""
        ...

    def database_names(self) -> list[str]:
        """Return every database visible to the connection, sorted."""
        ...

    def get_capabilities(self, connection: Any = None) -> EngineCapabilities:
        """Return engine version and feature flags."""
        ...

    def engine_name(self) -> str:
        """Return the fixed engine identifier, e.g. 'mysql'."""
        ...

    def is_supported(self, connection: Any) -> bool:
        """Return True if this adapter can talk to the connection's driver."""
        ...
