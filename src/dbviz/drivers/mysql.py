"""MySQL / MariaDB schema introspection via INFORMATION_SCHEMA."""

import logging
from typing import Any, Optional

from dbviz.client import CatalogClient, detect_driver
from dbviz.exceptions import (
    InvalidConnectionError,
    PermissionDeniedError,
    SchemaAccessError,
)
from dbviz.schema.models import Column, ForeignKey, Index, Schema, Table
from dbviz.types import EngineCapabilities

logger = logging.getLogger(__name__)


class MySQLAdapter:
    """Introspect a MySQL or MariaDB database.

    All reads go against INFORMATION_SCHEMA views and every database or table
    name reaches the server as a bound parameter. Nothing here reads row data.

    Primary key rule: an index is primary when TABLE_CONSTRAINTS reports it as
    the PRIMARY KEY constraint. When the catalog reports no constraint for an
    index, the reserved index name PRIMARY decides.

    Without a database name the adapter binds to the connection's current
    database on first use, so database_names() and get_capabilities() work on
    a connection with no database selected.
    """

    ENGINE = "mysql"
    PRIMARY_INDEX_NAME = "PRIMARY"
    MAX_IDENTIFIER_LENGTH = 64

    # ER_DBACCESS_DENIED_ERROR, ER_ACCESS_DENIED_ERROR, ER_TABLEACCESS_DENIED_ERROR,
    # ER_COLUMNACCESS_DENIED_ERROR, ER_SPECIFIC_ACCESS_DENIED_ERROR,
    # ER_PROCACCESS_DENIED_ERROR
    PERMISSION_ERROR_CODES = frozenset({1044, 1045, 1142, 1143, 1227, 1370})
    PERMISSION_SQLSTATES = frozenset({"28000"})

    _VALIDATION_SQL = "SELECT 1 FROM INFORMATION_SCHEMA.SCHEMATA LIMIT 1"

    _CURRENT_DATABASE_SQL = "SELECT DATABASE() AS name"

    _VERSION_SQL = "SELECT VERSION() AS version"

    _DATABASES_SQL = """
        SELECT SCHEMA_NAME AS schema_name
        FROM INFORMATION_SCHEMA.SCHEMATA
        ORDER BY SCHEMA_NAME
    """

    _TABLE_NAMES_SQL = """
        SELECT DISTINCT TABLE_NAME AS table_name
        FROM INFORMATION_SCHEMA.TABLES
        WHERE TABLE_SCHEMA = %s
        ORDER BY TABLE_NAME
    """

    _TABLE_INFO_SQL = """
        SELECT TABLE_NAME AS table_name,
               TABLE_COMMENT AS table_comment,
               TABLE_TYPE AS table_type
        FROM INFORMATION_SCHEMA.TABLES
        WHERE TABLE_SCHEMA = %s
          AND TABLE_NAME = %s
    """

    _COLUMNS_SQL = """
        SELECT COLUMN_NAME AS column_name,
               COLUMN_TYPE AS column_type,
               IS_NULLABLE AS is_nullable,
               COLUMN_DEFAULT AS column_default,
               EXTRA AS extra,
               COLUMN_COMMENT AS column_comment,
               CHARACTER_MAXIMUM_LENGTH AS character_maximum_length
        FROM INFORMATION_SCHEMA.COLUMNS
        WHERE TABLE_SCHEMA = %s
          AND TABLE_NAME = %s
        ORDER BY ORDINAL_POSITION
    """

    _INDEXES_SQL = """
        SELECT s.INDEX_NAME AS index_name,
               s.COLUMN_NAME AS column_name,
               s.NON_UNIQUE AS non_unique,
               s.SEQ_IN_INDEX AS seq_in_index,
               tc.CONSTRAINT_TYPE AS constraint_type
        FROM INFORMATION_SCHEMA.STATISTICS s
        LEFT JOIN INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
          ON tc.TABLE_SCHEMA = s.TABLE_SCHEMA
         AND tc.TABLE_NAME = s.TABLE_NAME
         AND tc.CONSTRAINT_NAME = s.INDEX_NAME
        WHERE s.TABLE_SCHEMA = %s
          AND s.TABLE_NAME = %s
        ORDER BY s.INDEX_NAME, s.SEQ_IN_INDEX
    """

    _FOREIGN_KEYS_SQL = """
        SELECT kcu.CONSTRAINT_NAME AS constraint_name,
               kcu.COLUMN_NAME AS column_name,
               kcu.REFERENCED_TABLE_NAME AS referenced_table_name,
               kcu.REFERENCED_COLUMN_NAME AS referenced_column_name,
               rc.UPDATE_RULE AS update_rule,
               rc.DELETE_RULE AS delete_rule
        FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu
        JOIN INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc
          ON rc.CONSTRAINT_SCHEMA = kcu.CONSTRAINT_SCHEMA
         AND rc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME
        WHERE kcu.TABLE_SCHEMA = %s
          AND kcu.TABLE_NAME = %s
          AND kcu.REFERENCED_TABLE_NAME IS NOT NULL
        ORDER BY kcu.CONSTRAINT_NAME, kcu.ORDINAL_POSITION
    """

    def __init__(self, connection: Any, database: Optional[str] = None) -> None:
        self._connection = connection
        self._client = CatalogClient(connection)
        self._database: Optional[str] = database
        self._cached_schema: Optional[Schema] = None
        self._validate_connection()

    @property
    def database(self) -> str:
        """The bound database; the connection's current one when none was given.

        Raises:
            InvalidConnectionError: No database given and none selected.
        """
        if self._database is None:
            self._database = self._current_database()
        return self._database

    def engine_name(self) -> str:
        return self.ENGINE

    def is_supported(self, connection: Any) -> bool:
        try:
            return detect_driver(connection) == self.ENGINE
        except Exception:
            return False

    def get_capabilities(self, connection: Any = None) -> EngineCapabilities:
        """Report server version and static MySQL feature flags.

        Reading the version is best-effort and falls back to "unknown".
        """
        client = CatalogClient(connection) if connection is not None else self._client
        try:
            version = client.fetchvalue(self._VERSION_SQL)
        except Exception as exc:
            logger.warning(f"Could not read MySQL server version: {exc}")
            version = None

        return EngineCapabilities(
            engine=self.ENGINE,
            version=str(version) if version else "unknown",
            supports_foreign_keys=True,
            supports_views=True,
            max_table_name_length=self.MAX_IDENTIFIER_LENGTH,
            max_column_name_length=self.MAX_IDENTIFIER_LENGTH,
        )

    def schema(self, database: Optional[str] = None) -> Schema:
        """Introspect every table of the bound (or the named) database."""
        if database is None and self._cached_schema is not None:
            return self._cached_schema

        target = database or self.database
        tables = []
        for name in self.table_names(target):
            table = self.table(name, target)
            if table is not None:
                tables.append(table)

        schema = Schema(name=target, engine=self.ENGINE, tables=tables)
        logger.info(f"Introspected {len(tables)} tables in database '{target}'")

        if database is None:
            self._cached_schema = schema
        return schema

    def table(self, name: str, database: Optional[str] = None) -> Optional[Table]:
        """Introspect a single table. Returns None if it does not exist."""
        target = database or self.database
        rows = self._query(
            self._TABLE_INFO_SQL,
            (target, name),
            operation="read table metadata",
            table=name,
        )
        info = next((r for r in rows if r.get("table_name") == name), None)
        if info is None:
            return None

        return Table(
            name=name,
            schema=target,
            columns=self._fetch_columns(target, name),
            indexes=self._fetch_indexes(target, name),
            foreign_keys=self._fetch_foreign_keys(target, name),
            comment=info.get("table_comment") or None,
            type=info.get("table_type"),
        )

    def table_names(self, database: Optional[str] = None) -> list[str]:
        target = database or self.database
        rows = self._query(self._TABLE_NAMES_SQL, (target,), operation="list tables")
        return sorted({row["table_name"] for row in rows})

    def tables_with_foreign_keys(self) -> list[Table]:
        return self.schema().tables_with_foreign_keys()

    def is_empty(self) -> bool:
        return len(self.table_names()) == 0

    def database_names(self) -> list[str]:
        rows = self._query(self._DATABASES_SQL, (), operation="list databases")
        return sorted({row["schema_name"] for row in rows})

    def _fetch_columns(self, database: str, table_name: str) -> list[Column]:
        rows = self._query(
            self._COLUMNS_SQL,
            (database, table_name),
            operation="extract columns",
            table=table_name,
        )
        columns = []
        for row in rows:
            default = row.get("column_default")
            max_length = row.get("character_maximum_length")
            columns.append(
                Column(
                    name=row["column_name"],
                    type=row["column_type"],
                    nullable=row.get("is_nullable") == "YES",
                    default=str(default) if default is not None else None,
                    auto_increment="auto_increment" in (row.get("extra") or "").lower(),
                    comment=row.get("column_comment") or None,
                    max_length=int(max_length) if max_length else None,
                )
            )
        return columns

    def _fetch_indexes(self, database: str, table_name: str) -> list[Index]:
        """Fold one-row-per-column STATISTICS rows into one Index per name."""
        rows = self._query(
            self._INDEXES_SQL,
            (database, table_name),
            operation="extract indexes",
            table=table_name,
        )

        groups: dict[str, dict[str, Any]] = {}
        for row in rows:
            index_name = row["index_name"]
            group = groups.setdefault(
                index_name,
                {
                    "columns": {},
                    "non_unique": int(row.get("non_unique") or 0),
                    "constraint_types": set(),
                },
            )
            # A name shared by several constraints repeats the same column rows.
            seq = row.get("seq_in_index")
            if seq not in group["columns"] and row.get("column_name") is not None:
                group["columns"][seq] = row["column_name"]
            if row.get("constraint_type"):
                group["constraint_types"].add(str(row["constraint_type"]).upper())

        indexes = []
        for index_name, group in groups.items():
            if group["constraint_types"]:
                primary = "PRIMARY KEY" in group["constraint_types"]
            else:
                primary = index_name == self.PRIMARY_INDEX_NAME
            indexes.append(
                Index(
                    name=index_name,
                    columns=list(group["columns"].values()),
                    unique=group["non_unique"] == 0,
                    primary=primary,
                )
            )
        return indexes

    def _fetch_foreign_keys(self, database: str, table_name: str) -> list[ForeignKey]:
        """Fold KEY_COLUMN_USAGE rows into one ForeignKey per constraint."""
        rows = self._query(
            self._FOREIGN_KEYS_SQL,
            (database, table_name),
            operation="extract foreign keys",
            table=table_name,
        )

        groups: dict[str, dict[str, Any]] = {}
        for row in rows:
            group = groups.setdefault(
                row["constraint_name"],
                {
                    "local_columns": [],
                    "referenced_table": row["referenced_table_name"],
                    "referenced_columns": [],
                    "on_update": row.get("update_rule"),
                    "on_delete": row.get("delete_rule"),
                },
            )
            group["local_columns"].append(row["column_name"])
            group["referenced_columns"].append(row["referenced_column_name"])

        return [
            ForeignKey(
                name=name,
                local_columns=group["local_columns"],
                referenced_table=group["referenced_table"],
                referenced_columns=group["referenced_columns"],
                on_delete=group["on_delete"],
                on_update=group["on_update"],
            )
            for name, group in groups.items()
        ]

    def _query(
        self,
        sql: str,
        params: tuple,
        operation: str,
        table: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        try:
            return self._client.fetchall(sql, params)
        except Exception as exc:
            raise self._wrap_error(exc, operation, table) from exc

    def _wrap_error(
        self, exc: Exception, operation: str, table: Optional[str]
    ) -> Exception:
        target = f" for table '{table}'" if table else ""
        if self.is_permission_error(exc):
            scope = f" in database '{self._database}'" if self._database else ""
            return PermissionDeniedError(
                f"Permission denied: cannot {operation}{target}{scope}: {exc}",
                table=table,
                operation=operation,
            )
        return SchemaAccessError(
            f"Failed to {operation}{target}: {exc}",
            table=table,
            operation=operation,
        )

    @classmethod
    def is_permission_error(cls, exc: BaseException) -> bool:
        """Classify a driver error as a catalog privilege failure.

        pymysql and MySQLdb carry the server error number in args[0];
        mysql-connector exposes errno and sqlstate attributes.
        """
        errno = getattr(exc, "errno", None)
        if errno is None and exc.args and isinstance(exc.args[0], int):
            errno = exc.args[0]
        if errno in cls.PERMISSION_ERROR_CODES:
            return True
        return getattr(exc, "sqlstate", None) in cls.PERMISSION_SQLSTATES

    def _validate_connection(self) -> None:
        driver = detect_driver(self._connection)
        if driver != self.ENGINE:
            raise InvalidConnectionError(
                f"Connection driver is '{driver}', expected '{self.ENGINE}'"
            )
        try:
            self._client.fetchall(self._VALIDATION_SQL)
        except Exception as exc:
            raise InvalidConnectionError(
                f"MySQL connection validation failed: {exc}"
            ) from exc

    def _current_database(self) -> str:
        try:
            name = self._client.fetchvalue(self._CURRENT_DATABASE_SQL)
        except Exception as exc:
            raise InvalidConnectionError(
                f"Cannot determine current database: {exc}"
            ) from exc
        if not name:
            raise InvalidConnectionError(
                "No database selected on the connection and none was given"
            )
        return str(name)
