"""DB-API connection wrapper for catalog queries."""

import logging
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)

# Root module of a DB-API connection class -> driver identifier.
DRIVER_MODULES: dict[str, str] = {
    "pymysql": "mysql",
    "MySQLdb": "mysql",
    "mysql": "mysql",
    "mariadb": "mysql",
    "psycopg2": "pgsql",
    "psycopg": "pgsql",
    "sqlite3": "sqlite",
    "pyodbc": "odbc",
    "oracledb": "oci",
    "cx_Oracle": "oci",
}


def detect_driver(connection: Any) -> str:
    """Return the driver identifier reported by a DB-API connection.

    The identifier comes from the module that defines the connection class,
    e.g. a pymysql connection reports 'mysql' and a psycopg2 one 'pgsql'.
    Unknown modules report their root module name.
    """
    module = type(connection).__module__ or ""
    root = module.split(".", 1)[0]
    return DRIVER_MODULES.get(root, root)


def is_usable(connection: Any) -> bool:
    """Shallow check: does the handle look like a DB-API connection?"""
    return connection is not None and callable(getattr(connection, "cursor", None))


class CatalogClient:
    """Client for executing parameterized catalog queries."""

    def __init__(self, connection: Any):
        self.connection = connection

    def fetchall(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[dict[str, Any]]:
        """Execute SQL with bound parameters and return rows as dicts.

        Column keys are lowercased so callers are independent of how the
        server reports identifier case.
        """
        logger.debug(f"Catalog query: {' '.join(sql.split())} params={tuple(params)}")
        with self.connection.cursor() as cursor:
            cursor.execute(sql, tuple(params))
            columns = (
                [desc[0].lower() for desc in cursor.description]
                if cursor.description
                else []
            )
            return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def fetchvalue(self, sql: str, params: Sequence[Any] = ()) -> Optional[Any]:
        """Execute SQL and return the first column of the first row, or None."""
        rows = self.fetchall(sql, params)
        if not rows:
            return None
        return next(iter(rows[0].values()), None)
