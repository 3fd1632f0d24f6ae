"""Connection handling: validate a handle and hand out its engine adapter."""

import logging
from typing import Any, Optional

from dbviz.client import detect_driver, is_usable
from dbviz.exceptions import InvalidConnectionError
from dbviz.resolver import AdapterResolver
from dbviz.schema.introspect import SchemaIntrospector
from dbviz.types import EngineCapabilities

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """Wraps one caller-owned DB-API connection and an optional database name.

    The adapter is resolved at construction so a dead connection or an
    unsupported engine fails immediately. The handler never closes the
    connection.
    """

    def __init__(
        self,
        connection: Any,
        database: Optional[str] = None,
        resolver: Optional[AdapterResolver] = None,
    ) -> None:
        if not is_usable(connection):
            raise InvalidConnectionError(
                f"Connection of type {type(connection).__name__} is not usable: "
                "it does not provide cursor()"
            )
        self._connection = connection
        self._database = database
        self._resolver = resolver or AdapterResolver()
        self._introspector: SchemaIntrospector = self._resolver.resolve(
            connection, database
        )
        logger.debug(
            f"Connected to {self.get_engine()} (database: {database or 'server default'})"
        )

    @property
    def connection(self) -> Any:
        return self._connection

    def get_engine(self) -> str:
        return detect_driver(self._connection)

    def get_database(self) -> str:
        """Requested database name, or the one the adapter bound itself to.

        Raises:
            InvalidConnectionError: No database was requested and none is
                selected on the connection.
        """
        return self._database or self._introspector.database

    def get_introspector(self) -> SchemaIntrospector:
        return self._introspector

    def get_capabilities(self) -> EngineCapabilities:
        return self._introspector.get_capabilities(self._connection)

    def get_available_databases(self) -> list[str]:
        """Databases visible to the connection's privileges, sorted.

        Visibility does not imply that introspecting each one will succeed.
        """
        return sorted(self._introspector.database_names())
