"""Map a connection's driver identifier to its engine adapter."""

import logging
from typing import Any, Callable, Mapping, Optional

from dbviz.client import detect_driver
from dbviz.drivers.mysql import MySQLAdapter
from dbviz.exceptions import UnsupportedEngineError
from dbviz.schema.introspect import SchemaIntrospector

__all__ = ["AdapterFactory", "AdapterResolver"]

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[Any, Optional[str]], SchemaIntrospector]


class AdapterResolver:
    """
    Resolves engine adapters by driver identifier.

    Ships with 'mysql'. register() is the extension point for other engines;
    it adds or replaces an entry for the lifetime of this resolver.
    """

    DEFAULT_ADAPTERS: dict[str, AdapterFactory] = {
        "mysql": MySQLAdapter,
    }

    def __init__(self, adapters: Optional[Mapping[str, AdapterFactory]] = None) -> None:
        self._adapters: dict[str, AdapterFactory] = dict(self.DEFAULT_ADAPTERS)
        if adapters:
            self._adapters.update(adapters)

    def resolve(self, connection: Any, database: Optional[str] = None) -> SchemaIntrospector:
        """Construct the adapter registered for the connection's driver.

        Raises:
            UnsupportedEngineError: No adapter is registered for the driver.
            InvalidConnectionError: The adapter rejected the connection.
        """
        driver = detect_driver(connection)
        factory = self._adapters.get(driver)
        if factory is None:
            raise UnsupportedEngineError(driver, self._adapters.keys())

        logger.debug(f"Resolved driver '{driver}' to {getattr(factory, '__name__', factory)}")
        return factory(connection, database)

    def register(self, driver: str, factory: AdapterFactory) -> None:
        self._adapters[driver] = factory

    def supported_drivers(self) -> list[str]:
        return sorted(self._adapters)
