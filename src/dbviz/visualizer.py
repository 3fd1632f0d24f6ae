"""Visualization gate: renders a schema only after it has been explicitly enabled."""

import logging
from typing import TYPE_CHECKING, Optional

from dbviz.exceptions import InvalidConnectionError, VisualizationDisabledError
from dbviz.renderers import (
    DOTRenderer,
    HTMLRenderer,
    JSONRenderer,
    Renderer,
    YAMLRenderer,
)
from dbviz.schema.models import Schema

if TYPE_CHECKING:
    from dbviz.connection import ConnectionHandler

__all__ = ["Visualizer"]

logger = logging.getLogger(__name__)


class Visualizer:
    """
    Wraps a schema snapshot and a renderer behind an enable flag.

    A new Visualizer is always disabled. render() is the only operation that
    looks at the flag: while disabled it raises VisualizationDisabledError
    without calling the renderer or touching the database.

    Database switching is explicit: pass ``database`` to render() or call
    switch_database(). Both go through the bound ConnectionHandler's
    introspector and do not revalidate the connection.
    """

    def __init__(
        self,
        schema: Schema,
        connection_handler: Optional["ConnectionHandler"] = None,
        enabled: bool = False,
    ) -> None:
        self._schema = schema
        self._connection_handler = connection_handler
        self._enabled = enabled

    @property
    def schema(self) -> Schema:
        return self._schema

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def render(self, renderer: Renderer, database: Optional[str] = None) -> str:
        """Render the held schema, or the named database's schema.

        Raises:
            VisualizationDisabledError: The gate has not been enabled.
            InvalidConnectionError: database names another database and no
                connection handler is bound.
        """
        self._guard_enabled(renderer.get_name())

        schema = self._schema_for(database)
        logger.debug(f"Rendering schema '{schema.name}' as {renderer.get_name()}")
        return renderer.render(schema)

    def switch_database(self, database: str) -> Schema:
        """Replace the held schema with a snapshot of another database."""
        self._schema = self._schema_for(database)
        return self._schema

    def get_available_databases(self) -> list[str]:
        if self._connection_handler is None:
            return []
        return self._connection_handler.get_available_databases()

    def html_renderer(self) -> HTMLRenderer:
        """HTML renderer offering every database visible to the connection."""
        return HTMLRenderer(self.get_available_databases())

    def render_json(self) -> str:
        return self.render(JSONRenderer())

    def render_yaml(self) -> str:
        return self.render(YAMLRenderer())

    def render_html(self) -> str:
        # Database enumeration must not run while disabled.
        self._guard_enabled("html")
        return self.render(self.html_renderer())

    def render_dot(self) -> str:
        return self.render(DOTRenderer())

    def _guard_enabled(self, format_name: str) -> None:
        if not self._enabled:
            raise VisualizationDisabledError(format_name)

    def _schema_for(self, database: Optional[str]) -> Schema:
        if database is None or database == self._schema.name:
            return self._schema
        if self._connection_handler is None:
            raise InvalidConnectionError(
                f"Cannot switch to database '{database}': "
                "no connection handler is bound to this visualizer"
            )
        logger.info(f"Switching visualized database to '{database}'")
        return self._connection_handler.get_introspector().schema(database)
