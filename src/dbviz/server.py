"""FastAPI application serving rendered schemas.

The HTML page's database selector submits ``?database=<name>`` back to the
page; each request re-introspects the requested database over a fresh
connection and renders it again.
"""

import logging
from contextlib import AbstractContextManager
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, Response

from dbviz.config import Config
from dbviz.connection import ConnectionHandler
from dbviz.drivers.utils import connected_handler
from dbviz.exceptions import IntrospectionError, PermissionDeniedError
from dbviz.renderers import get_renderer
from dbviz.visualizer import Visualizer

logger = logging.getLogger(__name__)

HandlerFactory = Callable[[Config], AbstractContextManager[ConnectionHandler]]


def create_app(
    config: Config,
    connect: Optional[HandlerFactory] = None,
    title: str = "dbviz",
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Validated connection configuration.
        connect: Context manager factory yielding a ConnectionHandler for a
            config; opens and closes a PyMySQL connection by default.
        title: API title

    Returns:
        Configured FastAPI application
    """
    connect = connect or connected_handler

    app = FastAPI(title=title, description="Read-only database schema viewer")
    app.state.config = config

    def render(format_name: str, database: Optional[str]) -> tuple[str, str]:
        try:
            renderer = get_renderer(format_name)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

        try:
            with connect(config) as handler:
                if database is not None and database not in handler.get_available_databases():
                    raise HTTPException(
                        status_code=404, detail=f"Unknown database '{database}'"
                    )

                visualizer = Visualizer(
                    handler.get_introspector().schema(database), handler
                )
                visualizer.enable()
                if renderer.get_name() == "html":
                    renderer = visualizer.html_renderer()
                logger.info(
                    f"Serving {renderer.get_name()} for database '{visualizer.schema.name}'"
                )
                return visualizer.render(renderer), renderer.get_mime_type()
        except PermissionDeniedError as e:
            raise HTTPException(status_code=403, detail=str(e)) from e
        except IntrospectionError as e:
            logger.error(f"Introspection failed: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e

    @app.get("/", response_class=HTMLResponse)
    def schema_page(
        database: Optional[str] = Query(None, description="Database to introspect"),
    ) -> HTMLResponse:
        """HTML view; the selector reloads this page with another database."""
        content, _ = render("html", database)
        return HTMLResponse(content)

    @app.get("/schema/{format_name}")
    def schema_document(
        format_name: str,
        database: Optional[str] = Query(None, description="Database to introspect"),
    ) -> Response:
        content, media_type = render(format_name, database)
        return Response(content=content, media_type=media_type)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
