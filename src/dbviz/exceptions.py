"""Exception classes for dbviz."""

from typing import Iterable, Optional

__all__ = [
    "DbvizError",
    "IntrospectionError",
    "InvalidConnectionError",
    "UnsupportedEngineError",
    "SchemaAccessError",
    "PermissionDeniedError",
    "VisualizationDisabledError",
    "ConfigError",
]


class DbvizError(Exception):
    """Base exception for dbviz."""


class IntrospectionError(DbvizError):
    """Base error for connection, introspection and rendering failures."""


class InvalidConnectionError(IntrospectionError):
    """Connection handle is unusable, of the wrong engine, or cannot reach the catalog."""


class UnsupportedEngineError(IntrospectionError):
    """No adapter is registered for the connection's driver."""

    def __init__(self, driver: str, supported: Iterable[str]):
        self.driver = driver
        self.supported = sorted(supported)
        super().__init__(
            f"No driver adapter registered for driver '{driver}'. "
            f"Supported: {', '.join(self.supported) or '(none)'}"
        )


class SchemaAccessError(IntrospectionError):
    """A catalog query failed while reading schema metadata."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        self.table = table
        self.operation = operation
        super().__init__(message)


class PermissionDeniedError(IntrospectionError):
    """The connection lacks the privileges needed to read catalog metadata."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        self.table = table
        self.operation = operation
        super().__init__(message)


class VisualizationDisabledError(IntrospectionError):
    """Rendering was attempted while the visualizer is disabled."""

    def __init__(self, format_name: str):
        self.format = format_name
        super().__init__(
            f"Cannot render {format_name}: visualization is disabled. "
            "Call enable() first."
        )


class ConfigError(DbvizError):
    """Error in configuration."""
