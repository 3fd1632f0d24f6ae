"""Renderer contract."""

from typing import Protocol, runtime_checkable

from dbviz.schema.models import Schema


@runtime_checkable
class Renderer(Protocol):
    """
    Pure function from a Schema snapshot to text.

    Implementations must not perform I/O or mutate the schema, must escape
    every metadata-derived string for their output format, and must produce
    byte-identical output for the same schema.
    """

    def get_name(self) -> str:
        """Short format name, e.g. 'json'."""
        ...

    def get_mime_type(self) -> str:
        ...

    def render(self, schema: Schema) -> str:
        ...
