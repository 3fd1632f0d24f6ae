"""Navigable HTML document view of a schema."""

import re
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from dbviz.schema.models import Schema, Table, sort_by_name

_TEMPLATES_DIR = Path(__file__).parent / "templates"
_ANCHOR_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]+")

CHARSET = "UTF-8"


def _build_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(_TEMPLATES_DIR),
        autoescape=select_autoescape(["html", "j2"], default=True),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def anchor_ids(names: Iterable[str]) -> dict[str, str]:
    """Map table names to unique, URL-safe anchor ids.

    Names that collapse to the same slug get a numeric suffix in name order.
    """
    ids: dict[str, str] = {}
    used: set[str] = set()
    for name in sorted(names):
        base = "table-" + (_ANCHOR_UNSAFE_RE.sub("-", name).strip("-") or "unnamed")
        anchor = base
        n = 2
        while anchor in used:
            anchor = f"{base}-{n}"
            n += 1
        used.add(anchor)
        ids[name] = anchor
    return ids


class HTMLRenderer:
    """Render a schema as a single self-contained HTML page.

    The page has a persistent sidebar listing every table and one section per
    table; only the section matching the active link is shown. When more than
    one database is available a selector reloads the page with the chosen
    name in the ``database_parameter`` query parameter.

    All text from the schema goes through Jinja2 autoescaping.
    """

    TEMPLATE = "document.html.j2"

    def __init__(
        self,
        available_databases: Iterable[str] = (),
        database_parameter: str = "database",
    ) -> None:
        self._available_databases = sorted(set(available_databases))
        self._database_parameter = database_parameter
        self._env = _build_environment()

    def get_name(self) -> str:
        return "html"

    def get_mime_type(self) -> str:
        return f"text/html; charset={CHARSET}"

    @property
    def available_databases(self) -> list[str]:
        return list(self._available_databases)

    def with_databases(self, databases: Iterable[str]) -> "HTMLRenderer":
        """Return a copy of this renderer offering the given databases."""
        return HTMLRenderer(databases, self._database_parameter)

    def render(self, schema: Schema) -> str:
        template = self._env.get_template(self.TEMPLATE)
        return template.render(**self._context(schema))

    def _context(self, schema: Schema) -> dict[str, Any]:
        tables = schema.sorted_tables()
        anchors = anchor_ids(t.name for t in tables)
        return {
            "charset": CHARSET,
            "schema": schema,
            "table_count": len(tables),
            "tables": [self._table_view(t, anchors[t.name]) for t in tables],
            "databases": self._available_databases,
            "show_selector": len(self._available_databases) > 1,
            "database_parameter": self._database_parameter,
        }

    @staticmethod
    def _table_view(table: Table, anchor: str) -> dict[str, Any]:
        return {
            "anchor": anchor,
            "name": table.name,
            "comment": table.comment,
            "type": table.type,
            "columns": table.columns,
            "indexes": sort_by_name(table.indexes),
            "foreign_keys": sort_by_name(table.foreign_keys),
        }
