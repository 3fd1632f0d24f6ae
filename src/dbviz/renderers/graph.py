"""Graphviz DOT entity-relationship view of a schema."""

import re

from dbviz.schema.models import Column, Schema, sort_by_name

_RECORD_SPECIAL_RE = re.compile(r'([\\"{}|<> ])')


def quote_id(value: str) -> str:
    """Quote a DOT identifier, escaping backslashes and double quotes."""
    return '"' + escape_label(value) + '"'


def escape_label(value: str) -> str:
    """Escape text for a plain quoted label."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def escape_record(value: str) -> str:
    """Escape text for use inside a record-shaped node label."""
    return _RECORD_SPECIAL_RE.sub(r"\\\1", value).replace("\n", "\\n")


def _column_line(column: Column) -> str:
    flags = "" if column.nullable else " NOT NULL"
    return escape_record(f"{column.name} : {column.type}{flags}") + "\\l"


class DOTRenderer:
    """Render tables as record nodes and foreign keys as edges."""

    def __init__(self, rankdir: str = "LR") -> None:
        self._rankdir = rankdir

    def get_name(self) -> str:
        return "dot"

    def get_mime_type(self) -> str:
        return "text/vnd.graphviz"

    def render(self, schema: Schema) -> str:
        lines = [
            f"digraph {quote_id(schema.name)} {{",
            f"    rankdir={self._rankdir};",
            '    node [shape=record, fontname="Helvetica"];',
        ]

        tables = schema.sorted_tables()
        for table in tables:
            body = "".join(_column_line(c) for c in table.columns)
            label = "{" + escape_record(table.name) + "|" + body + "}"
            lines.append(f'    {quote_id(table.name)} [label="{label}"];')

        for table in tables:
            for fk in sort_by_name(table.foreign_keys):
                pairs = ", ".join(
                    f"{local} -> {ref}" for local, ref in fk.column_pairs()
                )
                label = escape_label(fk.name) + "\\n" + escape_label(pairs)
                lines.append(
                    f"    {quote_id(table.name)} -> {quote_id(fk.referenced_table)} "
                    f'[label="{label}"];'
                )

        lines.append("}")
        return "\n".join(lines) + "\n"
