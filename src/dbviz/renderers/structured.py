"""Structured-data renderers: JSON and YAML documents of a schema."""

import json

import yaml

from dbviz.renderers.serialize import schema_to_dict
from dbviz.schema.models import Schema


class JSONRenderer:
    """Render a schema as a pretty-printed JSON document."""

    def __init__(self, indent: int = 2) -> None:
        self._indent = indent

    def get_name(self) -> str:
        return "json"

    def get_mime_type(self) -> str:
        return "application/json"

    def render(self, schema: Schema) -> str:
        return json.dumps(schema_to_dict(schema), indent=self._indent, ensure_ascii=False)


class YAMLRenderer:
    """Render a schema as a YAML document with the same shape as the JSON one."""

    def get_name(self) -> str:
        return "yaml"

    def get_mime_type(self) -> str:
        return "application/yaml"

    def render(self, schema: Schema) -> str:
        return yaml.safe_dump(
            schema_to_dict(schema),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
