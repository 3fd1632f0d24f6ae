"""Tests for the Visualizer enable gate and database switching."""

import json
from unittest.mock import MagicMock

import pytest

from dbviz.exceptions import (
    IntrospectionError,
    InvalidConnectionError,
    VisualizationDisabledError,
)
from dbviz.renderers import JSONRenderer
from dbviz.schema.models import Schema, Table
from dbviz.visualizer import Visualizer
from tests.helpers import CountingRenderer, make_schema


def make_handler(schemas=None, databases=None):
    schemas = schemas or {}
    handler = MagicMock()
    handler.get_introspector.return_value.schema.side_effect = lambda db: schemas[db]
    handler.get_available_databases.return_value = databases or []
    return handler


class TestGate:
    """Test the enable/disable flag."""

    def test_new_visualizer_is_disabled(self):
        assert Visualizer(make_schema()).is_enabled() is False

    def test_enable_and_disable(self):
        viz = Visualizer(make_schema())
        viz.enable()
        assert viz.is_enabled() is True
        viz.disable()
        assert viz.is_enabled() is False

    def test_render_while_disabled_raises_without_calling_renderer(self):
        renderer = CountingRenderer()
        viz = Visualizer(make_schema())

        with pytest.raises(VisualizationDisabledError) as exc_info:
            viz.render(renderer)

        assert exc_info.value.format == "counting"
        assert renderer.calls == 0

    def test_render_after_enable(self):
        renderer = CountingRenderer("ok")
        viz = Visualizer(make_schema())
        viz.enable()

        assert viz.render(renderer) == "ok"
        assert renderer.calls == 1

    def test_disable_after_enable_blocks_again(self):
        viz = Visualizer(make_schema(), enabled=True)
        viz.disable()
        with pytest.raises(VisualizationDisabledError):
            viz.render_json()

    @pytest.mark.parametrize(
        "method,fmt",
        [
            ("render_json", "json"),
            ("render_yaml", "yaml"),
            ("render_html", "html"),
            ("render_dot", "dot"),
        ],
    )
    def test_convenience_methods_are_gated(self, method, fmt):
        handler = make_handler(databases=["a", "b"])
        viz = Visualizer(make_schema(), handler)

        with pytest.raises(VisualizationDisabledError, match=f"Cannot render {fmt}"):
            getattr(viz, method)()

        handler.get_available_databases.assert_not_called()
        handler.get_introspector.assert_not_called()

    def test_disabled_render_does_not_switch_database(self):
        handler = make_handler()
        viz = Visualizer(make_schema(), handler)

        with pytest.raises(VisualizationDisabledError):
            viz.render(CountingRenderer(), database="other")

        handler.get_introspector.assert_not_called()


class TestRenderFormats:
    def test_render_json(self):
        viz = Visualizer(make_schema(), enabled=True)
        data = json.loads(viz.render_json())
        assert data["schema"]["name"] == "shop"

    def test_render_yaml(self):
        viz = Visualizer(make_schema(), enabled=True)
        assert viz.render_yaml().startswith("schema:\n")

    def test_render_dot(self):
        viz = Visualizer(make_schema(), enabled=True)
        assert viz.render_dot().startswith('digraph "shop" {')

    def test_render_html_offers_available_databases(self):
        handler = make_handler(databases=["analytics", "shop"])
        viz = Visualizer(make_schema(), handler, enabled=True)

        html = viz.render_html()

        assert 'class="db-selector"' in html
        assert '<option value="analytics">analytics</option>' in html

    def test_render_html_without_handler_has_no_selector(self):
        viz = Visualizer(make_schema(), enabled=True)
        assert 'class="db-selector"' not in viz.render_html()


class TestDatabaseSwitching:
    """Test explicit database overrides."""

    def test_render_other_database(self):
        other = Schema(name="analytics", engine="mysql", tables=[Table(name="events")])
        handler = make_handler({"analytics": other})
        viz = Visualizer(make_schema(), handler, enabled=True)

        data = json.loads(viz.render(JSONRenderer(), database="analytics"))

        assert data["schema"]["name"] == "analytics"
        assert viz.schema.name == "shop"

    def test_same_database_uses_held_schema(self):
        handler = make_handler()
        schema = make_schema()
        viz = Visualizer(schema, handler, enabled=True)

        viz.render(CountingRenderer(), database="shop")

        handler.get_introspector.assert_not_called()

    def test_switch_database_replaces_schema(self):
        other = Schema(name="analytics", engine="mysql")
        handler = make_handler({"analytics": other})
        viz = Visualizer(make_schema(), handler)

        assert viz.switch_database("analytics") is other
        assert viz.schema is other

    def test_switch_without_handler_raises(self):
        viz = Visualizer(make_schema(), enabled=True)
        renderer = CountingRenderer()
        with pytest.raises(InvalidConnectionError, match="no connection handler") as exc_info:
            viz.render(renderer, database="analytics")

        assert isinstance(exc_info.value, IntrospectionError)
        assert renderer.calls == 0

    def test_available_databases(self):
        viz = Visualizer(make_schema(), make_handler(databases=["a", "b"]))
        assert viz.get_available_databases() == ["a", "b"]
        assert Visualizer(make_schema()).get_available_databases() == []
