"""Renderers turning schema snapshots into text."""

from dbviz.renderers.base import Renderer
from dbviz.renderers.document import HTMLRenderer
from dbviz.renderers.graph import DOTRenderer
from dbviz.renderers.structured import JSONRenderer, YAMLRenderer

RENDERERS: dict[str, type] = {
    "json": JSONRenderer,
    "yaml": YAMLRenderer,
    "html": HTMLRenderer,
    "dot": DOTRenderer,
}


def get_renderer(name: str) -> Renderer:
    """Instantiate a renderer by format name."""
    try:
        return RENDERERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown format '{name}'. Available: {', '.join(sorted(RENDERERS))}"
        ) from None


__all__ = [
    "DOTRenderer",
    "HTMLRenderer",
    "JSONRenderer",
    "RENDERERS",
    "Renderer",
    "YAMLRenderer",
    "get_renderer",
]
