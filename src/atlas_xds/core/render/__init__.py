"""Resource Renderer: documentos de cluster (CDS) e load assignment (EDS)."""

from .resources import (
    RenderedResource,
    compound_name,
    node_id,
    parse_rendered,
    render,
    render_resource,
)

__all__ = [
    "RenderedResource",
    "compound_name",
    "node_id",
    "parse_rendered",
    "render",
    "render_resource",
]
