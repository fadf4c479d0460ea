"""JSON export of graph views for front-end renderers."""

import json
import logging
from typing import Any

from ..config import OutputFormat
from .framework import GraphRenderer, node_color
from .models import (
    CompiledGraph,
    GraphEdge,
    OperationNode,
    PathSegmentNode,
    PayloadSchemaNode,
)
from .session import GraphView

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"


def node_to_dict(node, view: GraphView | None = None) -> dict[str, Any]:
    """Convert a node to its JSON record, including kind-specific fields."""
    data: dict[str, Any] = {
        "id": node.id,
        "kind": node.kind.value,
        "label": node.label,
        "tooltip": node.tooltip_text,
        "color": node_color(node),
    }

    if isinstance(node, PathSegmentNode):
        data.update({
            "segment": node.segment,
            "depth": node.depth,
            "isParameter": node.is_parameter,
            "hasChildren": node.has_children,
            "collapsible": node.collapsible,
        })
        if view is not None:
            data["collapsed"] = view.is_collapsed(node.id)
    elif isinstance(node, OperationNode):
        data.update({
            "pathId": node.path_id,
            "method": node.method,
            "summary": node.summary,
            "description": node.description,
        })
    elif isinstance(node, PayloadSchemaNode):
        data.update({
            "schemaName": node.schema_name,
            "properties": [{"name": p.name, "type": p.type} for p in node.properties],
        })

    if view is not None:
        position = view.positions.get(node.id)
        if position is not None:
            data["position"] = {"x": position.x, "y": position.y}

    return data


def edge_to_dict(edge: GraphEdge) -> dict[str, Any]:
    """Convert an edge to its JSON record."""
    data: dict[str, Any] = {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "relation": edge.relation.value,
        "label": edge.label,
    }
    if edge.status_codes:
        data["statusCodes"] = list(edge.status_codes)
    return data


def graph_to_dict(graph: CompiledGraph) -> dict[str, Any]:
    """Convert a full compiled graph (no visibility, no positions)."""
    return {
        "schemaVersion": SCHEMA_VERSION,
        "nodes": [node_to_dict(node) for node in graph.nodes],
        "edges": [edge_to_dict(edge) for edge in graph.edges],
        "issues": [issue.to_dict() for issue in graph.issues],
    }


class JsonRenderer(GraphRenderer):
    """Renders positioned views as JSON documents."""

    def __init__(self, indent: int | None = 2):
        self.indent = indent

    @property
    def format_name(self) -> str:
        return OutputFormat.JSON.value

    def get_file_extension(self) -> str:
        return ".json"

    def to_dict(self, view: GraphView) -> dict[str, Any]:
        return {
            "schemaVersion": SCHEMA_VERSION,
            "totals": {"nodes": len(view.graph.nodes), "edges": len(view.graph.edges)},
            "nodes": [node_to_dict(node, view) for node in view.subgraph.nodes],
            "edges": [edge_to_dict(edge) for edge in view.subgraph.edges],
        }

    def render(self, view: GraphView) -> str:
        """Render the visible subgraph with positions as JSON."""
        rendered = json.dumps(self.to_dict(view), indent=self.indent, ensure_ascii=False)
        logger.debug(f"Rendered {len(view.subgraph.nodes)} nodes as JSON")
        return rendered
