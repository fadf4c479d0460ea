"""Graph compilation, visibility and rendering for apigraph.

Compiles decoded API descriptions into stable node/edge graphs, computes the
visible subgraph for a collapse state and renders positioned views as
JSON or Mermaid.
"""

from .models import (
    CompiledGraph,
    EdgeRelation,
    GraphEdge,
    GraphNode,
    NodeKind,
    OperationNode,
    PathSegmentNode,
    PayloadSchemaNode,
    SchemaProperty,
    VisibleSubgraph,
)
from ..layout import Position
from .compiler import GraphCompiler, compile_document
from .visibility import CollapseState, ancestor_ids, compute_visible, toggle_collapse
from .session import GraphSession, GraphView
from .framework import GraphRenderer
from .mermaid import MermaidRenderer
from .export import JsonRenderer, graph_to_dict

__all__ = [
    "CompiledGraph",
    "EdgeRelation",
    "GraphEdge",
    "GraphNode",
    "NodeKind",
    "OperationNode",
    "PathSegmentNode",
    "PayloadSchemaNode",
    "Position",
    "SchemaProperty",
    "VisibleSubgraph",
    "GraphCompiler",
    "compile_document",
    "CollapseState",
    "ancestor_ids",
    "compute_visible",
    "toggle_collapse",
    "GraphSession",
    "GraphView",
    "GraphRenderer",
    "MermaidRenderer",
    "JsonRenderer",
    "graph_to_dict",
]
