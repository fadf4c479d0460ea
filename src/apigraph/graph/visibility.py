"""Hierarchical visibility over compiled graphs.

``compute_visible`` is a pure function of a compiled graph and a collapse
state. It never mutates the collapse state and keeps nothing between calls;
every change to either input means a full recomputation.

Visibility rules:

* a path segment node is visible iff none of its strict ancestors is collapsed;
  a collapsed node itself stays visible so it can be expanded again
* an operation node inherits its owning path node: visible iff that node is
  visible and not collapsed
* a payload schema node is visible iff at least one operation referencing it
  is visible
* an edge is visible iff both endpoints are visible, decided after every
  node has been resolved
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from .models import (
    CompiledGraph,
    EdgeRelation,
    GraphNode,
    NodeKind,
    OperationNode,
    PathSegmentNode,
    VisibleSubgraph,
)

logger = logging.getLogger(__name__)


@dataclass
class CollapseState:
    """Caller-owned record of collapsed path segment nodes.

    Only explicit entries are stored; nodes without an entry fall back to
    the default (collapsed for top-level path segments when
    ``collapse_top_level`` is set, expanded otherwise). Entries for ids
    absent from the current graph are kept and ignored, so state survives
    recompiling a changed document.
    """
    entries: dict[str, bool] = field(default_factory=dict)
    collapse_top_level: bool = True

    @classmethod
    def from_mapping(cls, entries: Mapping[str, bool], collapse_top_level: bool = True) -> "CollapseState":
        return cls(entries=dict(entries), collapse_top_level=collapse_top_level)

    def default_for(self, node: GraphNode) -> bool:
        """Collapsed flag of a node that has no explicit entry."""
        return isinstance(node, PathSegmentNode) and node.is_top_level and self.collapse_top_level

    def is_collapsed(self, node: GraphNode) -> bool:
        """Effective collapsed flag. Only path segment nodes can be collapsed."""
        if not isinstance(node, PathSegmentNode):
            return False
        return self.entries.get(node.id, self.default_for(node))

    def copy(self) -> "CollapseState":
        return CollapseState(entries=dict(self.entries), collapse_top_level=self.collapse_top_level)


def ancestor_ids(node_id: str) -> Iterator[str]:
    """Yield every strict ``/``-boundary prefix of ``node_id``, nearest first.

    ``/users/{id}/posts`` yields ``/users/{id}`` then ``/users``. The walk
    shortens the id on every step, so it always terminates at the root.
    """
    current = node_id
    while True:
        cut = current.rfind("/")
        if cut <= 0:
            return
        current = current[:cut]
        yield current


def is_path_visible(node: PathSegmentNode, graph: CompiledGraph, collapse: CollapseState) -> bool:
    """A path segment is hidden by any collapsed path segment ancestor."""
    for parent_id in ancestor_ids(node.id):
        parent = graph.get_node(parent_id)
        if isinstance(parent, PathSegmentNode) and collapse.is_collapsed(parent):
            return False
    return True


def compute_visible(graph: CompiledGraph, collapse: CollapseState) -> VisibleSubgraph:
    """Compute the visible, edge-closed subgraph for a collapse state.

    Args:
        graph: Compiled graph
        collapse: Current collapse state (read only)

    Returns:
        VisibleSubgraph with nodes and edges in compiled order
    """
    visible_ids: set[str] = set()

    for node in graph.nodes:
        if isinstance(node, PathSegmentNode) and is_path_visible(node, graph, collapse):
            visible_ids.add(node.id)

    for node in graph.nodes:
        if isinstance(node, OperationNode):
            owner = graph.get_node(node.path_id)
            if node.path_id in visible_ids and not collapse.is_collapsed(owner):
                visible_ids.add(node.id)

    for edge in graph.edges:
        if edge.relation in (EdgeRelation.PRODUCES, EdgeRelation.CONSUMES) and edge.source in visible_ids:
            visible_ids.add(edge.target)

    nodes = [node for node in graph.nodes if node.id in visible_ids]
    edges = [edge for edge in graph.edges if edge.source in visible_ids and edge.target in visible_ids]

    logger.debug(f"Visible subgraph: {len(nodes)}/{len(graph.nodes)} nodes, {len(edges)}/{len(graph.edges)} edges")
    return VisibleSubgraph(nodes=nodes, edges=edges)


def toggle_collapse(collapse: CollapseState, graph: CompiledGraph, node_id: str) -> bool:
    """Flip the collapsed flag of one path segment node.

    Operation and payload schema nodes are never independently collapsible
    and unknown ids are ignored; neither changes the state.

    Returns:
        True if the state changed
    """
    node = graph.get_node(node_id)
    if node is None or node.kind != NodeKind.PATH_SEGMENT:
        logger.debug(f"Ignoring toggle of non-collapsible node '{node_id}'")
        return False

    collapse.entries[node_id] = not collapse.is_collapsed(node)
    logger.debug(f"Toggled '{node_id}' to {'collapsed' if collapse.entries[node_id] else 'expanded'}")
    return True


def expand_all(graph: CompiledGraph, collapse: CollapseState) -> None:
    """Mark every path segment node of ``graph`` as expanded."""
    for node in graph.nodes_of_kind(NodeKind.PATH_SEGMENT):
        collapse.entries[node.id] = False


def collapse_all(graph: CompiledGraph, collapse: CollapseState) -> None:
    """Mark every path segment node of ``graph`` as collapsed."""
    for node in graph.nodes_of_kind(NodeKind.PATH_SEGMENT):
        collapse.entries[node.id] = True
