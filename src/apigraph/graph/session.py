"""Interactive graph session.

A session holds the current compiled graph and the caller-owned collapse
state. Every change (a new document or a toggle) recomputes the visible
subgraph and its layout in full; nothing is patched incrementally.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..config import ApigraphConfig
from ..layout import LayoutAdapter, LayoutEngine, Position
from .compiler import GraphCompiler
from .models import CompiledGraph, VisibleSubgraph
from .visibility import CollapseState, collapse_all, compute_visible, expand_all, toggle_collapse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphView:
    """Positioned visible subgraph handed to renderers."""
    graph: CompiledGraph
    subgraph: VisibleSubgraph
    positions: dict[str, Position]
    collapse: CollapseState

    def is_collapsed(self, node_id: str) -> bool:
        node = self.graph.get_node(node_id)
        return node is not None and self.collapse.is_collapsed(node)


class GraphSession:
    """Owns the collapse state of one interactive view."""

    def __init__(self, config: ApigraphConfig | None = None, engine: LayoutEngine | None = None):
        self.config = config or ApigraphConfig()
        self.compiler = GraphCompiler(self.config.compiler)
        self.layout_adapter = LayoutAdapter(self.config.layout, engine)
        self.collapse = CollapseState(collapse_top_level=self.config.view.collapse_top_level)
        self.graph = CompiledGraph()
        self._view: GraphView | None = None

    @property
    def view(self) -> GraphView:
        """Current positioned visible subgraph."""
        if self._view is None:
            self._view = self._recompute()
        return self._view

    def load_document(self, doc: Mapping[str, Any]) -> GraphView:
        """Replace the graph with a freshly compiled document.

        Collapse entries are kept: ids are stable, so nodes that survive the
        change keep their state and stale entries are ignored.
        """
        self.graph = self.compiler.compile(doc)
        logger.debug(f"Loaded document, keeping {len(self.collapse.entries)} collapse entries")
        self._view = self._recompute()
        return self._view

    def toggle(self, node_id: str) -> GraphView:
        """Flip one path segment node and recompute the view."""
        if toggle_collapse(self.collapse, self.graph, node_id):
            self._view = self._recompute()
        return self.view

    def expand_all(self) -> GraphView:
        expand_all(self.graph, self.collapse)
        self._view = self._recompute()
        return self._view

    def collapse_all(self) -> GraphView:
        collapse_all(self.graph, self.collapse)
        self._view = self._recompute()
        return self._view

    def _recompute(self) -> GraphView:
        subgraph = compute_visible(self.graph, self.collapse)
        positions = self.layout_adapter.layout(subgraph)
        return GraphView(graph=self.graph, subgraph=subgraph, positions=positions, collapse=self.collapse.copy())
