"""Layout adapter between visible subgraphs and layout engines.

Owns no placement logic: assigns every node its logical size, picks the
rank direction, delegates to the engine and converts the engine's
center-based coordinates into top-left positions.
"""

import logging
from typing import TYPE_CHECKING

from ..config import LayoutConfig
from .engine import LayeredLayoutEngine, LayoutEngine, LayoutRequest, Position

if TYPE_CHECKING:
    from ..graph.models import VisibleSubgraph

logger = logging.getLogger(__name__)


class LayoutError(RuntimeError):
    """Raised when a layout engine breaks its output contract."""


class LayoutAdapter:
    """Lays out visible subgraphs with a pluggable engine."""

    def __init__(self, config: LayoutConfig | None = None, engine: LayoutEngine | None = None):
        self.config = config or LayoutConfig()
        self.engine = engine or LayeredLayoutEngine()

    def node_size(self, node_id: str) -> tuple[float, float]:
        """Logical width/height of a node. Every node shares the configured size."""
        return self.config.node_width, self.config.node_height

    def layout(self, subgraph: "VisibleSubgraph") -> dict[str, Position]:
        """Position every node of ``subgraph`` by its top-left corner.

        Args:
            subgraph: Visible subgraph to lay out in full

        Returns:
            Mapping of node id to top-left position

        Raises:
            LayoutError: If the engine did not place every node
        """
        if not subgraph.nodes:
            return {}

        request = LayoutRequest(
            node_sizes={node.id: self.node_size(node.id) for node in subgraph.nodes},
            edges=[(edge.source, edge.target) for edge in subgraph.edges],
            direction=self.config.direction,
            rank_sep=self.config.rank_sep,
            node_sep=self.config.node_sep,
        )

        centers = self.engine.place(request)

        missing = [node_id for node_id in request.node_sizes if node_id not in centers]
        if missing:
            raise LayoutError(f"Layout engine '{self.engine.name}' did not place nodes: {', '.join(missing)}")

        positions = {}
        for node_id, (width, height) in request.node_sizes.items():
            x, y = centers[node_id]
            positions[node_id] = Position(x=x - width / 2, y=y - height / 2)

        logger.debug(f"Laid out {len(positions)} nodes with {self.engine.name} engine ({request.direction.value})")
        return positions
