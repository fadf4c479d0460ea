"""Mermaid flowchart renderer for graph views."""

import logging
import re

from ..config import LayoutDirection, OutputFormat
from .framework import GraphRenderer, node_color
from .models import EdgeRelation, NodeKind, OperationNode, PathSegmentNode
from .session import GraphView

logger = logging.getLogger(__name__)


class MermaidRenderer(GraphRenderer):
    """Mermaid diagram renderer for API graphs."""

    def __init__(self, direction: LayoutDirection = LayoutDirection.LEFT_RIGHT, cluster_by_top_level: bool = False):
        self.direction = direction
        self.cluster_by_top_level = cluster_by_top_level

    @property
    def format_name(self) -> str:
        return OutputFormat.MERMAID.value

    def get_file_extension(self) -> str:
        return ".mmd"

    def render(self, view: GraphView) -> str:
        """Render the visible subgraph as a Mermaid flowchart."""
        lines = []
        subgraph = view.subgraph
        safe_ids = {node.id: self._get_safe_id(node.id, index) for index, node in enumerate(subgraph.nodes)}

        lines.append(f"flowchart {self.direction.value}")
        lines.append("")

        # Nodes
        lines.append("    %% Nodes")
        for node in subgraph.nodes:
            lines.append(f"    {self._render_node(node, view, safe_ids)}")
        lines.append("")

        # Edges
        if subgraph.edges:
            lines.append("    %% Edges")
            for edge in subgraph.edges:
                lines.append(f"    {self._render_edge(edge, safe_ids)}")
            lines.append("")

        if self.cluster_by_top_level:
            lines.extend(self._render_clusters(view, safe_ids))

        lines.extend(self._render_styling(view, safe_ids))

        logger.debug(f"Rendered {len(subgraph.nodes)} nodes as Mermaid")
        return "\n".join(lines)

    def _render_node(self, node, view: GraphView, safe_ids: dict[str, str]) -> str:
        safe_id = safe_ids[node.id]
        label = self._escape_label(node.label)

        if isinstance(node, PathSegmentNode):
            if node.collapsible:
                label = f"{label} {'+' if view.is_collapsed(node.id) else '-'}"
            return f'{safe_id}["{label}"]'
        elif isinstance(node, OperationNode):
            # Operations: stadium
            return f'{safe_id}(["{label}"])'
        else:
            # Payload schemas: cylinder
            return f'{safe_id}[("{label}")]'

    def _render_edge(self, edge, safe_ids: dict[str, str]) -> str:
        from_safe = safe_ids[edge.source]
        to_safe = safe_ids[edge.target]

        arrow = "-.->" if edge.relation in (EdgeRelation.PRODUCES, EdgeRelation.CONSUMES) else "-->"

        if edge.label:
            return f'{from_safe} {arrow}|"{self._escape_label(edge.label)}"| {to_safe}'
        return f"{from_safe} {arrow} {to_safe}"

    def _render_clusters(self, view: GraphView, safe_ids: dict[str, str]) -> list:
        """Group path and operation nodes under their top-level segment."""
        clusters: dict[str, list[str]] = {}
        for node in view.subgraph.nodes:
            if node.kind == NodeKind.PAYLOAD_SCHEMA:
                continue
            path_id = node.path_id if isinstance(node, OperationNode) else node.id
            clusters.setdefault(top_level_of(path_id), []).append(node.id)

        lines = []
        for index, (top_level, members) in enumerate(clusters.items()):
            if len(members) > 1:  # Only create subgraphs for multiple nodes
                lines.append(f'    subgraph cluster_{index}["{self._escape_label(top_level)}"]')
                for node_id in members:
                    lines.append(f"        {safe_ids[node_id]}")
                lines.append("    end")
                lines.append("")
        return lines

    def _render_styling(self, view: GraphView, safe_ids: dict[str, str]) -> list:
        lines = []
        if view.subgraph.nodes:
            lines.append("    %% Styling")
        for node in view.subgraph.nodes:
            lines.append(f"    style {safe_ids[node.id]} fill:{node_color(node)}")
        return lines

    def _escape_label(self, label: str) -> str:
        """Escape label for Mermaid rendering."""
        if not label:
            return ""

        label = label.replace('"', "'")
        label = label.replace("{", ":")  # /{id} reads as /:id
        label = label.replace("}", "")
        label = label.replace("|", "/")

        if len(label) > 40:
            label = label[:37] + "..."

        return label

    def _get_safe_id(self, node_id: str, index: int) -> str:
        """Get a unique Mermaid-safe id (alphanumeric + underscore) for a node."""
        return f"n{index}_" + re.sub(r"[^a-zA-Z0-9_]", "_", node_id).strip("_")


def top_level_of(path_id: str) -> str:
    """Top-level segment id of a path node id (``/users/{id}`` -> ``/users``)."""
    segments = [segment for segment in path_id.split("/") if segment]
    return f"/{segments[0]}" if segments else "/"
