"""Renderer framework for positioned graph views."""

from abc import ABC, abstractmethod

from .models import NodeKind, OperationNode, PathSegmentNode
from .session import GraphView

METHOD_COLORS = {
    "GET": "#4CAF50",
    "POST": "#FF9800",
    "PUT": "#2196F3",
    "DELETE": "#F44336",
    "PATCH": "#9C27B0",
    "DEFAULT": "#607D8B",
}

PATH_COLOR = "#BBDEFB"
PARAMETER_PATH_COLOR = "#E1BEE7"
SCHEMA_COLOR = "#FFD54F"


def node_color(node) -> str:
    """Background colour hint for a node."""
    if isinstance(node, PathSegmentNode):
        return PARAMETER_PATH_COLOR if node.is_parameter else PATH_COLOR
    if isinstance(node, OperationNode):
        return METHOD_COLORS.get(node.method, METHOD_COLORS["DEFAULT"])
    if node.kind == NodeKind.PAYLOAD_SCHEMA:
        return SCHEMA_COLOR
    return METHOD_COLORS["DEFAULT"]


class GraphRenderer(ABC):
    """Abstract base class for graph renderers."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Name of the output format."""
        pass

    @abstractmethod
    def render(self, view: GraphView) -> str:
        """Render a positioned graph view to string format."""
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get file extension for this format."""
        pass
