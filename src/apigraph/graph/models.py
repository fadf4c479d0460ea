"""Graph data models for compiled API description graphs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Union


class NodeKind(str, Enum):
    """Node kinds produced by the compiler."""
    PATH_SEGMENT = "path_segment"
    OPERATION = "operation"
    PAYLOAD_SCHEMA = "payload_schema"


class EdgeRelation(str, Enum):
    """Relations carried by compiled edges."""
    PARENT_CHILD = "parent_child"
    INVOKES = "invokes"
    PRODUCES = "produces"
    CONSUMES = "consumes"


@dataclass(frozen=True)
class PathSegmentNode:
    """A `/`-delimited path prefix shared by every path below it."""
    id: str  # Concatenated prefix, e.g. "/users/{id}"
    label: str  # "/{id}"
    tooltip_text: str
    segment: str
    depth: int  # 1 for top-level segments
    is_parameter: bool = False
    has_children: bool = False
    operation_count: int = 0
    kind: Literal[NodeKind.PATH_SEGMENT] = NodeKind.PATH_SEGMENT

    @property
    def is_top_level(self) -> bool:
        return self.depth == 1

    @property
    def collapsible(self) -> bool:
        """Whether collapsing this node would hide anything."""
        return self.has_children or self.operation_count > 0


@dataclass(frozen=True)
class OperationNode:
    """One HTTP method defined under a full path."""
    id: str  # "<path_id>_<METHOD>"
    label: str
    tooltip_text: str
    path_id: str  # Owning path segment node
    method: str  # Upper-case HTTP method
    summary: str = ""
    description: str = ""
    kind: Literal[NodeKind.OPERATION] = NodeKind.OPERATION


@dataclass(frozen=True)
class SchemaProperty:
    name: str
    type: str


@dataclass(frozen=True)
class PayloadSchemaNode:
    """A named payload shape referenced by one or more operations."""
    id: str  # "schema_<name>"
    label: str
    tooltip_text: str
    schema_name: str
    properties: tuple[SchemaProperty, ...] = ()
    kind: Literal[NodeKind.PAYLOAD_SCHEMA] = NodeKind.PAYLOAD_SCHEMA


GraphNode = Union[PathSegmentNode, OperationNode, PayloadSchemaNode]


@dataclass(frozen=True)
class GraphEdge:
    """A directed edge between two compiled nodes."""
    id: str
    source: str
    target: str
    relation: EdgeRelation
    label: str | None = None
    status_codes: tuple[str, ...] = ()  # Produces edges only

    @staticmethod
    def make_id(source: str, target: str, relation: EdgeRelation) -> str:
        """Derive the stable edge id from its endpoints and relation."""
        return f"{relation.value}:{source}->{target}"


@dataclass
class CompiledGraph:
    """Complete compiled graph in first-encounter order."""
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    issues: list = field(default_factory=list)  # CompileIssue records

    def __post_init__(self) -> None:
        self._index: dict[str, GraphNode] | None = None

    @property
    def node_index(self) -> dict[str, GraphNode]:
        """Nodes keyed by id."""
        if self._index is None or len(self._index) != len(self.nodes):
            self._index = {node.id: node for node in self.nodes}
        return self._index

    def get_node(self, node_id: str) -> GraphNode | None:
        return self.node_index.get(node_id)

    def nodes_of_kind(self, kind: NodeKind) -> list[GraphNode]:
        return [node for node in self.nodes if node.kind == kind]

    @property
    def is_empty(self) -> bool:
        return not self.nodes


@dataclass
class VisibleSubgraph:
    """Edge-closed subset of a compiled graph, in compiled order."""
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    @property
    def node_ids(self) -> frozenset[str]:
        return frozenset(node.id for node in self.nodes)

    @property
    def edge_ids(self) -> frozenset[str]:
        return frozenset(edge.id for edge in self.edges)

    def __contains__(self, node_id: str) -> bool:
        return any(node.id == node_id for node in self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)
