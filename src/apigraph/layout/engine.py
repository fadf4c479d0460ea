"""Layered layout engines.

A layout engine receives sized nodes and directed edges and returns the
*center* of every node. ``LayeredLayoutEngine`` is the default engine: a
compact Sugiyama-style placement built on networkx.

Phases:
  1. Rank assignment (longest path from the sources)
  2. Ordering within ranks (barycenter of predecessors, one forward sweep)
  3. Coordinate assignment (ranks along the flow axis, nodes stacked across it)
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

import networkx as nx

from ..config import LayoutDirection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Position:
    """Top-left corner of a laid out node."""
    x: float
    y: float


@dataclass(frozen=True)
class LayoutRequest:
    """Input contract of a layout engine."""
    node_sizes: dict[str, tuple[float, float]]  # id -> (width, height), in insertion order
    edges: Sequence[tuple[str, str]]
    direction: LayoutDirection = LayoutDirection.LEFT_RIGHT
    rank_sep: float = 50
    node_sep: float = 20


class LayoutEngine(ABC):
    """Abstract base class for layout engines."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name for logging."""
        pass

    @abstractmethod
    def place(self, request: LayoutRequest) -> dict[str, tuple[float, float]]:
        """Return the center coordinates of every requested node."""
        pass


class LayeredLayoutEngine(LayoutEngine):
    """Rank-based layered layout for directed graphs."""

    @property
    def name(self) -> str:
        return "layered"

    def place(self, request: LayoutRequest) -> dict[str, tuple[float, float]]:
        graph = nx.DiGraph()
        for node_id, (width, height) in request.node_sizes.items():
            graph.add_node(node_id, width=width, height=height)
        for source, target in request.edges:
            if source in graph and target in graph and source != target:
                graph.add_edge(source, target)

        if graph.number_of_nodes() == 0:
            return {}

        ranks = self._assign_ranks(graph)
        layers = self._order_layers(graph, ranks)
        return self._assign_coordinates(graph, layers, request)

    def _assign_ranks(self, graph: nx.DiGraph) -> dict[str, int]:
        """Longest-path layering; cycles are broken by ranking on the condensation."""
        if nx.is_directed_acyclic_graph(graph):
            dag, members = graph, {node: [node] for node in graph.nodes}
        else:
            dag = nx.condensation(graph)
            members = {component: dag.nodes[component]["members"] for component in dag.nodes}
            logger.debug(f"Graph has cycles, ranking {dag.number_of_nodes()} strongly connected components")

        component_rank: dict = {}
        for node in nx.topological_sort(dag):
            preds = [component_rank[pred] for pred in dag.predecessors(node)]
            component_rank[node] = max(preds) + 1 if preds else 0

        ranks = {}
        for component, rank in component_rank.items():
            for node in members[component]:
                ranks[node] = rank
        return ranks

    def _order_layers(self, graph: nx.DiGraph, ranks: dict[str, int]) -> list[list[str]]:
        """Group nodes by rank, ordering each rank by predecessor barycenter."""
        insertion = {node: index for index, node in enumerate(graph.nodes)}
        layers: list[list[str]] = [[] for _ in range(max(ranks.values()) + 1)]
        for node in graph.nodes:
            layers[ranks[node]].append(node)

        order: dict[str, float] = {node: float(i) for i, node in enumerate(layers[0])}
        for layer in layers[1:]:
            def barycenter(node: str) -> tuple[float, int]:
                placed = [order[pred] for pred in graph.predecessors(node) if pred in order]
                center = sum(placed) / len(placed) if placed else float(len(order))
                return center, insertion[node]

            layer.sort(key=barycenter)
            for position, node in enumerate(layer):
                order[node] = float(position)
        return layers

    def _assign_coordinates(self, graph: nx.DiGraph, layers: list[list[str]],
                            request: LayoutRequest) -> dict[str, tuple[float, float]]:
        horizontal = request.direction == LayoutDirection.LEFT_RIGHT

        def along(node: str) -> float:
            data = graph.nodes[node]
            return data["width"] if horizontal else data["height"]

        def across(node: str) -> float:
            data = graph.nodes[node]
            return data["height"] if horizontal else data["width"]

        extents = [sum(across(node) for node in layer) + request.node_sep * (len(layer) - 1) for layer in layers]
        widest = max(extents)

        centers: dict[str, tuple[float, float]] = {}
        rank_start = 0.0
        for layer, extent in zip(layers, extents):
            rank_size = max(along(node) for node in layer)
            rank_center = rank_start + rank_size / 2
            cursor = (widest - extent) / 2
            for node in layer:
                size = across(node)
                cross_center = cursor + size / 2
                centers[node] = (rank_center, cross_center) if horizontal else (cross_center, rank_center)
                cursor += size + request.node_sep
            rank_start += rank_size + request.rank_sep
        return centers
