"""Graph invariant validation rules."""

from collections import Counter

from ..diagnostics import IssueSeverity
from ..graph.models import CompiledGraph, EdgeRelation, NodeKind, OperationNode
from ..graph.visibility import ancestor_ids
from .framework import ValidationResult, ValidationRule, ValidationStatus


class UniqueNodeIdsRule(ValidationRule):
    """No two nodes share an id."""

    @property
    def name(self) -> str:
        return "unique_node_ids"

    def validate(self, graph: CompiledGraph, result: ValidationResult) -> None:
        counts = Counter(node.id for node in graph.nodes)
        result.increment_counter("nodes", len(graph.nodes))

        for node_id, count in counts.items():
            if count > 1:
                result.add_issue(self.name, ValidationStatus.FAIL, f"Node id used {count} times", node_id)


class UniqueEdgeIdsRule(ValidationRule):
    """No two edges share an id."""

    @property
    def name(self) -> str:
        return "unique_edge_ids"

    def validate(self, graph: CompiledGraph, result: ValidationResult) -> None:
        counts = Counter(edge.id for edge in graph.edges)
        result.increment_counter("edges", len(graph.edges))

        for edge_id, count in counts.items():
            if count > 1:
                result.add_issue(self.name, ValidationStatus.FAIL, f"Edge id '{edge_id}' used {count} times")


class EdgeEndpointsRule(ValidationRule):
    """Every edge connects two existing nodes."""

    @property
    def name(self) -> str:
        return "edge_endpoints"

    def validate(self, graph: CompiledGraph, result: ValidationResult) -> None:
        known = {node.id for node in graph.nodes}

        for edge in graph.edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in known:
                    result.add_issue(
                        self.name,
                        ValidationStatus.FAIL,
                        f"Edge '{edge.id}' references unknown node",
                        endpoint,
                    )


class PathTreeRule(ValidationRule):
    """Parent/child edges form a tree whose parents are id prefixes of their children."""

    @property
    def name(self) -> str:
        return "path_tree"

    def validate(self, graph: CompiledGraph, result: ValidationResult) -> None:
        parents: dict[str, list[str]] = {}
        for edge in graph.edges:
            if edge.relation == EdgeRelation.PARENT_CHILD:
                parents.setdefault(edge.target, []).append(edge.source)

        for node in graph.nodes_of_kind(NodeKind.PATH_SEGMENT):
            node_parents = parents.get(node.id, [])
            if len(node_parents) > 1:
                result.add_issue(self.name, ValidationStatus.FAIL, f"Path node has {len(node_parents)} parents", node.id)
                continue

            expected = next(ancestor_ids(node.id), None)
            actual = node_parents[0] if node_parents else None
            if actual != expected:
                result.add_issue(
                    self.name,
                    ValidationStatus.FAIL,
                    f"Parent is '{actual}', expected '{expected}'",
                    node.id,
                )
            else:
                result.increment_counter("path_nodes")


class OperationOwnerRule(ValidationRule):
    """Every operation belongs to an existing path node and is invoked from it."""

    @property
    def name(self) -> str:
        return "operation_owner"

    def validate(self, graph: CompiledGraph, result: ValidationResult) -> None:
        invoked = {(edge.source, edge.target) for edge in graph.edges if edge.relation == EdgeRelation.INVOKES}

        for node in graph.nodes:
            if not isinstance(node, OperationNode):
                continue
            owner = graph.get_node(node.path_id)
            if owner is None or owner.kind != NodeKind.PATH_SEGMENT:
                result.add_issue(self.name, ValidationStatus.FAIL, f"Owner '{node.path_id}' is not a path node", node.id)
            elif (node.path_id, node.id) not in invoked:
                result.add_issue(self.name, ValidationStatus.FAIL, "Operation is not invoked by its owner", node.id)
            else:
                result.increment_counter("operations")


class CompileIssuesRule(ValidationRule):
    """Surface skipped document fragments as warnings."""

    @property
    def name(self) -> str:
        return "compile_issues"

    def validate(self, graph: CompiledGraph, result: ValidationResult) -> None:
        for issue in graph.issues:
            if issue.severity == IssueSeverity.WARNING:
                result.add_issue(self.name, ValidationStatus.WARN, f"{issue.kind.value}: {issue.message}", issue.location)
                result.increment_counter("skipped_fragments")
