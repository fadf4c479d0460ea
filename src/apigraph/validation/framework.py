"""Core validation framework for compiled graphs.

Checks structural invariants of a compiled graph (id uniqueness, edge
endpoints, path tree shape) with pluggable rules. The source document
itself is not validated.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..graph.models import CompiledGraph

logger = logging.getLogger(__name__)


class ValidationStatus(str, Enum):
    """Validation status, ordered pass < warn < fail."""
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


_STATUS_RANK = {ValidationStatus.PASS: 0, ValidationStatus.WARN: 1, ValidationStatus.FAIL: 2}


@dataclass
class ValidationIssue:
    """One broken invariant, optionally tied to a node id."""
    rule: str
    severity: ValidationStatus
    message: str
    node_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "nodeId": self.node_id,
        }

    def __str__(self) -> str:
        location = f" at {self.node_id}" if self.node_id else ""
        return f"[{self.severity.value.upper()}] {self.rule}: {self.message}{location}"


@dataclass
class ValidationResult:
    """Outcome of checking one compiled graph."""
    status: ValidationStatus = ValidationStatus.PASS
    issues: list[ValidationIssue] = field(default_factory=list)
    counters: dict[str, int] = field(default_factory=dict)
    rules: list[str] = field(default_factory=list)  # Names of the rules that ran

    @property
    def exit_code(self) -> int:
        """Exit code for CI: warnings pass, failures do not."""
        return 1 if self.status == ValidationStatus.FAIL else 0

    def add_issue(self, rule: str, severity: ValidationStatus, message: str, node_id: str | None = None) -> None:
        issue = ValidationIssue(rule, severity, message, node_id)
        self.issues.append(issue)
        logger.debug(f"Recorded {issue}")
        if _STATUS_RANK[severity] > _STATUS_RANK[self.status]:
            self.status = severity

    def increment_counter(self, name: str, value: int = 1) -> None:
        self.counters[name] = self.counters.get(name, 0) + value

    def to_dict(self) -> dict[str, Any]:
        """JSON report of the run."""
        return {
            "status": self.status.value,
            "exitCode": self.exit_code,
            "rules": list(self.rules),
            "counters": dict(sorted(self.counters.items())),
            "issues": [issue.to_dict() for issue in self.issues],
        }


class ValidationRule(ABC):
    """Base class for graph invariant rules."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule name used in reports and by ``--rule``."""

    @abstractmethod
    def validate(self, graph: CompiledGraph, result: ValidationResult) -> None:
        """Record issues and counters for ``graph`` on ``result``."""


class ValidationFramework:
    """Runs a set of named rules over compiled graphs."""

    def __init__(self):
        self.rules: list[ValidationRule] = []

    @property
    def rule_names(self) -> list[str]:
        return [rule.name for rule in self.rules]

    def add_rule(self, rule: ValidationRule) -> None:
        self.rules.append(rule)

    def validate(self, graph: CompiledGraph, only: Iterable[str] | None = None) -> ValidationResult:
        """Run every registered rule, or just the ones named in ``only``.

        Raises:
            ValueError: If ``only`` names a rule that is not registered
        """
        selected = self.rules
        if only is not None:
            wanted = set(only)
            unknown = wanted - set(self.rule_names)
            if unknown:
                raise ValueError(
                    f"Unknown rule(s): {', '.join(sorted(unknown))}. "
                    f"Available: {', '.join(self.rule_names)}"
                )
            selected = [rule for rule in self.rules if rule.name in wanted]

        result = ValidationResult()
        logger.info(f"Checking {len(graph.nodes)} nodes with {len(selected)} rules")

        for rule in selected:
            result.rules.append(rule.name)
            try:
                rule.validate(graph, result)
            except Exception as e:
                logger.error(f"Rule {rule.name} failed with error: {e}")
                result.add_issue(rule.name, ValidationStatus.FAIL, f"Rule execution failed: {e}")

        logger.info(f"Validation finished: {result.status.value} ({len(result.issues)} issues)")
        return result

    def create_default_rules(self) -> None:
        """Register the graph invariant rules in reporting order."""
        from .rules import (
            CompileIssuesRule,
            EdgeEndpointsRule,
            OperationOwnerRule,
            PathTreeRule,
            UniqueEdgeIdsRule,
            UniqueNodeIdsRule,
        )

        for rule in (
            UniqueNodeIdsRule(),
            UniqueEdgeIdsRule(),
            EdgeEndpointsRule(),
            PathTreeRule(),
            OperationOwnerRule(),
            CompileIssuesRule(),
        ):
            self.add_rule(rule)
