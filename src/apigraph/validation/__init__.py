"""Validation layer for compiled graphs.

Checks that a compiled graph satisfies its structural invariants before it
is handed to renderers or CI pipelines.
"""

from .framework import ValidationFramework, ValidationIssue, ValidationResult, ValidationRule, ValidationStatus
from .rules import (
    CompileIssuesRule,
    EdgeEndpointsRule,
    OperationOwnerRule,
    PathTreeRule,
    UniqueEdgeIdsRule,
    UniqueNodeIdsRule,
)

__all__ = [
    "ValidationFramework",
    "ValidationIssue",
    "ValidationResult",
    "ValidationRule",
    "ValidationStatus",
    "UniqueNodeIdsRule",
    "UniqueEdgeIdsRule",
    "EdgeEndpointsRule",
    "PathTreeRule",
    "OperationOwnerRule",
    "CompileIssuesRule",
]
