"""Compile diagnostics for apigraph.

Records the document fragments that were skipped while compiling a graph.
"""

from .issues import (
    CompileIssue,
    IssueCollector,
    IssueKind,
    IssueSeverity,
)

__all__ = [
    "CompileIssue",
    "IssueCollector",
    "IssueKind",
    "IssueSeverity",
]
