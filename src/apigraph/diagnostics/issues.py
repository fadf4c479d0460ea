"""Compile issue collection for apigraph.

Collects document fragments the compiler could not understand. None of them
abort compilation: the fragment is skipped and recorded here so callers can
report what was left out of the graph.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class IssueSeverity(str, Enum):
    """Issue severity levels."""
    WARNING = "warning"  # Fragment skipped
    INFO = "info"        # Fragment ignored on purpose (non-method keys)


class IssueKind(str, Enum):
    """Kinds of skipped or adjusted fragments."""
    UNRESOLVED_REFERENCE = "unresolved_reference"
    MALFORMED_PATH_ITEM = "malformed_path_item"
    MALFORMED_OPERATION = "malformed_operation"
    MALFORMED_COMPONENTS = "malformed_components"
    DUPLICATE_ID = "duplicate_id"
    IGNORED_KEY = "ignored_key"


@dataclass(frozen=True)
class CompileIssue:
    """A single skipped or adjusted document fragment."""
    kind: IssueKind
    severity: IssueSeverity
    message: str
    location: str  # JSON pointer fragment (or node id for duplicate_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "location": self.location,
        }

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.kind.value}: {self.message} at {self.location}"


class IssueCollector:
    """Collects issues during a single compilation, in encounter order."""

    def __init__(self):
        self.issues: List[CompileIssue] = []

    def warn(self, kind: IssueKind, message: str, location: str) -> CompileIssue:
        """Record a skipped fragment."""
        return self._collect(kind, IssueSeverity.WARNING, message, location)

    def info(self, kind: IssueKind, message: str, location: str) -> CompileIssue:
        """Record a fragment that was ignored on purpose."""
        return self._collect(kind, IssueSeverity.INFO, message, location)

    def _collect(self, kind: IssueKind, severity: IssueSeverity, message: str, location: str) -> CompileIssue:
        issue = CompileIssue(kind=kind, severity=severity, message=message, location=location)
        self.issues.append(issue)
        logger.debug(f"Collected {issue}")
        return issue

    def has_warnings(self) -> bool:
        """Check if any fragment was skipped."""
        return any(issue.severity == IssueSeverity.WARNING for issue in self.issues)

