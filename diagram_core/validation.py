"""
Diagram validation - Check diagrams for structural issues.

Used by the inspect operation to report problems in a loaded document.
Mutations keep a diagram consistent, but documents edited by hand (or by
other tools) may not be.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .edges import canonical_edge_id

if TYPE_CHECKING:
    from .models import Diagram


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Invalid state, must be fixed
    WARNING = "warning"  # Potential problem, should review
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a diagram."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        if self.edge_id:
            result["edge_id"] = self.edge_id
        return result


def validate_diagram(diagram: "Diagram") -> list[ValidationIssue]:
    """
    Validate a diagram and return a list of issues.

    Checks for:
    - Empty diagram - INFO
    - Invalid edge references (source/target doesn't exist) - ERROR
    - Parent references to missing nodes - ERROR
    - Duplicate edges for the same node pair, in either direction - WARNING
    - Orphan nodes (no connections) - INFO
    - Self-referencing edges - INFO
    """
    issues: list[ValidationIssue] = []

    if not diagram.nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Diagram has no nodes"
        ))
        return issues

    node_ids = {n.id for n in diagram.nodes}

    for edge in diagram.edges:
        if edge.source not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Edge references non-existent source node: {edge.source}",
                edge_id=edge.id
            ))
        if edge.target not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Edge references non-existent target node: {edge.target}",
                edge_id=edge.id
            ))

    for node in diagram.nodes:
        if node.parent is not None and node.parent not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Node references non-existent parent: {node.parent}",
                node_id=node.id
            ))

    # Linking always reuses the edge of a pair, so a second one came from elsewhere
    seen_pairs: set[str] = set()
    for edge in diagram.edges:
        pair = canonical_edge_id(edge.source, edge.target)
        if pair in seen_pairs:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Duplicate edge between {edge.source} and {edge.target}",
                edge_id=edge.id
            ))
        else:
            seen_pairs.add(pair)

    connected: set[str] = set()
    for edge in diagram.edges:
        connected.add(edge.source)
        connected.add(edge.target)

    # Containers are connected through their children
    parents = {n.parent for n in diagram.nodes if n.parent is not None}
    orphans = [n for n in diagram.nodes
               if n.id not in connected and n.id not in parents and n.parent is None]
    if orphans and diagram.edges:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message=f"Orphan nodes (no connections): {', '.join(n.id for n in orphans)}"
        ))

    for edge in diagram.edges:
        if edge.source == edge.target:
            issues.append(ValidationIssue(
                severity=IssueSeverity.INFO,
                message="Self-referencing edge (node points to itself)",
                edge_id=edge.id,
                node_id=edge.source
            ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """Create a summary of validation issues with counts by severity."""
    errors = len([i for i in issues if i.severity == IssueSeverity.ERROR])
    return {
        "total": len(issues),
        "errors": errors,
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": errors == 0
    }
