"""
Graph validation - Report structural oddities in layout input.

Layout tolerates every issue reported here: unknown endpoints are dropped,
self-loops and duplicate connections are harmless. The report lets callers
surface them instead of silently getting a layout of a different graph.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional

from .models import Connection, Node, Size


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Layout will refuse this input
    WARNING = "warning"  # Layout proceeds but ignores part of the input
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in layout input."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None
    connection_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        if self.connection_id:
            result["connection_id"] = self.connection_id
        return result


def validate_graph(
    nodes: Iterable[Node],
    connections: Iterable[Connection],
    node_sizes: Optional[Mapping[str, Size]] = None,
) -> list[ValidationIssue]:
    """
    Validate layout input and return a list of issues.

    Checks for:
    - Empty graph - INFO
    - Duplicate node IDs - ERROR
    - Connections referencing unknown nodes - WARNING
    - Self-referencing connections - WARNING
    - Duplicate connections (same source->target) - WARNING
    - Isolated nodes (no connections) - INFO
    - Size overrides for unknown nodes - INFO

    Args:
        nodes: Nodes to lay out
        connections: Connections between them
        node_sizes: Optional size overrides

    Returns:
        List of ValidationIssue objects
    """
    issues: list[ValidationIssue] = []
    nodes = list(nodes)
    connections = list(connections)

    if not nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Graph has no nodes"
        ))
        return issues

    node_ids: set[str] = set()
    for node in nodes:
        if node.id in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Duplicate node id: {node.id}",
                node_id=node.id
            ))
        node_ids.add(node.id)

    connected_nodes: set[str] = set()
    seen_pairs: set[tuple[str, str]] = set()

    for conn in connections:
        known = True
        if conn.source not in node_ids:
            known = False
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Connection references non-existent source node: {conn.source}",
                connection_id=conn.id
            ))
        if conn.target not in node_ids:
            known = False
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Connection references non-existent target node: {conn.target}",
                connection_id=conn.id
            ))
        if not known:
            continue

        connected_nodes.add(conn.source)
        connected_nodes.add(conn.target)

        if conn.source == conn.target:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Self-referencing connection (node points to itself)",
                node_id=conn.source,
                connection_id=conn.id
            ))

        pair = (conn.source, conn.target)
        if pair in seen_pairs:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Duplicate connection from {conn.source} to {conn.target}",
                connection_id=conn.id
            ))
        else:
            seen_pairs.add(pair)

    isolated = [node.id for node in nodes if node.id not in connected_nodes]
    if isolated and connections:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message=f"Isolated nodes (no connections): {', '.join(isolated)}"
        ))

    for node_id in (node_sizes or {}):
        if node_id not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.INFO,
                message=f"Size override for unknown node: {node_id}",
                node_id=node_id
            ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    errors = len([i for i in issues if i.severity == IssueSeverity.ERROR])
    return {
        "total": len(issues),
        "errors": errors,
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": errors == 0
    }
