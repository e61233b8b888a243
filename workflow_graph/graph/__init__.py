"""Graph construction, validation and analysis."""

from workflow_graph.graph.builder import GraphModel, build_edges, build_graph, build_node, new_edge_id
from workflow_graph.graph.critical_path import critical_path, critical_path_edges
from workflow_graph.graph.cycles import find_cycle, has_cycle
from workflow_graph.graph.validators import (
    DependencyValidation,
    IntegrityReport,
    RejectionReason,
    validate_dependency,
    validate_workflow_integrity,
)

__all__ = [
    "GraphModel",
    "build_edges",
    "build_graph",
    "build_node",
    "new_edge_id",
    "critical_path",
    "critical_path_edges",
    "find_cycle",
    "has_cycle",
    "DependencyValidation",
    "IntegrityReport",
    "RejectionReason",
    "validate_dependency",
    "validate_workflow_integrity",
]
