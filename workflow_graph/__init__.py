"""Task dependency graph engine for the workflow view."""

from workflow_graph.app.models import (
    DependencyChange,
    DependencyEdge,
    DependencyType,
    TaskNode,
    WorkflowSection,
    WorkflowTask,
)
from workflow_graph.graph import (
    RejectionReason,
    build_graph,
    critical_path,
    has_cycle,
    validate_dependency,
)
from workflow_graph.layout import (
    DependencyLevelLayout,
    LayeredGraphLayout,
    LayoutOptions,
    LayoutStrategy,
    SectionLayout,
)
from workflow_graph.orchestrator import MutationResult, SessionStore, WorkflowSession

__version__ = "0.1.0"

__all__ = [
    "DependencyChange",
    "DependencyEdge",
    "DependencyType",
    "TaskNode",
    "WorkflowSection",
    "WorkflowTask",
    "RejectionReason",
    "build_graph",
    "critical_path",
    "has_cycle",
    "validate_dependency",
    "DependencyLevelLayout",
    "LayeredGraphLayout",
    "LayoutOptions",
    "LayoutStrategy",
    "SectionLayout",
    "MutationResult",
    "SessionStore",
    "WorkflowSession",
]
