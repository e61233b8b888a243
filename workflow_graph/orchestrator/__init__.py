"""Workflow sessions and the edge mutation API."""

from workflow_graph.orchestrator.session_store import SessionStore
from workflow_graph.orchestrator.workflow_session import (
    DependencyListener,
    MutationResult,
    WorkflowSession,
    WorkflowSnapshot,
)

__all__ = [
    "DependencyListener",
    "MutationResult",
    "SessionStore",
    "WorkflowSession",
    "WorkflowSnapshot",
]
