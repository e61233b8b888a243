"""Pydantic models shared by the graph engine and the API."""

from workflow_graph.app.models.dependency import (
    DependencyChange,
    DependencyEdge,
    DependencyType,
    RETYPE_CYCLE,
)
from workflow_graph.app.models.graph import Point, Side, TaskNode
from workflow_graph.app.models.task import WorkflowSection, WorkflowTask

__all__ = [
    "DependencyChange",
    "DependencyEdge",
    "DependencyType",
    "RETYPE_CYCLE",
    "Point",
    "Side",
    "TaskNode",
    "WorkflowSection",
    "WorkflowTask",
]
