"""Convert task lists into graph nodes and dependency edges."""

import logging
import uuid
from typing import Optional

from pydantic import BaseModel

from workflow_graph.app.models import (
    DependencyEdge,
    DependencyType,
    Point,
    TaskNode,
    WorkflowSection,
    WorkflowTask,
)

logger = logging.getLogger(__name__)

# Seed spacing before any layout strategy runs
INITIAL_COLUMN_SPACING = 300
INITIAL_ROW_SPACING = 150


class GraphModel(BaseModel):
    """Nodes and edges built from a task list."""
    nodes: list[TaskNode] = []
    edges: list[DependencyEdge] = []


def new_edge_id() -> str:
    """Generate an opaque edge ID."""
    return uuid.uuid4().hex


def build_node(
    task: WorkflowTask,
    index: int = 0,
    sections: Optional[list[WorkflowSection]] = None
) -> TaskNode:
    """
    Create a graph node for a task with its seed position.

    Args:
        task: Task to wrap
        index: Position of the task in the task list
        sections: Known sections, used for the seed row

    Returns:
        TaskNode
    """
    section_ids = [section.id for section in sections or []]
    row = section_ids.index(task.section) if task.section in section_ids else 0

    return TaskNode(
        id=task.id,
        task=task,
        section=task.section,
        position=Point(x=index * INITIAL_COLUMN_SPACING, y=row * INITIAL_ROW_SPACING),
    )


def build_edges(tasks: list[WorkflowTask]) -> list[DependencyEdge]:
    """
    Create one finish-to-start edge per (predecessor, task) pair.

    Dependencies on unknown tasks, self-references and repeats are omitted.

    Args:
        tasks: Tasks with predecessor lists

    Returns:
        List of edges in task order
    """
    known_ids = {task.id for task in tasks}
    edges: list[DependencyEdge] = []
    seen: set[tuple[str, str]] = set()

    for task in tasks:
        for dep_id in task.dependencies:
            if dep_id not in known_ids:
                logger.debug(f"Task {task.id} depends on unknown task {dep_id}, skipping")
                continue
            if dep_id == task.id or (dep_id, task.id) in seen:
                logger.debug(f"Skipping self or repeated dependency {dep_id} -> {task.id}")
                continue

            seen.add((dep_id, task.id))
            edges.append(DependencyEdge(
                id=new_edge_id(),
                source=dep_id,
                target=task.id,
                type=DependencyType.FINISH_TO_START,
            ))

    return edges


def build_graph(
    tasks: list[WorkflowTask],
    sections: Optional[list[WorkflowSection]] = None
) -> GraphModel:
    """
    Build the dependency graph for a task list.

    Args:
        tasks: Tasks from the task store
        sections: Section hints (layout only)

    Returns:
        GraphModel with one node per task and one edge per known dependency
    """
    nodes = [build_node(task, index, sections) for index, task in enumerate(tasks)]
    edges = build_edges(tasks)

    logger.debug(f"Built graph with {len(nodes)} nodes and {len(edges)} edges")
    return GraphModel(nodes=nodes, edges=edges)
