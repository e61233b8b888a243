"""Dependency validation and workflow integrity checks."""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from workflow_graph.app.models import DependencyEdge, DependencyType, WorkflowTask
from workflow_graph.graph.cycles import has_cycle

logger = logging.getLogger(__name__)


class RejectionReason(str, Enum):
    """Why a proposed mutation was refused."""
    SELF_DEPENDENCY = "self-dependency"
    DUPLICATE = "duplicate dependency"
    CYCLE = "would create a cycle"
    UNKNOWN_TASK = "unknown task"
    UNKNOWN_DEPENDENCY = "unknown dependency"


class DependencyValidation(BaseModel):
    """Result of validating a proposed edge."""
    valid: bool
    reason: Optional[RejectionReason] = None


class IntegrityReport(BaseModel):
    """Result of a whole-workflow integrity check."""
    valid: bool
    errors: list[str] = []
    warnings: list[str] = []


def validate_dependency(
    source: str,
    target: str,
    existing_edges: list[DependencyEdge]
) -> DependencyValidation:
    """
    Decide whether the edge source -> target may be added.

    Checks run in order and stop at the first failure: self-dependency,
    duplicate, then cycle. Nothing is modified.

    Args:
        source: Predecessor task ID
        target: Dependent task ID
        existing_edges: Current edge set

    Returns:
        DependencyValidation with the rejection reason if invalid
    """
    if source == target:
        return DependencyValidation(valid=False, reason=RejectionReason.SELF_DEPENDENCY)

    if any(e.source == source and e.target == target for e in existing_edges):
        return DependencyValidation(valid=False, reason=RejectionReason.DUPLICATE)

    candidate = DependencyEdge(id="__candidate__", source=source, target=target)
    if has_cycle([*existing_edges, candidate]):
        return DependencyValidation(valid=False, reason=RejectionReason.CYCLE)

    return DependencyValidation(valid=True)


def validate_workflow_integrity(
    tasks: list[WorkflowTask],
    edges: list[DependencyEdge]
) -> IntegrityReport:
    """
    Check a task list and edge set for consistency.

    Errors:
        - the edge set contains a cycle
        - a task depends on a task that does not exist

    Warnings:
        - edges and task dependency lists disagree
        - dates conflict with a finish-to-start or start-to-start edge

    Args:
        tasks: Tasks from the task store
        edges: Current dependency edges

    Returns:
        IntegrityReport
    """
    errors: list[str] = []
    warnings: list[str] = []
    task_by_id = {task.id: task for task in tasks}

    if has_cycle(edges):
        errors.append("Workflow contains circular dependencies")

    for task in tasks:
        for dep_id in task.dependencies:
            if dep_id not in task_by_id:
                errors.append(f'Task "{task.title or task.id}" depends on non-existent task: {dep_id}')

    edge_pairs = [(e.source, e.target) for e in edges]
    task_pairs = [(dep_id, task.id) for task in tasks for dep_id in task.dependencies]
    edge_pair_set = set(edge_pairs)
    task_pair_set = set(task_pairs)

    for source, target in edge_pairs:
        if (source, target) not in task_pair_set:
            warnings.append(f"Edge exists but not reflected in task dependencies: {source}-{target}")
    for source, target in task_pairs:
        if (source, target) not in edge_pair_set:
            warnings.append(f"Task dependency exists but no edge found: {source}-{target}")

    for edge in edges:
        source_task = task_by_id.get(edge.source)
        target_task = task_by_id.get(edge.target)
        if source_task is None or target_task is None:
            continue
        warning = _scheduling_conflict(source_task, target_task, edge.type)
        if warning:
            warnings.append(warning)

    if errors:
        logger.warning(f"Workflow integrity check failed with {len(errors)} errors")

    return IntegrityReport(valid=not errors, errors=errors, warnings=warnings)


def _scheduling_conflict(
    source: WorkflowTask,
    target: WorkflowTask,
    dependency_type: DependencyType
) -> Optional[str]:
    """Describe a date conflict for FS/SS edges, if any."""
    source_name = source.title or source.id
    target_name = target.title or target.id

    if dependency_type == DependencyType.FINISH_TO_START:
        if source.end_date and target.start_date and source.end_date > target.start_date:
            return f'Scheduling conflict: "{source_name}" ends after "{target_name}" starts'

    if dependency_type == DependencyType.START_TO_START:
        if source.start_date and target.start_date and source.start_date > target.start_date:
            return f'Scheduling conflict: "{source_name}" starts after "{target_name}" starts'

    return None
