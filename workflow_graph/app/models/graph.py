"""Graph node models handed to the rendering layer."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .task import WorkflowTask


class Side(str, Enum):
    """Node side where an edge attaches."""
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class Point(BaseModel):
    """Top-left coordinates of a node."""
    x: float = 0.0
    y: float = 0.0


class TaskNode(BaseModel):
    """Node in the task dependency graph."""
    id: str
    task: WorkflowTask
    section: Optional[str] = None
    position: Point = Field(default_factory=Point)
    target_position: Side = Side.LEFT  # incoming edges
    source_position: Side = Side.RIGHT  # outgoing edges
