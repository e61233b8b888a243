"""Task and section models consumed from the task store."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class WorkflowSection(BaseModel):
    """Grouping of tasks (board column / project section)."""
    id: str
    title: str = ""
    color: Optional[str] = None


class WorkflowTask(BaseModel):
    """Task as exposed by the task store.

    Only ``id``, ``dependencies`` and ``section`` are read by the graph
    algorithms. The scheduling fields are carried through for display.
    """
    id: str
    title: str = ""
    section: Optional[str] = None
    dependencies: list[str] = []  # Predecessor task IDs

    # Scheduling payload
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    duration: Optional[int] = None  # days
    progress: float = 0.0
    priority: Optional[str] = None  # low, medium, high, urgent
    status: Optional[str] = None  # todo, in_progress, review, done
    color: Optional[str] = None
