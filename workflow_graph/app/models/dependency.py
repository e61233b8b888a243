"""Dependency edge models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DependencyType(str, Enum):
    """Project-scheduling dependency kinds."""
    FINISH_TO_START = "finish-to-start"
    START_TO_START = "start-to-start"
    FINISH_TO_FINISH = "finish-to-finish"
    START_TO_FINISH = "start-to-finish"

    @property
    def label(self) -> str:
        """Short label shown on the edge (FS, SS, FF, SF)."""
        return _LABELS[self]

    @property
    def description(self) -> str:
        """Human-readable description of the constraint."""
        return _DESCRIPTIONS[self]

    def next(self) -> "DependencyType":
        """Next type in the retype cycle, wrapping around."""
        index = RETYPE_CYCLE.index(self)
        return RETYPE_CYCLE[(index + 1) % len(RETYPE_CYCLE)]


RETYPE_CYCLE: tuple[DependencyType, ...] = (
    DependencyType.FINISH_TO_START,
    DependencyType.START_TO_START,
    DependencyType.FINISH_TO_FINISH,
    DependencyType.START_TO_FINISH,
)

_LABELS = {
    DependencyType.FINISH_TO_START: "FS",
    DependencyType.START_TO_START: "SS",
    DependencyType.FINISH_TO_FINISH: "FF",
    DependencyType.START_TO_FINISH: "SF",
}

_DESCRIPTIONS = {
    DependencyType.FINISH_TO_START: "Task B cannot start until Task A finishes",
    DependencyType.START_TO_START: "Task B cannot start until Task A starts",
    DependencyType.FINISH_TO_FINISH: "Task B cannot finish until Task A finishes",
    DependencyType.START_TO_FINISH: "Task B cannot finish until Task A starts",
}


class DependencyEdge(BaseModel):
    """Directed dependency: ``source`` precedes ``target`` per ``type``."""
    id: str
    source: str
    target: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lag: int = 0  # days, may be negative


class DependencyChange(BaseModel):
    """Edge in the shape reported to ``on_dependency_change`` listeners."""
    model_config = ConfigDict(populate_by_name=True)

    from_task_id: str = Field(alias="fromTaskId")
    to_task_id: str = Field(alias="toTaskId")
    type: DependencyType = DependencyType.FINISH_TO_START

    @classmethod
    def from_edge(cls, edge: DependencyEdge) -> "DependencyChange":
        """Create the external shape from an edge."""
        return cls(from_task_id=edge.source, to_task_id=edge.target, type=edge.type)
