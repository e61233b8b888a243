"""Layout strategy interface and shared layout models."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from workflow_graph.app.models import DependencyEdge, Point, Side, TaskNode


class Direction(str, Enum):
    """Layout direction (rank axis)."""
    TB = "TB"  # top to bottom
    BT = "BT"  # bottom to top
    LR = "LR"  # left to right
    RL = "RL"  # right to left


class Alignment(str, Enum):
    """Alignment of nodes within a rank."""
    UL = "UL"
    UR = "UR"
    DL = "DL"
    DR = "DR"


class LayoutOptions(BaseModel):
    """Layout parameters shared by all strategies."""
    direction: Direction = Direction.LR
    node_width: float = 300
    node_height: float = 200
    rank_sep: float = 100
    node_sep: float = 50
    align: Optional[Alignment] = Alignment.UL

    # Section layout
    section_spacing: float = 400
    section_node_spacing: float = 320


class LayoutResult(BaseModel):
    """Positioned nodes plus the unchanged edge list."""
    nodes: list[TaskNode]
    edges: list[DependencyEdge]

    def positions(self) -> dict[str, tuple[float, float]]:
        """Map of node ID to top-left (x, y)."""
        return {node.id: (node.position.x, node.position.y) for node in self.nodes}


# (incoming, outgoing) attachment sides per direction
_ATTACHMENT_SIDES = {
    Direction.TB: (Side.TOP, Side.BOTTOM),
    Direction.BT: (Side.BOTTOM, Side.TOP),
    Direction.LR: (Side.LEFT, Side.RIGHT),
    Direction.RL: (Side.RIGHT, Side.LEFT),
}


def attachment_sides(direction: Direction) -> tuple[Side, Side]:
    """
    Get attachment sides implied by a layout direction.

    Args:
        direction: Layout direction

    Returns:
        Tuple of (incoming side, outgoing side)
    """
    return _ATTACHMENT_SIDES[Direction(direction)]


class LayoutStrategy(ABC):
    """Base class for node layout strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name used to select this strategy from configuration."""
        pass

    @abstractmethod
    def layout(
        self,
        nodes: list[TaskNode],
        edges: list[DependencyEdge],
        options: Optional[LayoutOptions] = None
    ) -> LayoutResult:
        """
        Compute positions for every node.

        Input nodes are not modified; positioned copies are returned.

        Args:
            nodes: Graph nodes in insertion order
            edges: Dependency edges
            options: Layout parameters (defaults when omitted)

        Returns:
            LayoutResult with positioned nodes and the same edges
        """
        pass

    @staticmethod
    def _place(
        node: TaskNode,
        x: float,
        y: float,
        incoming: Side,
        outgoing: Side
    ) -> TaskNode:
        """Return a copy of node at (x, y) with the given attachment sides."""
        return node.model_copy(update={
            "position": Point(x=x, y=y),
            "target_position": incoming,
            "source_position": outgoing,
        })
