"""Layout strategies for the workflow graph."""

from typing import Optional

from workflow_graph.app.models import WorkflowSection
from workflow_graph.exceptions import UnknownLayoutStrategyError
from workflow_graph.layout.base import (
    Alignment,
    Direction,
    LayoutOptions,
    LayoutResult,
    LayoutStrategy,
    attachment_sides,
)
from workflow_graph.layout.layered import LayeredGraphLayout
from workflow_graph.layout.leveling import DependencyLevelLayout, compute_levels
from workflow_graph.layout.sections import SectionLayout

STRATEGY_NAMES = ["leveling", "layered", "sections"]


def get_layout_strategy(
    name: str,
    sections: Optional[list[WorkflowSection]] = None
) -> LayoutStrategy:
    """
    Resolve a layout strategy by name.

    Args:
        name: One of ``leveling``, ``layered``, ``sections``
        sections: Section order, used by the section layout

    Returns:
        LayoutStrategy instance

    Raises:
        UnknownLayoutStrategyError: If name is not registered
    """
    if name == "leveling":
        return DependencyLevelLayout()
    if name == "layered":
        return LayeredGraphLayout()
    if name == "sections":
        return SectionLayout(sections)
    raise UnknownLayoutStrategyError(name, STRATEGY_NAMES)


__all__ = [
    "Alignment",
    "Direction",
    "LayoutOptions",
    "LayoutResult",
    "LayoutStrategy",
    "LayeredGraphLayout",
    "DependencyLevelLayout",
    "SectionLayout",
    "STRATEGY_NAMES",
    "attachment_sides",
    "compute_levels",
    "get_layout_strategy",
]
