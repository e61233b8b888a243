"""Section layout: one row per section."""

import logging
from typing import Optional

from workflow_graph.app.models import DependencyEdge, Side, TaskNode, WorkflowSection
from workflow_graph.layout.base import LayoutOptions, LayoutResult, LayoutStrategy

logger = logging.getLogger(__name__)


class SectionLayout(LayoutStrategy):
    """
    Places each section's tasks on its own row, in section order.

    Tasks whose section is unknown share a trailing row. Edges do not
    influence positions.
    """

    def __init__(self, sections: Optional[list[WorkflowSection]] = None):
        """
        Initialize layout.

        Args:
            sections: Sections in display order
        """
        self.sections = list(sections or [])

    @property
    def name(self) -> str:
        return "sections"

    def layout(
        self,
        nodes: list[TaskNode],
        edges: list[DependencyEdge],
        options: Optional[LayoutOptions] = None
    ) -> LayoutResult:
        opts = options or LayoutOptions()
        row_by_section = {section.id: row for row, section in enumerate(self.sections)}
        trailing_row = len(self.sections)

        index_in_row: dict[int, int] = {}
        positioned = []
        for node in nodes:
            row = row_by_section.get(node.section, trailing_row)
            column = index_in_row.get(row, 0)
            index_in_row[row] = column + 1

            positioned.append(self._place(
                node,
                x=column * opts.section_node_spacing,
                y=row * opts.section_spacing,
                incoming=Side.LEFT,
                outgoing=Side.RIGHT,
            ))

        if trailing_row in index_in_row:
            logger.debug(f"{index_in_row[trailing_row]} nodes placed in the unsectioned row")

        return LayoutResult(nodes=positioned, edges=list(edges))
