"""Dependency-level layout: columns by longest dependency chain."""

import logging
from typing import Optional

from workflow_graph.app.models import DependencyEdge, Side, TaskNode
from workflow_graph.layout.base import LayoutOptions, LayoutResult, LayoutStrategy

logger = logging.getLogger(__name__)


def compute_levels(
    nodes: list[TaskNode],
    edges: list[DependencyEdge]
) -> dict[str, int]:
    """
    Calculate the level of every node.

    A node without predecessors is level 0; any other node sits one level
    past its deepest predecessor. Edges touching nodes outside ``nodes`` are
    ignored. A node reached again while its own level is still being
    computed (only possible on a cyclic graph) counts as level 0.

    Args:
        nodes: Graph nodes
        edges: Dependency edges

    Returns:
        Dict of node ID -> level
    """
    node_ids = {node.id for node in nodes}
    predecessors: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
    for edge in edges:
        if edge.source in node_ids and edge.target in node_ids:
            predecessors[edge.target].append(edge.source)

    levels: dict[str, int] = {}

    for node in nodes:
        if node.id in levels:
            continue

        # Explicit stack: predecessor chains can be arbitrarily deep
        visiting = {node.id}
        pending: dict[str, int] = {node.id: 0}
        stack = [(node.id, iter(predecessors[node.id]))]

        while stack:
            node_id, deps = stack[-1]
            for dep_id in deps:
                if dep_id in levels:
                    dep_level = levels[dep_id]
                elif dep_id in visiting:
                    logger.warning(f"Circular dependency reached at {dep_id}, using level 0")
                    dep_level = 0
                else:
                    visiting.add(dep_id)
                    pending[dep_id] = 0
                    stack.append((dep_id, iter(predecessors[dep_id])))
                    break
                pending[node_id] = max(pending[node_id], dep_level + 1)
            else:
                stack.pop()
                visiting.discard(node_id)
                levels[node_id] = pending.pop(node_id)
                if stack:
                    parent_id = stack[-1][0]
                    pending[parent_id] = max(pending[parent_id], levels[node_id] + 1)

    return levels


class DependencyLevelLayout(LayoutStrategy):
    """Places nodes in columns by dependency level, left to right."""

    @property
    def name(self) -> str:
        return "leveling"

    def layout(
        self,
        nodes: list[TaskNode],
        edges: list[DependencyEdge],
        options: Optional[LayoutOptions] = None
    ) -> LayoutResult:
        opts = options or LayoutOptions()
        levels = compute_levels(nodes, edges)

        # Index within level follows input order
        index_in_level: dict[str, int] = {}
        level_sizes: dict[int, int] = {}
        for node in nodes:
            level = levels[node.id]
            index_in_level[node.id] = level_sizes.get(level, 0)
            level_sizes[level] = index_in_level[node.id] + 1

        positioned = [
            self._place(
                node,
                x=levels[node.id] * (opts.node_width + opts.rank_sep),
                y=index_in_level[node.id] * (opts.node_height + opts.node_sep),
                incoming=Side.LEFT,
                outgoing=Side.RIGHT,
            )
            for node in nodes
        ]

        logger.debug(
            f"Leveled {len(nodes)} nodes into {len(level_sizes)} levels"
        )
        return LayoutResult(nodes=positioned, edges=list(edges))
