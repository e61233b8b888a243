"""Cycle detection over dependency edges."""

import logging
from collections.abc import Iterable
from typing import Optional

from workflow_graph.app.models import DependencyEdge

logger = logging.getLogger(__name__)


def _adjacency(edges: Iterable[DependencyEdge]) -> dict[str, list[str]]:
    """Build source -> [targets] adjacency, listing every endpoint as a key."""
    graph: dict[str, list[str]] = {}
    for edge in edges:
        graph.setdefault(edge.source, []).append(edge.target)
        graph.setdefault(edge.target, [])
    return graph


def find_cycle(edges: Iterable[DependencyEdge]) -> Optional[list[str]]:
    """
    Find one cycle in the edge set.

    Iterative DFS from every unvisited node, keeping the nodes on the
    current path in a set separate from the fully visited set. Reaching a
    node that is still on the path closes a cycle. O(V + E).

    Args:
        edges: Dependency edges

    Returns:
        Cycle path with the first node repeated at the end, or None if acyclic
    """
    graph = _adjacency(edges)
    visited: set[str] = set()
    on_stack: set[str] = set()

    for root in graph:
        if root in visited:
            continue

        path = [root]
        stack = [iter(graph[root])]
        visited.add(root)
        on_stack.add(root)

        while stack:
            next_id = next(stack[-1], None)
            if next_id is None:
                stack.pop()
                on_stack.discard(path.pop())
                continue

            if next_id in on_stack:
                start = path.index(next_id)
                return path[start:] + [next_id]

            if next_id not in visited:
                visited.add(next_id)
                on_stack.add(next_id)
                path.append(next_id)
                stack.append(iter(graph[next_id]))

    return None


def has_cycle(edges: Iterable[DependencyEdge]) -> bool:
    """
    Check whether the edge set contains any cycle.

    Args:
        edges: Dependency edges

    Returns:
        True if at least one cycle exists
    """
    cycle = find_cycle(edges)
    if cycle:
        logger.debug(f"Cycle found: {' -> '.join(cycle)}")
        return True
    return False
