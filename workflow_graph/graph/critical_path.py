"""Critical path (longest dependency chain) analysis."""

import logging
from typing import Optional

from workflow_graph.app.models import DependencyEdge, TaskNode

logger = logging.getLogger(__name__)


def critical_path(nodes: list[TaskNode], edges: list[DependencyEdge]) -> list[str]:
    """
    Calculate the critical path (longest path by edge count).

    Searches depth-first from every start node (no incoming edges) in node
    order, following outgoing edges in edge order, and keeps the longest
    start-to-end path. When several paths are equally long, the first one
    discovered wins. Longest suffixes are memoized, so each node is expanded
    once.

    Args:
        nodes: Graph nodes
        edges: Dependency edges; edges to unknown nodes are ignored

    Returns:
        Task IDs from start node to end node, or [] for an empty graph
    """
    node_ids = [node.id for node in nodes]
    known = set(node_ids)
    successors: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
    has_incoming: set[str] = set()

    for edge in edges:
        if edge.source in known and edge.target in known:
            successors[edge.source].append(edge.target)
            has_incoming.add(edge.target)

    start_nodes = [node_id for node_id in node_ids if node_id not in has_incoming]

    # Nodes on the longest path starting at each node, and the next hop on it
    length: dict[str, int] = {}
    best_next: dict[str, Optional[str]] = {}
    finished: set[str] = set()

    def expand(start_id: str) -> None:
        # Depth-first with an explicit stack so long chains cannot exhaust
        # the interpreter's recursion limit
        on_path = {start_id}
        length[start_id], best_next[start_id] = 1, None
        stack = [(start_id, iter(successors[start_id]))]

        while stack:
            node_id, children = stack[-1]
            for next_id in children:
                if next_id in on_path:
                    # Residual cycle; stop here rather than loop forever
                    logger.warning(f"Cycle through {next_id} ignored in critical path search")
                    continue
                if next_id not in finished:
                    on_path.add(next_id)
                    length[next_id], best_next[next_id] = 1, None
                    stack.append((next_id, iter(successors[next_id])))
                    break
                if length[next_id] + 1 > length[node_id]:
                    length[node_id] = length[next_id] + 1
                    best_next[node_id] = next_id
            else:
                stack.pop()
                on_path.discard(node_id)
                finished.add(node_id)
                if stack:
                    parent_id = stack[-1][0]
                    if length[node_id] + 1 > length[parent_id]:
                        length[parent_id] = length[node_id] + 1
                        best_next[parent_id] = node_id

    best_start: Optional[str] = None
    for start_id in start_nodes:
        expand(start_id)
        if best_start is None or length[start_id] > length[best_start]:
            best_start = start_id

    path: list[str] = []
    current = best_start
    while current is not None:
        path.append(current)
        current = best_next[current]
    return path


def critical_path_edges(path: list[str], edges: list[DependencyEdge]) -> list[DependencyEdge]:
    """
    Get the edges joining consecutive nodes of a path.

    Args:
        path: Ordered task IDs
        edges: Dependency edges

    Returns:
        Edges along the path, in path order
    """
    by_pair = {(edge.source, edge.target): edge for edge in edges}
    return [
        by_pair[(source, target)]
        for source, target in zip(path, path[1:])
        if (source, target) in by_pair
    ]
