"""Layered (Sugiyama-style) graph layout built on networkx."""

import logging
from typing import Optional

import networkx as nx

from workflow_graph.app.models import DependencyEdge, TaskNode
from workflow_graph.layout.base import (
    Alignment,
    Direction,
    LayoutOptions,
    LayoutResult,
    LayoutStrategy,
    attachment_sides,
)
from workflow_graph.layout.leveling import compute_levels

logger = logging.getLogger(__name__)


class LayeredGraphLayout(LayoutStrategy):
    """
    Rank-based layout for denser graphs.

    Steps:
        1. Rank assignment by longest path over a topological order
        2. Long edges split with virtual nodes so every edge spans one rank
        3. Crossing reduction with barycenter sweeps, keeping the best order
        4. Coordinates from rank/node separation, rotated for the direction
    """

    def __init__(self, sweeps: int = 4):
        """
        Initialize layout.

        Args:
            sweeps: Number of down+up barycenter passes
        """
        self.sweeps = sweeps

    @property
    def name(self) -> str:
        return "layered"

    def layout(
        self,
        nodes: list[TaskNode],
        edges: list[DependencyEdge],
        options: Optional[LayoutOptions] = None
    ) -> LayoutResult:
        opts = options or LayoutOptions()
        if not nodes:
            return LayoutResult(nodes=[], edges=list(edges))

        graph = self._build_rank_graph(nodes, edges)
        ranks = self._assign_ranks(graph, nodes, edges)
        layers = self._build_layers(graph, ranks)
        layers = self._reduce_crossings(graph, layers)
        virtual = {
            node_id for node_id, is_virtual in graph.nodes(data="virtual") if is_virtual
        }
        centers = self._assign_coordinates(layers, virtual, opts)

        incoming, outgoing = attachment_sides(opts.direction)
        positioned = []
        for node in nodes:
            cx, cy = centers[node.id]
            positioned.append(self._place(
                node,
                x=cx - opts.node_width / 2,
                y=cy - opts.node_height / 2,
                incoming=incoming,
                outgoing=outgoing,
            ))

        logger.debug(
            f"Layered layout: {len(nodes)} nodes, {len(layers)} ranks, "
            f"direction {Direction(opts.direction).value}"
        )
        return LayoutResult(nodes=positioned, edges=list(edges))

    def _build_rank_graph(
        self,
        nodes: list[TaskNode],
        edges: list[DependencyEdge]
    ) -> nx.DiGraph:
        """Build a DiGraph of known nodes; insertion order is kept as ``order``."""
        graph = nx.DiGraph()
        for index, node in enumerate(nodes):
            if node.id not in graph:
                graph.add_node(node.id, order=index, virtual=False)

        for edge in edges:
            if edge.source == edge.target:
                continue
            if edge.source in graph and edge.target in graph:
                graph.add_edge(edge.source, edge.target)

        return graph

    def _assign_ranks(
        self,
        graph: nx.DiGraph,
        nodes: list[TaskNode],
        edges: list[DependencyEdge]
    ) -> dict[str, int]:
        """Longest-path ranking; falls back to dependency levels on a cycle."""
        if not nx.is_directed_acyclic_graph(graph):
            logger.warning("Layered layout received a cyclic graph, using dependency levels")
            return compute_levels(nodes, edges)

        ranks: dict[str, int] = {}
        order = nx.get_node_attributes(graph, "order")
        for node_id in nx.lexicographical_topological_sort(graph, key=order.get):
            preds = list(graph.predecessors(node_id))
            ranks[node_id] = max(ranks[p] for p in preds) + 1 if preds else 0
        return ranks

    def _build_layers(
        self,
        graph: nx.DiGraph,
        ranks: dict[str, int]
    ) -> list[list[str]]:
        """
        Group nodes by rank, inserting virtual nodes along long edges.

        Mutates ``graph`` so that every edge connects adjacent ranks.
        """
        long_edges = [
            (u, v) for u, v in graph.edges()
            if ranks[v] - ranks[u] > 1
        ]
        for u, v in long_edges:
            graph.remove_edge(u, v)
            previous = u
            for rank in range(ranks[u] + 1, ranks[v]):
                virtual_id = f"__virtual__{u}__{v}__{rank}"
                graph.add_node(virtual_id, order=graph.number_of_nodes(), virtual=True)
                ranks[virtual_id] = rank
                graph.add_edge(previous, virtual_id)
                previous = virtual_id
            graph.add_edge(previous, v)

        layers: list[list[str]] = [[] for _ in range(max(ranks.values()) + 1)]
        order = nx.get_node_attributes(graph, "order")
        for node_id in sorted(graph.nodes, key=order.get):
            layers[ranks[node_id]].append(node_id)
        return layers

    def _reduce_crossings(
        self,
        graph: nx.DiGraph,
        layers: list[list[str]]
    ) -> list[list[str]]:
        """Barycenter sweeps; the ordering with the fewest crossings wins."""
        best = [list(layer) for layer in layers]
        best_crossings = self._count_crossings(graph, best)
        current = [list(layer) for layer in layers]

        for _ in range(self.sweeps):
            if best_crossings == 0:
                break

            for rank in range(1, len(current)):
                current[rank] = self._order_by_barycenter(
                    current[rank], current[rank - 1], graph.predecessors
                )
            for rank in range(len(current) - 2, -1, -1):
                current[rank] = self._order_by_barycenter(
                    current[rank], current[rank + 1], graph.successors
                )

            crossings = self._count_crossings(graph, current)
            if crossings < best_crossings:
                best = [list(layer) for layer in current]
                best_crossings = crossings

        return best

    @staticmethod
    def _order_by_barycenter(layer: list[str], fixed: list[str], neighbors) -> list[str]:
        """Sort a layer by mean neighbor position in the fixed layer."""
        fixed_index = {node_id: i for i, node_id in enumerate(fixed)}
        keys: dict[str, tuple[float, int]] = {}
        for i, node_id in enumerate(layer):
            positions = [fixed_index[n] for n in neighbors(node_id) if n in fixed_index]
            # Nodes without neighbors keep their current slot
            barycenter = sum(positions) / len(positions) if positions else float(i)
            keys[node_id] = (barycenter, i)
        return sorted(layer, key=keys.get)

    @staticmethod
    def _count_crossings(graph: nx.DiGraph, layers: list[list[str]]) -> int:
        """Count edge crossings between each pair of adjacent layers."""
        total = 0
        for upper, lower in zip(layers, layers[1:]):
            upper_index = {node_id: i for i, node_id in enumerate(upper)}
            lower_index = {node_id: i for i, node_id in enumerate(lower)}
            segments = [
                (upper_index[u], lower_index[v])
                for u in upper
                for v in graph.successors(u)
                if v in lower_index
            ]
            for i, (a1, b1) in enumerate(segments):
                for a2, b2 in segments[i + 1:]:
                    if (a1 - a2) * (b1 - b2) < 0:
                        total += 1
        return total

    @staticmethod
    def _assign_coordinates(
        layers: list[list[str]],
        virtual: set[str],
        opts: LayoutOptions
    ) -> dict[str, tuple[float, float]]:
        """Center coordinates of real nodes, rotated for the direction."""
        direction = Direction(opts.direction)
        vertical = direction in (Direction.TB, Direction.BT)
        rank_size = opts.node_height if vertical else opts.node_width
        breadth = opts.node_width if vertical else opts.node_height

        real_layers = [
            [node_id for node_id in layer if node_id not in virtual]
            for layer in layers
        ]
        spans = [
            len(layer) * breadth + max(len(layer) - 1, 0) * opts.node_sep
            for layer in real_layers
        ]
        max_span = max(spans)
        extent = len(layers) * rank_size + (len(layers) - 1) * opts.rank_sep

        centers: dict[str, tuple[float, float]] = {}
        for rank, layer in enumerate(real_layers):
            if opts.align is None:
                offset = (max_span - spans[rank]) / 2
            elif Alignment(opts.align) in (Alignment.UR, Alignment.DR):
                offset = max_span - spans[rank]
            else:
                offset = 0.0

            rank_center = rank * (rank_size + opts.rank_sep) + rank_size / 2
            if direction in (Direction.BT, Direction.RL):
                rank_center = extent - rank_center

            for i, node_id in enumerate(layer):
                across = offset + i * (breadth + opts.node_sep) + breadth / 2
                if vertical:
                    centers[node_id] = (across, rank_center)
                else:
                    centers[node_id] = (rank_center, across)

        return centers
