"""Workflow session: owns one dependency graph and its mutation API."""

import logging
import uuid
from collections.abc import Callable
from typing import Optional

from pydantic import BaseModel

from workflow_graph.app.models import (
    DependencyChange,
    DependencyEdge,
    DependencyType,
    Point,
    TaskNode,
    WorkflowSection,
    WorkflowTask,
)
from workflow_graph.graph.builder import build_edges, build_node, new_edge_id
from workflow_graph.graph.critical_path import critical_path, critical_path_edges
from workflow_graph.graph.cycles import has_cycle
from workflow_graph.graph.validators import (
    IntegrityReport,
    RejectionReason,
    validate_dependency,
    validate_workflow_integrity,
)
from workflow_graph.layout import (
    DependencyLevelLayout,
    Direction,
    LayoutOptions,
    LayoutResult,
    LayoutStrategy,
    SectionLayout,
)

logger = logging.getLogger(__name__)

DependencyListener = Callable[[list[DependencyChange]], None]


class MutationResult(BaseModel):
    """Outcome of an edge mutation."""
    ok: bool
    edge: Optional[DependencyEdge] = None
    reason: Optional[RejectionReason] = None

    @classmethod
    def rejected(cls, reason: RejectionReason) -> "MutationResult":
        return cls(ok=False, reason=reason)


class WorkflowSnapshot(BaseModel):
    """Everything the rendering layer needs for one frame."""
    session_id: str
    nodes: list[TaskNode]
    edges: list[DependencyEdge]
    critical_path: list[str]
    auto_layout: bool
    layout_strategy: str


class WorkflowSession:
    """
    Dependency graph for one workflow view.

    The edge set is acyclic at all times: every new edge passes the
    dependency validator before it is committed, and ``connect``,
    ``retype``, ``update_edge`` and ``disconnect`` are the only ways edges
    change after construction. Derived state (positions and critical path)
    is recomputed after every committed mutation.
    """

    def __init__(
        self,
        tasks: list[WorkflowTask],
        sections: Optional[list[WorkflowSection]] = None,
        layout: Optional[LayoutStrategy] = None,
        options: Optional[LayoutOptions] = None,
        auto_layout: bool = True,
        on_dependency_change: Optional[DependencyListener] = None,
        session_id: Optional[str] = None
    ):
        """
        Initialize session from the task store's current tasks.

        Args:
            tasks: Tasks with predecessor lists
            sections: Sections in display order
            layout: Layout strategy (dependency leveling by default)
            options: Layout parameters
            auto_layout: Recompute positions after every mutation
            on_dependency_change: Listener for committed edge changes
            session_id: Session ID (generated when omitted)
        """
        self.id = session_id or uuid.uuid4().hex
        self.sections: list[WorkflowSection] = list(sections or [])
        self.layout_strategy: LayoutStrategy = layout or DependencyLevelLayout()
        self.layout_options: LayoutOptions = options or LayoutOptions()
        self.auto_layout_enabled = auto_layout

        self._tasks: dict[str, WorkflowTask] = {}
        self._nodes: dict[str, TaskNode] = {}
        self._edges: dict[str, DependencyEdge] = {}  # edge_id -> edge
        self._critical_path: list[str] = []
        self._listeners: list[DependencyListener] = []

        if on_dependency_change is not None:
            self._listeners.append(on_dependency_change)

        self.sync_tasks(tasks, notify=False)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> list[TaskNode]:
        """Current nodes with positions, in task order."""
        return list(self._nodes.values())

    @property
    def edges(self) -> list[DependencyEdge]:
        """Current edges, in creation order."""
        return list(self._edges.values())

    @property
    def tasks(self) -> list[WorkflowTask]:
        return list(self._tasks.values())

    def critical_path(self) -> list[str]:
        """Task IDs along the current critical path."""
        return list(self._critical_path)

    def critical_path_edges(self) -> list[DependencyEdge]:
        """Edges along the current critical path."""
        return critical_path_edges(self._critical_path, self.edges)

    def get_task(self, task_id: str) -> Optional[WorkflowTask]:
        return self._tasks.get(task_id)

    def get_edge(self, edge_id: str) -> Optional[DependencyEdge]:
        return self._edges.get(edge_id)

    def get_task_dependencies(self, task_id: str) -> list[str]:
        """IDs of tasks the given task depends on."""
        return [e.source for e in self._edges.values() if e.target == task_id]

    def get_task_dependents(self, task_id: str) -> list[str]:
        """IDs of tasks that depend on the given task."""
        return [e.target for e in self._edges.values() if e.source == task_id]

    def dependency_changes(self) -> list[DependencyChange]:
        """Current edges in the listener notification shape."""
        return [DependencyChange.from_edge(edge) for edge in self._edges.values()]

    def check_integrity(self) -> IntegrityReport:
        """Run the workflow integrity check on current tasks and edges."""
        return validate_workflow_integrity(self.tasks, self.edges)

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            session_id=self.id,
            nodes=self.nodes,
            edges=self.edges,
            critical_path=self.critical_path(),
            auto_layout=self.auto_layout_enabled,
            layout_strategy=self.layout_strategy.name,
        )

    def subscribe(self, listener: DependencyListener) -> None:
        """Register a listener for committed dependency changes."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Edge mutation API
    # ------------------------------------------------------------------

    def connect(self, source: str, target: str) -> MutationResult:
        """
        Add a finish-to-start dependency source -> target.

        Args:
            source: Predecessor task ID
            target: Dependent task ID

        Returns:
            MutationResult with the new edge, or the rejection reason
        """
        if source != target and (source not in self._nodes or target not in self._nodes):
            logger.warning(f"Rejected dependency {source} -> {target}: unknown task")
            return MutationResult.rejected(RejectionReason.UNKNOWN_TASK)

        validation = validate_dependency(source, target, self.edges)
        if not validation.valid:
            logger.warning(f"Rejected dependency {source} -> {target}: {validation.reason.value}")
            return MutationResult.rejected(validation.reason)

        edge = DependencyEdge(id=new_edge_id(), source=source, target=target)
        previous = dict(self._edges)
        self._edges[edge.id] = edge
        logger.info(f"Connected {source} -> {target} ({edge.id})")

        self._after_mutation(previous)
        return MutationResult(ok=True, edge=edge)

    def retype(self, edge_id: str) -> MutationResult:
        """
        Advance an edge to the next dependency type (FS -> SS -> FF -> SF -> FS).

        Args:
            edge_id: Edge to retype

        Returns:
            MutationResult with the updated edge
        """
        edge = self._edges.get(edge_id)
        if edge is None:
            logger.warning(f"Cannot retype unknown dependency {edge_id}")
            return MutationResult.rejected(RejectionReason.UNKNOWN_DEPENDENCY)

        return self._commit_update(edge, {"type": edge.type.next()})

    def update_edge(
        self,
        edge_id: str,
        type: Optional[DependencyType] = None,
        lag: Optional[int] = None
    ) -> MutationResult:
        """
        Set an edge's type and/or lag directly.

        Args:
            edge_id: Edge to update
            type: New dependency type
            lag: New lag in days

        Returns:
            MutationResult with the updated edge
        """
        edge = self._edges.get(edge_id)
        if edge is None:
            logger.warning(f"Cannot update unknown dependency {edge_id}")
            return MutationResult.rejected(RejectionReason.UNKNOWN_DEPENDENCY)

        updates: dict = {}
        if type is not None:
            updates["type"] = DependencyType(type)
        if lag is not None:
            updates["lag"] = lag
        return self._commit_update(edge, updates)

    def disconnect(self, edge_id: str) -> MutationResult:
        """
        Remove an edge. Removal cannot create a cycle, so nothing is validated.

        Args:
            edge_id: Edge to remove

        Returns:
            MutationResult with the removed edge
        """
        previous = dict(self._edges)
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            logger.warning(f"Cannot disconnect unknown dependency {edge_id}")
            return MutationResult.rejected(RejectionReason.UNKNOWN_DEPENDENCY)

        logger.info(f"Disconnected {edge.source} -> {edge.target} ({edge.id})")
        self._after_mutation(previous)
        return MutationResult(ok=True, edge=edge)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def auto_layout(
        self,
        direction: Optional[str] = None,
        strategy: Optional[LayoutStrategy] = None
    ) -> LayoutResult:
        """
        Lay out the graph now, optionally switching direction or strategy.

        Args:
            direction: TB, BT, LR or RL
            strategy: Layout strategy to use from now on

        Returns:
            LayoutResult
        """
        if strategy is not None:
            self.layout_strategy = strategy
        if direction is not None:
            self.layout_options = self.layout_options.model_copy(
                update={"direction": Direction(direction)}
            )
        return self._apply_layout()

    def set_auto_layout(self, enabled: bool) -> None:
        """Engage or disengage layout after every mutation."""
        self.auto_layout_enabled = enabled
        if enabled:
            self._apply_layout()

    def move_node(self, task_id: str, x: float, y: float) -> Optional[TaskNode]:
        """
        Place a node manually. Disengages auto-layout so the position sticks.

        Args:
            task_id: Node to move
            x: New left coordinate
            y: New top coordinate

        Returns:
            Updated node, or None if task_id is unknown
        """
        node = self._nodes.get(task_id)
        if node is None:
            logger.warning(f"Cannot move unknown task {task_id}")
            return None

        self.auto_layout_enabled = False
        moved = node.model_copy(update={"position": Point(x=x, y=y)})
        self._nodes[task_id] = moved
        return moved

    # ------------------------------------------------------------------
    # Task store synchronisation
    # ------------------------------------------------------------------

    def sync_tasks(
        self,
        tasks: list[WorkflowTask],
        sections: Optional[list[WorkflowSection]] = None,
        notify: bool = True
    ) -> None:
        """
        Bring nodes and edges in line with the task store.

        Nodes follow the task list; existing nodes keep their position.
        Edges whose endpoints disappeared are pruned. Task dependencies
        without an edge are added through the validator; rejected ones are
        logged and skipped.

        Args:
            tasks: Current tasks
            sections: Current sections (unchanged when omitted)
            notify: Fire listeners if the edge set changed
        """
        if sections is not None:
            self.sections = list(sections)
            if isinstance(self.layout_strategy, SectionLayout):
                self.layout_strategy = SectionLayout(self.sections)

        self._tasks = {}
        nodes: dict[str, TaskNode] = {}
        for index, task in enumerate(tasks):
            if task.id in nodes:
                logger.warning(f"Task {task.id} already exists in graph, replacing")
            self._tasks[task.id] = task
            existing = self._nodes.get(task.id)
            if existing is not None:
                nodes[task.id] = existing.model_copy(update={"task": task, "section": task.section})
            else:
                nodes[task.id] = build_node(task, index, self.sections)
        self._nodes = nodes

        changed = False
        for edge_id, edge in list(self._edges.items()):
            if edge.source not in self._nodes or edge.target not in self._nodes:
                del self._edges[edge_id]
                changed = True
                logger.info(f"Pruned dependency {edge.source} -> {edge.target}: task removed")

        existing_pairs = {(e.source, e.target) for e in self._edges.values()}
        for edge in build_edges(tasks):
            if (edge.source, edge.target) in existing_pairs:
                continue
            validation = validate_dependency(edge.source, edge.target, self.edges)
            if not validation.valid:
                logger.warning(
                    f"Skipping dependency {edge.source} -> {edge.target}: "
                    f"{validation.reason.value}"
                )
                continue
            self._edges[edge.id] = edge
            existing_pairs.add((edge.source, edge.target))
            changed = True

        self._recompute()
        if changed and notify:
            self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit_update(self, edge: DependencyEdge, updates: dict) -> MutationResult:
        """Replace an edge with an updated copy after re-checking acyclicity."""
        updated = edge.model_copy(update=updates)
        candidate = [updated if e.id == edge.id else e for e in self._edges.values()]
        if has_cycle(candidate):
            logger.warning(f"Rejected update of {edge.id}: would create a cycle")
            return MutationResult.rejected(RejectionReason.CYCLE)

        previous = dict(self._edges)
        self._edges[edge.id] = updated
        logger.info(
            f"Updated {edge.source} -> {edge.target}: {updated.type.value}, lag {updated.lag}"
        )
        self._after_mutation(previous)
        return MutationResult(ok=True, edge=updated)

    def _after_mutation(self, previous_edges: dict[str, DependencyEdge]) -> None:
        """Recompute derived state and notify, or restore the prior edge set."""
        nodes, path = self._nodes, self._critical_path
        try:
            self._recompute()
        except Exception as e:
            logger.error(f"Recompute failed, rolling back dependency change: {e}")
            self._edges = previous_edges
            self._nodes, self._critical_path = nodes, path
            raise
        self._notify()

    def _recompute(self) -> None:
        """Refresh derived state: positions (when auto) and critical path."""
        if self.auto_layout_enabled:
            self._apply_layout()
        self._critical_path = critical_path(self.nodes, self.edges)

    def _apply_layout(self) -> LayoutResult:
        result = self.layout_strategy.layout(self.nodes, self.edges, self.layout_options)
        self._nodes = {node.id: node for node in result.nodes}
        logger.debug(f"Applied {self.layout_strategy.name} layout to {len(result.nodes)} nodes")
        return result

    def _notify(self) -> None:
        """Send the full edge list to every listener."""
        changes = self.dependency_changes()
        for listener in self._listeners:
            try:
                listener(changes)
            except Exception as e:
                logger.error(f"Dependency change listener raised exception: {e}")
