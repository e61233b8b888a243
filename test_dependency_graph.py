"""Tests for graph building, cycle detection, validation and critical path."""

import logging
import random
import sys
from datetime import datetime
from pathlib import Path

import networkx as nx

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from workflow_graph.app.models import DependencyEdge, DependencyType, WorkflowSection, WorkflowTask
from workflow_graph.graph import (
    RejectionReason,
    build_graph,
    critical_path,
    critical_path_edges,
    find_cycle,
    has_cycle,
    validate_dependency,
    validate_workflow_integrity,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def edge(source: str, target: str, edge_id: str = "") -> DependencyEdge:
    return DependencyEdge(id=edge_id or f"{source}-{target}", source=source, target=target)


def diamond_tasks() -> list[WorkflowTask]:
    return [
        WorkflowTask(id="A", title="Design"),
        WorkflowTask(id="B", title="Backend", dependencies=["A"]),
        WorkflowTask(id="C", title="Frontend", dependencies=["A"]),
        WorkflowTask(id="D", title="Release", dependencies=["B", "C"]),
    ]


# ----------------------------------------------------------------------
# Graph model builder
# ----------------------------------------------------------------------

def test_build_graph_emits_one_edge_per_dependency():
    graph = build_graph(diamond_tasks())

    assert [n.id for n in graph.nodes] == ["A", "B", "C", "D"]
    assert [(e.source, e.target) for e in graph.edges] == [
        ("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"),
    ]
    assert all(e.type == DependencyType.FINISH_TO_START for e in graph.edges)
    assert all(e.lag == 0 for e in graph.edges)
    assert len({e.id for e in graph.edges}) == 4


def test_build_graph_omits_unknown_self_and_repeated_dependencies():
    tasks = [
        WorkflowTask(id="A"),
        WorkflowTask(id="B", dependencies=["A", "ghost", "A", "B"]),
    ]

    graph = build_graph(tasks)

    assert [(e.source, e.target) for e in graph.edges] == [("A", "B")]


def test_build_graph_seeds_positions_from_sections():
    sections = [WorkflowSection(id="todo"), WorkflowSection(id="doing")]
    tasks = [
        WorkflowTask(id="A", section="doing"),
        WorkflowTask(id="B", section="todo"),
        WorkflowTask(id="C", section="unknown"),
    ]

    graph = build_graph(tasks, sections)
    positions = {n.id: (n.position.x, n.position.y) for n in graph.nodes}

    assert positions == {"A": (0, 150), "B": (300, 0), "C": (600, 0)}
    assert graph.nodes[0].section == "doing"


# ----------------------------------------------------------------------
# Cycle detector
# ----------------------------------------------------------------------

def test_has_cycle_on_dag_and_cycle():
    assert not has_cycle([])
    assert not has_cycle([edge("A", "B"), edge("B", "C"), edge("A", "C")])
    assert has_cycle([edge("A", "B"), edge("B", "C"), edge("C", "A")])
    assert has_cycle([edge("A", "A")])


def test_has_cycle_handles_disconnected_components():
    edges = [
        edge("A", "B"),
        edge("X", "Y"), edge("Y", "Z"),
        edge("P", "Q"), edge("Q", "R"), edge("R", "P"),
    ]
    assert has_cycle(edges)
    assert not has_cycle(edges[:3])


def test_find_cycle_returns_closed_path():
    cycle = find_cycle([edge("S", "A"), edge("A", "B"), edge("B", "C"), edge("C", "A")])

    assert cycle == ["A", "B", "C", "A"]
    assert find_cycle([edge("A", "B")]) is None


def test_has_cycle_on_long_chain_does_not_recurse():
    chain = [edge(f"t{i}", f"t{i + 1}") for i in range(5000)]
    assert not has_cycle(chain)
    assert has_cycle(chain + [edge("t5000", "t0")])


# ----------------------------------------------------------------------
# Dependency validator
# ----------------------------------------------------------------------

def test_validate_rejects_self_dependency():
    result = validate_dependency("A", "A", [])

    assert not result.valid
    assert result.reason == RejectionReason.SELF_DEPENDENCY
    assert result.reason.value == "self-dependency"


def test_validate_rejects_duplicate():
    result = validate_dependency("A", "B", [edge("A", "B")])

    assert not result.valid
    assert result.reason.value == "duplicate dependency"


def test_validate_rejects_cycle_and_accepts_shortcut():
    chain = [edge("a", "b"), edge("b", "c")]

    closing = validate_dependency("c", "a", chain)
    assert not closing.valid
    assert closing.reason.value == "would create a cycle"

    shortcut = validate_dependency("a", "c", chain)
    assert shortcut.valid
    assert shortcut.reason is None


def test_validate_checks_self_before_duplicate():
    result = validate_dependency("A", "A", [edge("A", "A")])
    assert result.reason == RejectionReason.SELF_DEPENDENCY


# ----------------------------------------------------------------------
# Critical path analyzer
# ----------------------------------------------------------------------

def test_critical_path_on_diamond():
    graph = build_graph(diamond_tasks())

    path = critical_path(graph.nodes, graph.edges)

    assert path in (["A", "B", "D"], ["A", "C", "D"])
    # First discovered wins
    assert path == ["A", "B", "D"]


def test_critical_path_edge_cases():
    assert critical_path([], []) == []

    graph = build_graph([WorkflowTask(id="solo")])
    assert critical_path(graph.nodes, graph.edges) == ["solo"]


def test_critical_path_prefers_longer_branch_from_later_start():
    tasks = [
        WorkflowTask(id="short"),
        WorkflowTask(id="end1", dependencies=["short"]),
        WorkflowTask(id="long"),
        WorkflowTask(id="m1", dependencies=["long"]),
        WorkflowTask(id="m2", dependencies=["m1"]),
        WorkflowTask(id="end2", dependencies=["m2"]),
    ]
    graph = build_graph(tasks)

    assert critical_path(graph.nodes, graph.edges) == ["long", "m1", "m2", "end2"]


def test_critical_path_ignores_edges_to_removed_nodes():
    graph = build_graph(diamond_tasks())
    nodes = [n for n in graph.nodes if n.id != "D"]

    assert critical_path(nodes, graph.edges) == ["A", "B"]


def test_critical_path_terminates_on_residual_cycle():
    graph = build_graph([WorkflowTask(id="A"), WorkflowTask(id="B"), WorkflowTask(id="C")])
    edges = [edge("A", "B"), edge("B", "C"), edge("C", "B")]

    assert critical_path(graph.nodes, edges) == ["A", "B", "C"]


def test_critical_path_on_long_chain_does_not_recurse():
    count = 5000
    tasks = [WorkflowTask(id=f"t{i}", dependencies=[f"t{i - 1}"] if i else []) for i in range(count)]
    graph = build_graph(tasks)

    forward = critical_path(graph.nodes, graph.edges)
    backward = critical_path(list(reversed(graph.nodes)), graph.edges)

    assert forward == [f"t{i}" for i in range(count)]
    assert backward == forward


def test_critical_path_edges_follow_path():
    graph = build_graph(diamond_tasks())
    path = critical_path(graph.nodes, graph.edges)

    along = critical_path_edges(path, graph.edges)

    assert [(e.source, e.target) for e in along] == [("A", "B"), ("B", "D")]


def test_critical_path_is_valid_and_maximal_on_random_dags():
    rng = random.Random(7)

    for _ in range(25):
        count = rng.randint(1, 25)
        tasks = []
        for i in range(count):
            deps = [f"t{j}" for j in range(i) if rng.random() < 0.15]
            tasks.append(WorkflowTask(id=f"t{i}", dependencies=deps))
        graph = build_graph(tasks)

        path = critical_path(graph.nodes, graph.edges)
        pairs = {(e.source, e.target) for e in graph.edges}
        targets = {e.target for e in graph.edges}
        sources = {e.source for e in graph.edges}

        assert all((a, b) in pairs for a, b in zip(path, path[1:]))
        assert path[0] not in targets
        assert path[-1] not in sources

        dag = nx.DiGraph()
        dag.add_nodes_from(n.id for n in graph.nodes)
        dag.add_edges_from(pairs)
        assert len(path) == nx.dag_longest_path_length(dag) + 1


# ----------------------------------------------------------------------
# Workflow integrity
# ----------------------------------------------------------------------

def test_integrity_reports_missing_tasks_and_cycles():
    tasks = [
        WorkflowTask(id="A", dependencies=["C"]),
        WorkflowTask(id="B", title="Build", dependencies=["A", "missing"]),
        WorkflowTask(id="C", dependencies=["B"]),
    ]
    edges = [edge("C", "A"), edge("A", "B"), edge("B", "C")]

    report = validate_workflow_integrity(tasks, edges)

    assert not report.valid
    assert "Workflow contains circular dependencies" in report.errors
    assert 'Task "Build" depends on non-existent task: missing' in report.errors


def test_integrity_warns_on_inconsistency_and_dates():
    tasks = [
        WorkflowTask(
            id="A", title="Design",
            start_date=datetime(2024, 1, 1), end_date=datetime(2024, 1, 10),
        ),
        WorkflowTask(
            id="B", title="Build", dependencies=["A"],
            start_date=datetime(2024, 1, 5), end_date=datetime(2024, 1, 20),
        ),
        WorkflowTask(id="C"),
    ]
    edges = [edge("A", "B"), edge("B", "C")]

    report = validate_workflow_integrity(tasks, edges)

    assert report.valid
    assert "Edge exists but not reflected in task dependencies: B-C" in report.warnings
    assert 'Scheduling conflict: "Design" ends after "Build" starts' in report.warnings


def test_integrity_skips_date_checks_for_other_types():
    tasks = [
        WorkflowTask(id="A", start_date=datetime(2024, 1, 1), end_date=datetime(2024, 1, 10)),
        WorkflowTask(id="B", dependencies=["A"], start_date=datetime(2024, 1, 5)),
    ]
    ff_edge = DependencyEdge(id="e1", source="A", target="B", type=DependencyType.FINISH_TO_FINISH)

    report = validate_workflow_integrity(tasks, [ff_edge])

    assert report.valid
    assert report.warnings == []


if __name__ == "__main__":
    test_build_graph_emits_one_edge_per_dependency()
    test_validate_rejects_cycle_and_accepts_shortcut()
    test_critical_path_on_diamond()
    print("✓ Dependency graph tests passed")
