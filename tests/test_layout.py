import math
import threading
from unittest.mock import MagicMock

import numpy as np
import pytest

from conceptgraph.config import GraphSettings, LayoutKind
from conceptgraph.graph_model import GraphModel
from conceptgraph.layout import (
    CircularLayout,
    ForceDirectedLayout,
    HierarchicalLayout,
    compute_layout,
    get_layout_engine,
    rank_of,
)
from conceptgraph.models import Edge, Node, Position

from conftest import make_random_graph


@pytest.fixture
def random_graph():
    nodes, edges = make_random_graph(7, node_count=15, edge_count=25)
    return GraphModel.load(nodes, edges)


@pytest.fixture
def settings():
    return GraphSettings(iterations=30)


def test_force_layout_is_deterministic(random_graph, settings):
    """Test that the same seed gives bit-identical positions."""
    first = ForceDirectedLayout().compute(random_graph, settings, seed=42)
    second = ForceDirectedLayout().compute(random_graph, settings, seed=42)

    assert first == second
    assert set(first) == {node.id for node in random_graph.nodes}


def test_force_layout_depends_on_seed(random_graph, settings):
    first = ForceDirectedLayout().compute(random_graph, settings, seed=1)
    second = ForceDirectedLayout().compute(random_graph, settings, seed=2)
    assert first != second


def test_force_layout_returns_plain_floats(random_graph, settings):
    positions = ForceDirectedLayout().compute(random_graph, settings, seed=3)
    for position in positions.values():
        assert type(position.x) is float
        assert math.isfinite(position.x) and math.isfinite(position.y)


def test_force_layout_degenerate_graphs(settings):
    assert ForceDirectedLayout().compute(GraphModel.load([], []), settings) == {}

    single = GraphModel.load([Node(id="only", label="Only")], [])
    assert ForceDirectedLayout().compute(single, settings, seed=9) == {"only": Position(200.0, 150.0)}


def test_force_layout_with_zero_iterations_keeps_initial_placement(random_graph):
    positions = ForceDirectedLayout().compute(random_graph, GraphSettings(iterations=0), seed=5)
    for position in positions.values():
        assert 0 <= position.x <= 400
        assert 0 <= position.y <= 300


def test_repulsion_pushes_two_nodes_apart():
    graph = GraphModel.load([Node(id="a", label="A"), Node(id="b", label="B")], [])
    start = ForceDirectedLayout().compute(graph, GraphSettings(iterations=0), seed=11)
    end = ForceDirectedLayout().compute(graph, GraphSettings(iterations=20), seed=11)

    def gap(p):
        return math.dist((p["a"].x, p["a"].y), (p["b"].x, p["b"].y))

    assert gap(end) > gap(start)


@pytest.mark.parametrize("gap, push", [(0.5, 1000.0), (1.0, 1000.0), (2.0, 250.0)])
def test_repulsion_magnitude_uses_floored_distance(gap, push):
    positions = np.array([[0.0, 0.0], [gap, 0.0]])

    displacement = ForceDirectedLayout._repulsion(positions, 1000.0)

    assert displacement[0] == pytest.approx([-push, 0.0])
    assert displacement[1] == pytest.approx([push, 0.0])


def test_coincident_nodes_get_no_repulsion():
    positions = np.array([[5.0, 5.0], [5.0, 5.0]])

    displacement = ForceDirectedLayout._repulsion(positions, 1000.0)

    assert np.all(displacement == 0.0)


def test_attraction_pulls_connected_nodes_together():
    nodes = [Node(id="a", label="A"), Node(id="b", label="B")]
    graph = GraphModel.load(nodes, [Edge("a", "b", weight=1.0)])
    no_repulsion = GraphSettings(iterations=0, repulsion=0.0)
    start = ForceDirectedLayout().compute(graph, no_repulsion, seed=4)
    end = ForceDirectedLayout().compute(
        graph, GraphSettings(iterations=1, repulsion=0.0, attraction=0.1), seed=4
    )

    before = math.dist((start["a"].x, start["a"].y), (start["b"].x, start["b"].y))
    after = math.dist((end["a"].x, end["a"].y), (end["b"].x, end["b"].y))
    # each endpoint moves 0.1 * d toward the other
    assert after == pytest.approx(before * 0.8)


def test_force_layout_can_be_cancelled(random_graph):
    """Test that setting the event mid-run aborts without a partial result."""
    cancel = threading.Event()
    seen = []

    def progress(done, total):
        seen.append(done)
        if done == 3:
            cancel.set()

    result = ForceDirectedLayout().compute(
        random_graph, GraphSettings(iterations=50), seed=0, cancel_event=cancel, progress_callback=progress
    )

    assert result is None
    assert seen == [1, 2, 3]


def test_cancelled_before_start_returns_none(random_graph, settings):
    cancel = threading.Event()
    cancel.set()
    for engine in (ForceDirectedLayout(), CircularLayout(), HierarchicalLayout()):
        assert engine.compute(random_graph, settings, cancel_event=cancel) is None


def test_progress_callback_reports_every_iteration(random_graph):
    callback = MagicMock()
    ForceDirectedLayout().compute(random_graph, GraphSettings(iterations=4), progress_callback=callback)

    assert callback.call_count == 4
    callback.assert_called_with(4, 4)


@pytest.mark.parametrize("seed", range(5))
def test_circular_layout_puts_every_node_on_the_circle(seed):
    nodes, edges = make_random_graph(seed, node_count=seed + 3)
    graph = GraphModel.load(nodes, edges)
    settings = GraphSettings(layout=LayoutKind.CIRCULAR, radius=120.0, center=(10.0, -5.0))

    positions = CircularLayout().compute(graph, settings)

    for position in positions.values():
        assert math.hypot(position.x - 10.0, position.y + 5.0) == pytest.approx(120.0)


def test_circular_layout_uses_input_order(scenario_graph):
    positions = CircularLayout().compute(scenario_graph, GraphSettings())

    assert positions["A"].x == pytest.approx(350.0)
    assert positions["A"].y == pytest.approx(150.0)
    angle = math.atan2(positions["B"].y - 150.0, positions["B"].x - 200.0)
    assert angle == pytest.approx(2 * math.pi / 3)


def test_circular_layout_of_empty_graph():
    assert CircularLayout().compute(GraphModel.load([], []), GraphSettings()) == {}


def test_hierarchical_ranks():
    assert rank_of("prerequisite") == 0
    assert rank_of("concept") == 1
    assert rank_of("skill") == 2
    assert rank_of("topic") == 3
    assert rank_of("outcome") == 4
    assert rank_of("project") == 2


@pytest.mark.parametrize("seed", range(5))
def test_hierarchical_same_rank_same_row(seed):
    nodes, edges = make_random_graph(seed, node_count=20)
    graph = GraphModel.load(nodes, edges)
    positions = HierarchicalLayout().compute(graph, GraphSettings())

    for a in nodes:
        for b in nodes:
            if rank_of(a.type) == rank_of(b.type):
                assert positions[a.id].y == positions[b.id].y


def test_hierarchical_spacing_follows_input_order():
    nodes = [
        Node(id="p1", label="P1", type="prerequisite"),
        Node(id="o1", label="O1", type="outcome"),
        Node(id="p2", label="P2", type="prerequisite"),
        Node(id="x", label="X", type="unknown"),
        Node(id="s", label="S", type="skill"),
    ]
    positions = HierarchicalLayout().compute(GraphModel.load(nodes, []), GraphSettings())

    assert positions["p1"] == Position(400 / 3, 50.0)
    assert positions["p2"] == Position(2 * 400 / 3, 50.0)
    assert positions["o1"] == Position(200.0, 4 * 80 + 50.0)
    # unknown types share the skill row
    assert positions["x"].y == positions["s"].y == 2 * 80 + 50.0
    assert positions["x"].x < positions["s"].x


@pytest.mark.parametrize("kind", list(LayoutKind))
def test_layouts_do_not_alias_the_graph(kind, scenario_graph):
    settings = GraphSettings(layout=kind, iterations=5)
    before = scenario_graph.nodes

    first = compute_layout(scenario_graph, settings, seed=1)
    second = compute_layout(scenario_graph, settings, seed=1)

    assert first == second
    assert first is not second
    assert scenario_graph.nodes == before


def test_get_layout_engine_matches_kind():
    assert isinstance(get_layout_engine(LayoutKind.FORCE), ForceDirectedLayout)
    assert isinstance(get_layout_engine(LayoutKind.CIRCULAR), CircularLayout)
    assert isinstance(get_layout_engine(LayoutKind.HIERARCHICAL), HierarchicalLayout)
