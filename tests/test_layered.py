"""Tests for the layered layout."""

import pytest

from autolayout.graph import LayoutGraph
from autolayout.layered import (
    apply_direction,
    assign_layers,
    calculate_layered_layout,
    find_back_edges,
    find_sources,
)
from autolayout.models import (
    Connection,
    CrossReduction,
    LayeredLayoutOptions,
    LayoutAlgorithm,
    LayoutDirection,
    Node,
    Position,
    Size,
)


def _graph(edges: list[tuple[str, str]], ids: list[str] | None = None, sizes: dict | None = None) -> LayoutGraph:
    if ids is None:
        ids = []
        for source, target in edges:
            for node_id in (source, target):
                if node_id not in ids:
                    ids.append(node_id)
    sizes = sizes or {}
    return LayoutGraph.build(
        [Node(id=i, size=sizes.get(i)) for i in ids],
        [Connection(source=s, target=t) for s, t in edges],
    )


DIAMOND = [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")]


# ===================================================================
# Layer assignment
# ===================================================================

class TestAssignLayers:

    def test_chain(self) -> None:
        assert assign_layers(_graph([("a", "b"), ("b", "c")])) == {"a": 0, "b": 1, "c": 2}

    def test_longest_path_wins(self) -> None:
        """A shortcut edge does not pull its target up."""
        layers = assign_layers(_graph([("a", "b"), ("b", "c"), ("a", "c")]))
        assert layers["c"] == 2

    def test_every_edge_points_down(self) -> None:
        graph = _graph(DIAMOND + [("a", "e"), ("e", "d")])
        layers = assign_layers(graph)
        for conn in graph.connections:
            assert layers[conn.target] >= layers[conn.source] + 1

    def test_cycle_terminates(self) -> None:
        layers = assign_layers(_graph([("a", "b"), ("b", "c"), ("c", "a")]))
        assert set(layers) == {"a", "b", "c"}
        assert layers["a"] < layers["b"] < layers["c"]

    def test_unreachable_nodes_share_trailing_layer(self) -> None:
        graph = _graph([("a", "b"), ("x", "y"), ("y", "x")])
        layers = assign_layers(graph)
        assert layers["a"] == 0
        assert layers["b"] == 1
        assert layers["x"] == layers["y"] == 2

    def test_isolated_nodes_are_sources(self) -> None:
        layers = assign_layers(_graph([("a", "b")], ids=["a", "b", "z"]))
        assert layers["z"] == 0

    def test_sources_fall_back_to_min_in_degree(self) -> None:
        graph = _graph([("a", "b"), ("b", "a"), ("b", "c"), ("a", "c")])
        assert find_sources(graph) == ["a", "b"]

    def test_back_edges_break_every_cycle(self) -> None:
        graph = _graph([("a", "b"), ("b", "c"), ("c", "a"), ("c", "c")])
        assert find_back_edges(graph, ["a"]) == {("c", "a"), ("c", "c")}


# ===================================================================
# Layout
# ===================================================================

class TestLayeredLayout:

    def test_chain_positions(self) -> None:
        result = calculate_layered_layout(_graph([("a", "b"), ("b", "c")]))
        assert result.algorithm == LayoutAlgorithm.LAYERED
        assert result.node_positions["a"] == Position(x=-50, y=0)
        assert result.node_positions["b"] == Position(x=-50, y=150)
        assert result.node_positions["c"] == Position(x=-50, y=300)
        assert result.iterations == 3

    def test_fan_out_shares_a_row(self) -> None:
        result = calculate_layered_layout(_graph([("a", "b"), ("a", "c"), ("a", "d")]))
        ys = {result.node_positions[i].y for i in ("b", "c", "d")}
        assert ys == {150.0}
        xs = sorted(result.node_positions[i].x for i in ("b", "c", "d"))
        assert xs == [-200.0, -50.0, 100.0]

    def test_diamond_has_no_crossings(self) -> None:
        result = calculate_layered_layout(_graph(DIAMOND))
        assert result.metrics.edge_crossings == 0
        pos = result.node_positions
        assert pos["a"].y < pos["b"].y == pos["c"].y < pos["d"].y

    def test_crossing_is_removed(self) -> None:
        graph = _graph([("a", "c"), ("b", "d"), ("a", "e"), ("b", "f"), ("c", "f"), ("d", "e")])
        result = calculate_layered_layout(graph)
        assert result.metrics.edge_crossings == 0

    def test_without_reduction_reports_initial_crossings(self) -> None:
        graph = _graph([("a", "d"), ("b", "c")], ids=["a", "b", "c", "d"])
        options = LayeredLayoutOptions(cross_reduction=CrossReduction.NONE)
        result = calculate_layered_layout(graph, options)
        assert result.metrics.edge_crossings == 1

    def test_sizes_spread_nodes(self) -> None:
        sizes = {"b": Size(width=300, height=50)}
        result = calculate_layered_layout(_graph([("a", "b"), ("a", "c")], sizes=sizes))
        pos = result.node_positions
        left, right = sorted(("b", "c"), key=lambda i: pos[i].x)
        gap = pos[right].x - (pos[left].x + (300 if left == "b" else 100))
        assert gap == pytest.approx(50)

    def test_size_unaware_uses_default_width(self) -> None:
        sizes = {"b": Size(width=300, height=50)}
        options = LayeredLayoutOptions(size_aware=False)
        result = calculate_layered_layout(_graph([("a", "b"), ("a", "c")], sizes=sizes), options)
        xs = sorted(result.node_positions[i].x for i in ("b", "c"))
        assert xs == [-125.0, 25.0]

    def test_left_right_direction(self) -> None:
        options = LayeredLayoutOptions(direction=LayoutDirection.LEFT_RIGHT)
        result = calculate_layered_layout(_graph([("a", "b")]), options)
        assert result.node_positions["a"] == Position(x=0, y=-50)
        assert result.node_positions["b"] == Position(x=150, y=-50)

    def test_bottom_top_direction(self) -> None:
        options = LayeredLayoutOptions(direction=LayoutDirection.BOTTOM_TOP)
        result = calculate_layered_layout(_graph([("a", "b")]), options)
        assert result.node_positions["b"].y < result.node_positions["a"].y

    def test_right_left_direction(self) -> None:
        options = LayeredLayoutOptions(direction=LayoutDirection.RIGHT_LEFT)
        result = calculate_layered_layout(_graph([("a", "b")]), options)
        assert result.node_positions["b"].x < result.node_positions["a"].x

    def test_cyclic_graph_is_laid_out(self) -> None:
        result = calculate_layered_layout(_graph([("a", "b"), ("b", "c"), ("c", "a")]))
        assert len(result.node_positions) == 3

    def test_deterministic(self) -> None:
        graph = _graph(DIAMOND + [("b", "e"), ("e", "d")])
        first = calculate_layered_layout(graph)
        second = calculate_layered_layout(graph)
        assert first.node_positions == second.node_positions

    def test_single_node(self) -> None:
        result = calculate_layered_layout(_graph([], ids=["solo"]))
        assert result.node_positions == {"solo": Position(x=0, y=0)}
        assert result.iterations == 1

    def test_empty_graph(self) -> None:
        result = calculate_layered_layout(_graph([], ids=[]))
        assert result.node_positions == {}
        assert result.metrics.edge_crossings == 0


class TestApplyDirection:

    @pytest.mark.parametrize("direction, expected", [
        (LayoutDirection.TOP_BOTTOM, (10.0, 20.0)),
        (LayoutDirection.BOTTOM_TOP, (10.0, -20.0)),
        (LayoutDirection.LEFT_RIGHT, (20.0, 10.0)),
        (LayoutDirection.RIGHT_LEFT, (-20.0, 10.0)),
    ])
    def test_transform(self, direction: LayoutDirection, expected: tuple[float, float]) -> None:
        assert apply_direction({"n": (10.0, 20.0)}, direction) == {"n": expected}
