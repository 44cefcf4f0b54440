"""Tests for the grid layout."""

import pytest

from autolayout.graph import LayoutGraph
from autolayout.grid import calculate_grid_layout
from autolayout.models import (
    Connection,
    GridLayoutOptions,
    LayoutAlgorithm,
    Node,
    Position,
    Size,
)


def _graph(count: int, sizes: dict | None = None, edges: list | None = None) -> LayoutGraph:
    sizes = sizes or {}
    nodes = [Node(id=f"n{i}", size=sizes.get(f"n{i}")) for i in range(count)]
    return LayoutGraph.build(nodes, [Connection(source=s, target=t) for s, t in edges or []])


class TestGridLayout:

    def test_four_nodes(self) -> None:
        result = calculate_grid_layout(_graph(4), GridLayoutOptions(spacing=50))
        pos = result.node_positions
        assert result.algorithm == LayoutAlgorithm.GRID
        assert pos["n0"] == Position(x=-75, y=-50)
        assert pos["n1"] == Position(x=75, y=-50)
        assert pos["n2"] == Position(x=-75, y=50)
        assert pos["n3"] == Position(x=75, y=50)
        assert sum(p.x for p in pos.values()) == pytest.approx(0)
        assert sum(p.y for p in pos.values()) == pytest.approx(0)

    def test_default_columns_are_ceil_sqrt(self) -> None:
        result = calculate_grid_layout(_graph(5))
        rows = {p.y for p in result.node_positions.values()}
        columns = {p.x for p in result.node_positions.values()}
        assert len(columns) == 3
        assert len(rows) == 2

    def test_explicit_columns(self) -> None:
        result = calculate_grid_layout(_graph(6), GridLayoutOptions(columns=1))
        assert len({p.x for p in result.node_positions.values()}) == 1
        assert len({p.y for p in result.node_positions.values()}) == 6

    def test_columns_clamped_to_node_count(self) -> None:
        result = calculate_grid_layout(_graph(2), GridLayoutOptions(columns=5, spacing=0))
        pos = result.node_positions
        assert pos["n0"] == Position(x=-50, y=0)
        assert pos["n1"] == Position(x=50, y=0)

    def test_cells_fit_largest_node(self) -> None:
        sizes = {"n1": Size(width=300, height=120)}
        result = calculate_grid_layout(_graph(2, sizes), GridLayoutOptions(spacing=10))
        pos = result.node_positions
        assert pos["n1"].x - pos["n0"].x == pytest.approx(310)

    def test_connections_are_ignored(self) -> None:
        plain = calculate_grid_layout(_graph(3))
        connected = calculate_grid_layout(_graph(3, edges=[("n0", "n2"), ("n2", "n1")]))
        assert plain.node_positions == connected.node_positions

    def test_single_and_empty(self) -> None:
        assert calculate_grid_layout(_graph(0)).node_positions == {}
        single = calculate_grid_layout(_graph(1))
        assert single.node_positions == {"n0": Position(x=0, y=0)}
        assert single.iterations == 0

    def test_deterministic(self) -> None:
        graph = _graph(7, {"n3": Size(width=150, height=90)})
        options = GridLayoutOptions(spacing=40)
        first = calculate_grid_layout(graph, options)
        second = calculate_grid_layout(graph, options)
        assert first.node_positions == second.node_positions
