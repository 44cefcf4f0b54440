"""Tests for building the shared layout graph."""

from autolayout.graph import LayoutGraph
from autolayout.models import Connection, Node, Size


class TestLayoutGraph:

    def test_neighbors_are_unique_and_ordered(self) -> None:
        graph = LayoutGraph.build(
            [Node(id=i) for i in ("a", "b", "c")],
            [
                Connection(source="a", target="c"),
                Connection(source="a", target="b"),
                Connection(source="a", target="c"),
                Connection(source="b", target="a"),
            ],
        )
        assert graph.edge_count == 4
        assert graph.outgoing["a"] == ["c", "b"]
        assert graph.incoming["c"] == ["a"]
        assert graph.bidirectional["a"] == ["c", "b"]
        assert graph.bidirectional["b"] == ["a"]

    def test_high_degree_hub_with_repeated_edges(self) -> None:
        leaves = [f"n{i}" for i in range(2000)]
        connections = [
            Connection(source="hub", target=leaf)
            for _ in range(3)
            for leaf in leaves
        ]
        graph = LayoutGraph.build([Node(id="hub")] + [Node(id=i) for i in leaves], connections)
        assert graph.edge_count == 6000
        assert graph.outgoing["hub"] == leaves
        assert graph.bidirectional["hub"] == leaves
        assert graph.out_degree("hub") == 2000
        assert all(graph.incoming[leaf] == ["hub"] for leaf in leaves)

    def test_self_loop_listed_once(self) -> None:
        graph = LayoutGraph.build([Node(id="a")], [Connection(source="a", target="a")])
        assert graph.edge_count == 1
        assert graph.outgoing["a"] == ["a"]
        assert graph.bidirectional["a"] == ["a"]

    def test_size_override_wins(self) -> None:
        graph = LayoutGraph.build(
            [Node(id="a", size=Size(width=10, height=10)), Node(id="b")],
            [],
            {"a": Size(width=140, height=80)},
        )
        assert graph.sizes["a"] == Size(width=140, height=80)
        assert graph.sizes["b"] == Size(width=100, height=50)
