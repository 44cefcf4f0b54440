"""
Graph abstraction shared by every layout algorithm.

A LayoutGraph is built once per layout call from nodes and connections. It
resolves node sizes, drops connections whose endpoints are unknown, and
precomputes the outgoing, incoming, and bidirectional adjacency maps that the
analysis and layout algorithms consume. Neighbor lists are duplicate-free and
follow input order, so every traversal over them is deterministic.
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from .models import (
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    Connection,
    LayoutOptionsError,
    Node,
    Size,
)

# Node ID -> neighbor IDs (ordered, no duplicates)
AdjacencyMap = dict[str, list[str]]


def resolve_node_size(node: Node, node_sizes: Optional[Mapping[str, Size]] = None) -> Size:
    """Get a node's size, preferring an override over the declared size."""
    if node_sizes and node.id in node_sizes:
        return node_sizes[node.id]
    if node.size is not None:
        return node.size
    return Size(width=DEFAULT_NODE_WIDTH, height=DEFAULT_NODE_HEIGHT)


def _ordered_neighbors(neighbor_sets: dict[str, dict[str, None]]) -> AdjacencyMap:
    return {node_id: list(neighbors) for node_id, neighbors in neighbor_sets.items()}


@dataclass
class LayoutGraph:
    """Nodes, usable connections, sizes, and adjacency for one layout call."""
    nodes: list[Node]
    connections: list[Connection]
    sizes: dict[str, Size]
    outgoing: AdjacencyMap = field(default_factory=dict)
    incoming: AdjacencyMap = field(default_factory=dict)
    bidirectional: AdjacencyMap = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        nodes: Iterable[Node],
        connections: Iterable[Connection],
        node_sizes: Optional[Mapping[str, Size]] = None,
    ) -> "LayoutGraph":
        """
        Build the graph from nodes and connections.

        Connections referencing unknown node IDs are dropped. Self-loops and
        duplicate connections are kept in `connections` (they count as edges)
        but appear only once in each adjacency map.

        Raises:
            LayoutOptionsError: If two nodes share an ID
        """
        node_list = list(nodes)
        sizes: dict[str, Size] = {}
        for node in node_list:
            if node.id in sizes:
                raise LayoutOptionsError(f"Duplicate node id: {node.id}")
            sizes[node.id] = resolve_node_size(node, node_sizes)

        # Insertion-ordered dicts keep first-seen order with O(1) membership
        outgoing: dict[str, dict[str, None]] = {node.id: {} for node in node_list}
        incoming: dict[str, dict[str, None]] = {node.id: {} for node in node_list}
        bidirectional: dict[str, dict[str, None]] = {node.id: {} for node in node_list}

        usable: list[Connection] = []
        for conn in connections:
            if conn.source not in sizes or conn.target not in sizes:
                continue
            usable.append(conn)
            outgoing[conn.source][conn.target] = None
            incoming[conn.target][conn.source] = None
            bidirectional[conn.source][conn.target] = None
            bidirectional[conn.target][conn.source] = None

        return cls(
            nodes=node_list,
            connections=usable,
            sizes=sizes,
            outgoing=_ordered_neighbors(outgoing),
            incoming=_ordered_neighbors(incoming),
            bidirectional=_ordered_neighbors(bidirectional),
        )

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.connections)

    def size_of(self, node_id: str) -> Size:
        return self.sizes.get(node_id) or Size()

    def in_degree(self, node_id: str) -> int:
        return len(self.incoming.get(node_id, ()))

    def out_degree(self, node_id: str) -> int:
        return len(self.outgoing.get(node_id, ()))
