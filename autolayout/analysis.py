"""
Graph analysis - Structural characteristics and algorithm selection.

Provides the analysis used by automatic layout selection:
- Cycle detection (3-color depth-first search)
- Connected components (breadth-first search)
- Tree and DAG detection
- Density and degree statistics
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum

from .graph import LayoutGraph
from .models import LayoutAlgorithm

logger = logging.getLogger(__name__)


class _Color(IntEnum):
    WHITE = 0  # Not visited
    GRAY = 1   # On the current DFS path
    BLACK = 2  # Fully processed


@dataclass
class ConnectedComponent:
    """A connected component of the graph (edges treated as undirected)."""
    node_ids: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.node_ids)


@dataclass
class GraphCharacteristics:
    """Structural snapshot of a graph, used to pick a layout algorithm."""
    node_count: int = 0
    edge_count: int = 0
    is_tree: bool = True
    is_dag: bool = True
    has_cycles: bool = False
    max_degree: int = 0
    avg_degree: float = 0.0
    connected_components: int = 0
    density: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "is_tree": self.is_tree,
            "is_dag": self.is_dag,
            "has_cycles": self.has_cycles,
            "max_degree": self.max_degree,
            "avg_degree": self.avg_degree,
            "connected_components": self.connected_components,
            "density": self.density,
        }


def detect_cycles(graph: LayoutGraph) -> bool:
    """
    Detect whether the directed graph contains a cycle.

    Uses an iterative 3-color DFS over the outgoing adjacency: reaching a
    GRAY node from a GRAY node is a back edge. Self-loops count as cycles.

    Args:
        graph: The graph to analyze

    Returns:
        True if at least one cycle exists
    """
    colors = {node_id: _Color.WHITE for node_id in graph.node_ids}

    for start in graph.node_ids:
        if colors[start] != _Color.WHITE:
            continue

        colors[start] = _Color.GRAY
        stack = [(start, iter(graph.outgoing[start]))]

        while stack:
            node_id, neighbors = stack[-1]
            for neighbor in neighbors:
                color = colors[neighbor]
                if color == _Color.GRAY:
                    return True
                if color == _Color.WHITE:
                    colors[neighbor] = _Color.GRAY
                    stack.append((neighbor, iter(graph.outgoing[neighbor])))
                    break
            else:
                colors[node_id] = _Color.BLACK
                stack.pop()

    return False


def find_connected_components(graph: LayoutGraph) -> list[ConnectedComponent]:
    """
    Find all connected components using BFS.

    A connected component is a set of nodes where every node is reachable
    from every other node (treating edges as undirected).

    Args:
        graph: The graph to analyze

    Returns:
        List of ConnectedComponent objects, in order of first node
    """
    visited: set[str] = set()
    components: list[ConnectedComponent] = []

    for start_node in graph.node_ids:
        if start_node in visited:
            continue

        component_nodes: list[str] = []
        visited.add(start_node)
        queue = deque([start_node])

        while queue:
            current = queue.popleft()
            component_nodes.append(current)

            for neighbor in graph.bidirectional[current]:
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)

        components.append(ConnectedComponent(node_ids=component_nodes))

    return components


def count_connected_components(graph: LayoutGraph) -> int:
    """Count connected components (one BFS per unvisited node)."""
    return len(find_connected_components(graph))


def is_tree(graph: LayoutGraph) -> bool:
    """
    Check whether the graph is a tree.

    A tree has exactly n-1 edges, is connected, and has no cycles. Graphs
    with no nodes are trees; a single node is a tree if it has no edges.
    """
    if graph.node_count == 0:
        return True
    if graph.node_count == 1:
        return graph.edge_count == 0

    if graph.edge_count != graph.node_count - 1:
        return False

    if count_connected_components(graph) != 1:
        return False

    return not detect_cycles(graph)


def calculate_density(node_count: int, edge_count: int) -> float:
    """density = edges / (nodes * (nodes - 1)) for a directed graph."""
    if node_count <= 1:
        return 0.0
    return edge_count / (node_count * (node_count - 1))


def calculate_degree_stats(graph: LayoutGraph) -> tuple[int, float]:
    """
    Calculate degree statistics.

    Returns:
        (max_degree, avg_degree), where a node's degree is its out-degree
        plus its in-degree
    """
    if graph.node_count == 0:
        return 0, 0.0

    degrees = [
        graph.out_degree(node_id) + graph.in_degree(node_id)
        for node_id in graph.node_ids
    ]
    return max(degrees), sum(degrees) / len(degrees)


def analyze_graph(graph: LayoutGraph) -> GraphCharacteristics:
    """
    Compute the structural characteristics of a graph.

    Args:
        graph: The graph to analyze

    Returns:
        GraphCharacteristics snapshot
    """
    if graph.node_count == 0:
        return GraphCharacteristics()

    has_cycles = detect_cycles(graph)
    max_degree, avg_degree = calculate_degree_stats(graph)

    return GraphCharacteristics(
        node_count=graph.node_count,
        edge_count=graph.edge_count,
        is_tree=is_tree(graph),
        is_dag=not has_cycles,
        has_cycles=has_cycles,
        max_degree=max_degree,
        avg_degree=avg_degree,
        connected_components=count_connected_components(graph),
        density=calculate_density(graph.node_count, graph.edge_count),
    )


def select_algorithm(characteristics: GraphCharacteristics) -> LayoutAlgorithm:
    """
    Select a layout algorithm from graph characteristics.

    Rules are checked in order; the first match wins.
    """
    c = characteristics

    # No nodes or edges - grid is simplest
    if c.node_count == 0 or c.edge_count == 0:
        selected = LayoutAlgorithm.GRID
    elif c.is_tree:
        selected = LayoutAlgorithm.TREE
    # Sparse DAG - the classic layered case
    elif c.is_dag and c.avg_degree < 3 and c.density < 0.2:
        selected = LayoutAlgorithm.LAYERED
    # Dense DAG - still layered
    elif c.is_dag:
        selected = LayoutAlgorithm.LAYERED
    elif c.has_cycles or c.density > 0.3:
        selected = LayoutAlgorithm.FORCE
    else:
        selected = LayoutAlgorithm.FORCE

    logger.debug(
        "Selected %s layout (nodes=%d, edges=%d, tree=%s, dag=%s, density=%.3f)",
        selected.value, c.node_count, c.edge_count, c.is_tree, c.is_dag, c.density,
    )
    return selected
