"""
Layered (Sugiyama-style) layout for directed graphs.

Steps:
1. Layer assignment (longest path from sources)
2. Crossing reduction (barycentric or median sweeps)
3. Coordinate assignment, each layer centered on x = 0
4. Direction transform (TB, BT, LR, RL)
"""

import logging
import time
from collections import deque
from typing import Mapping, Optional

from .crossing import Layers, reduce_crossings
from .graph import LayoutGraph
from .metrics import build_result, trivial_result
from .models import (
    DEFAULT_NODE_WIDTH,
    LayeredLayoutOptions,
    LayoutAlgorithm,
    LayoutDirection,
    LayoutResult,
)

logger = logging.getLogger(__name__)


def find_sources(graph: LayoutGraph) -> list[str]:
    """Nodes without incoming edges, or those with the fewest if every node has some."""
    sources = [node_id for node_id in graph.node_ids if graph.in_degree(node_id) == 0]
    if sources or graph.node_count == 0:
        return sources

    min_incoming = min(graph.in_degree(node_id) for node_id in graph.node_ids)
    return [node_id for node_id in graph.node_ids if graph.in_degree(node_id) == min_incoming]


def find_back_edges(graph: LayoutGraph, starts: list[str]) -> set[tuple[str, str]]:
    """
    Edges that close a cycle during a DFS begun at `starts`, then at every
    remaining node. Removing them leaves an acyclic graph.
    """
    on_path: set[str] = set()
    done: set[str] = set()
    back: set[tuple[str, str]] = set()

    for start in [*starts, *graph.node_ids]:
        if start in done:
            continue
        on_path.add(start)
        stack = [(start, iter(graph.outgoing[start]))]

        while stack:
            node_id, successors = stack[-1]
            for successor in successors:
                if successor in on_path:
                    back.add((node_id, successor))
                elif successor not in done:
                    on_path.add(successor)
                    stack.append((successor, iter(graph.outgoing[successor])))
                    break
            else:
                on_path.discard(node_id)
                done.add(node_id)
                stack.pop()

    return back


def assign_layers(graph: LayoutGraph) -> dict[str, int]:
    """
    Assign each node the length of the longest path reaching it from a source.

    Every forward edge spans at least one layer. Edges that close a cycle
    are ignored, which keeps the assignment finite on cyclic input. Nodes
    unreachable from any source share one trailing layer.
    """
    sources = find_sources(graph)
    back_edges = find_back_edges(graph, sources)
    forward = {
        node_id: [s for s in graph.outgoing[node_id] if (node_id, s) not in back_edges]
        for node_id in graph.node_ids
    }

    reachable: set[str] = set(sources)
    queue = deque(sources)
    while queue:
        for successor in forward[queue.popleft()]:
            if successor not in reachable:
                reachable.add(successor)
                queue.append(successor)

    # Longest path in topological order over the reachable acyclic part
    pending = {node_id: 0 for node_id in reachable}
    for node_id in reachable:
        for successor in forward[node_id]:
            pending[successor] += 1

    layer_of: dict[str, int] = {}
    queue = deque(node_id for node_id in graph.node_ids if node_id in reachable and pending[node_id] == 0)
    while queue:
        node_id = queue.popleft()
        layer = layer_of.setdefault(node_id, 0)
        for successor in forward[node_id]:
            if layer + 1 > layer_of.get(successor, 0):
                layer_of[successor] = layer + 1
            pending[successor] -= 1
            if pending[successor] == 0:
                queue.append(successor)

    unreached = [node_id for node_id in graph.node_ids if node_id not in layer_of]
    if unreached:
        trailing = max(layer_of.values(), default=-1) + 1
        for node_id in unreached:
            layer_of[node_id] = trailing

    return layer_of


def group_by_layer(graph: LayoutGraph, layer_of: Mapping[str, int]) -> Layers:
    """Node IDs per layer, in input order within each layer."""
    if not layer_of:
        return []
    layers: Layers = [[] for _ in range(max(layer_of.values()) + 1)]
    for node_id in graph.node_ids:
        layers[layer_of[node_id]].append(node_id)
    return layers


def assign_coordinates(
    graph: LayoutGraph,
    layers: Layers,
    options: LayeredLayoutOptions,
) -> dict[str, tuple[float, float]]:
    """Place each layer left to right, centered on x = 0, at y = index * layer_spacing."""
    positions: dict[str, tuple[float, float]] = {}

    for index, layer in enumerate(layers):
        if not layer:
            continue

        if options.size_aware:
            widths = [graph.size_of(node_id).width for node_id in layer]
        else:
            widths = [DEFAULT_NODE_WIDTH] * len(layer)

        total_width = sum(widths) + (len(layer) - 1) * options.node_spacing
        x = -total_width / 2
        y = index * options.layer_spacing

        for node_id, width in zip(layer, widths):
            positions[node_id] = (x, y)
            x += width + options.node_spacing

    return positions


def apply_direction(
    positions: Mapping[str, tuple[float, float]],
    direction: LayoutDirection,
) -> dict[str, tuple[float, float]]:
    """Remap top-to-bottom coordinates for the requested direction."""
    if direction == LayoutDirection.BOTTOM_TOP:
        return {node_id: (x, -y) for node_id, (x, y) in positions.items()}
    if direction == LayoutDirection.LEFT_RIGHT:
        return {node_id: (y, x) for node_id, (x, y) in positions.items()}
    if direction == LayoutDirection.RIGHT_LEFT:
        return {node_id: (-y, x) for node_id, (x, y) in positions.items()}
    return dict(positions)


def calculate_layered_layout(
    graph: LayoutGraph,
    options: Optional[LayeredLayoutOptions] = None,
) -> LayoutResult:
    """
    Arrange nodes in layers so edges flow in one direction.

    Args:
        graph: Graph to lay out
        options: Layered options (defaults if None)

    Returns:
        LayoutResult; `iterations` is the number of layers and
        `metrics.edge_crossings` the crossings of the final ordering
    """
    started = time.perf_counter()
    trivial = trivial_result(graph, LayoutAlgorithm.LAYERED, started, edge_crossings=0)
    if trivial is not None:
        return trivial

    options = options or LayeredLayoutOptions()

    layers = group_by_layer(graph, assign_layers(graph))
    layers, crossings = reduce_crossings(
        layers,
        graph.bidirectional,
        options.cross_reduction,
        options.cross_reduction_iterations,
    )
    logger.debug("Layered layout: %d layers, %d crossings", len(layers), crossings)

    positions = apply_direction(assign_coordinates(graph, layers, options), options.direction)

    return build_result(
        graph,
        positions,
        LayoutAlgorithm.LAYERED,
        started,
        iterations=len(layers),
        edge_crossings=crossings,
    )
