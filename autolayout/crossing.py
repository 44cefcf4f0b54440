"""
Edge crossing reduction for layered layout.

Orders nodes within layers by the barycenter (mean) or median of their
neighbors' positions in the adjacent layer, sweeping down and then up the
layers, and keeps the ordering with the fewest crossings seen.
"""

import logging
from typing import Callable, Mapping, Optional, Sequence

from .graph import AdjacencyMap
from .models import CrossReduction

logger = logging.getLogger(__name__)

Layers = list[list[str]]
KeyFunction = Callable[[list[float]], float]


def barycenter(positions: list[float]) -> float:
    """Mean of neighbor positions."""
    return sum(positions) / len(positions)


def median(positions: list[float]) -> float:
    """Median of neighbor positions (mean of the two middle values when even)."""
    ordered = sorted(positions)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def _neighbor_key(
    node_id: str,
    fixed_positions: Mapping[str, int],
    adjacency: AdjacencyMap,
    key: KeyFunction,
) -> Optional[float]:
    positions = [
        float(fixed_positions[neighbor])
        for neighbor in adjacency.get(node_id, ())
        if neighbor in fixed_positions
    ]
    if not positions:
        return None
    return key(positions)


def order_layer(
    layer: Sequence[str],
    fixed_layer: Sequence[str],
    adjacency: AdjacencyMap,
    key: KeyFunction = barycenter,
) -> list[str]:
    """
    Reorder `layer` by the key of each node's neighbors in `fixed_layer`.

    Nodes with no neighbor in the fixed layer move to the end. The sort is
    stable, so ties keep their original relative order.
    """
    fixed_positions = {node_id: index for index, node_id in enumerate(fixed_layer)}
    keys = [_neighbor_key(node_id, fixed_positions, adjacency, key) for node_id in layer]

    order = sorted(
        range(len(layer)),
        key=lambda i: (keys[i] is None, keys[i] if keys[i] is not None else 0.0),
    )
    return [layer[i] for i in order]


def count_crossings(
    upper_layer: Sequence[str],
    lower_layer: Sequence[str],
    adjacency: AdjacencyMap,
) -> int:
    """
    Count edge crossings between two adjacent layers.

    Two edges cross when their endpoints are ordered oppositely in the two
    layers.
    """
    lower_positions = {node_id: index for index, node_id in enumerate(lower_layer)}

    edges: list[tuple[int, int]] = []
    for upper_pos, upper_id in enumerate(upper_layer):
        for neighbor in adjacency.get(upper_id, ()):
            lower_pos = lower_positions.get(neighbor)
            if lower_pos is not None:
                edges.append((upper_pos, lower_pos))

    crossings = 0
    for i in range(len(edges)):
        u1, l1 = edges[i]
        for j in range(i + 1, len(edges)):
            u2, l2 = edges[j]
            if (u1 < u2 and l1 > l2) or (u1 > u2 and l1 < l2):
                crossings += 1

    return crossings


def count_total_crossings(layers: Layers, adjacency: AdjacencyMap) -> int:
    """Sum crossings over every pair of adjacent layers."""
    return sum(
        count_crossings(layers[i], layers[i + 1], adjacency)
        for i in range(len(layers) - 1)
    )


_KEYS: dict[CrossReduction, KeyFunction] = {
    CrossReduction.BARYCENTRIC: barycenter,
    CrossReduction.MEDIAN: median,
}


def reduce_crossings(
    layers: Layers,
    adjacency: AdjacencyMap,
    method: CrossReduction = CrossReduction.BARYCENTRIC,
    iterations: int = 4,
) -> tuple[Layers, int]:
    """
    Reduce crossings with forward and backward sweeps.

    Args:
        layers: Node IDs per layer, in their initial order
        adjacency: Bidirectional adjacency
        method: Sort key; NONE leaves the ordering untouched
        iterations: Number of forward+backward sweep pairs

    Returns:
        (best ordering seen, its crossing count)
    """
    current = [list(layer) for layer in layers]
    best_crossings = count_total_crossings(current, adjacency)
    best = [list(layer) for layer in current]

    if method == CrossReduction.NONE or len(current) <= 1:
        return best, best_crossings

    key = _KEYS[method]

    for sweep in range(iterations):
        if best_crossings == 0:
            break

        for i in range(1, len(current)):
            current[i] = order_layer(current[i], current[i - 1], adjacency, key)
        for i in range(len(current) - 2, -1, -1):
            current[i] = order_layer(current[i], current[i + 1], adjacency, key)

        crossings = count_total_crossings(current, adjacency)
        logger.debug("Crossing reduction sweep %d: %d crossings", sweep + 1, crossings)
        if crossings < best_crossings:
            best_crossings = crossings
            best = [list(layer) for layer in current]

    return best, best_crossings
