"""
Grid layout - Simple grid arrangement, centered on the origin.
"""

import math
import time
from typing import Optional

from .graph import LayoutGraph
from .metrics import build_result, trivial_result
from .models import GridLayoutOptions, LayoutAlgorithm, LayoutResult


def calculate_grid_layout(
    graph: LayoutGraph,
    options: Optional[GridLayoutOptions] = None,
) -> LayoutResult:
    """
    Arrange nodes in a grid pattern.

    Cells are as wide as the widest node and as tall as the tallest node,
    plus `spacing`. Columns default to ceil(sqrt(n)).

    Args:
        graph: Graph to lay out (connections are ignored)
        options: Grid options (defaults if None)

    Returns:
        LayoutResult with the grid centered on the origin
    """
    started = time.perf_counter()
    trivial = trivial_result(graph, LayoutAlgorithm.GRID, started)
    if trivial is not None:
        return trivial

    options = options or GridLayoutOptions()
    count = graph.node_count

    columns = options.columns or math.ceil(math.sqrt(count))
    columns = min(columns, count)
    rows = math.ceil(count / columns)

    max_width = max(size.width for size in graph.sizes.values())
    max_height = max(size.height for size in graph.sizes.values())
    spacing_x = max_width + options.spacing
    spacing_y = max_height + options.spacing

    grid_width = (columns - 1) * spacing_x
    grid_height = (rows - 1) * spacing_y

    positions: dict[str, tuple[float, float]] = {}
    for index, node_id in enumerate(graph.node_ids):
        row = index // columns
        col = index % columns
        positions[node_id] = (
            col * spacing_x - grid_width / 2,
            row * spacing_y - grid_height / 2,
        )

    return build_result(graph, positions, LayoutAlgorithm.GRID, started)
