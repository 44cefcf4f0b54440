"""
Bounding boxes and result assembly shared by the layout engines.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Mapping, Optional

from .graph import LayoutGraph
from .models import (
    BoundingBoxSize,
    LayoutAlgorithm,
    LayoutMetrics,
    LayoutResult,
    Position,
    Size,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box around positioned nodes, including their sizes."""
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


def calculate_bounding_box(
    positions: Mapping[str, tuple[float, float]],
    sizes: Mapping[str, Size],
) -> BoundingBox:
    """
    Calculate the box spanning every node's (x, y)..(x + width, y + height).

    Returns an all-zero box when there is nothing to measure.
    """
    min_x = min_y = math.inf
    max_x = max_y = -math.inf

    for node_id, (x, y) in positions.items():
        size = sizes.get(node_id) or Size()
        min_x = min(min_x, x)
        min_y = min(min_y, y)
        max_x = max(max_x, x + size.width)
        max_y = max(max_y, y + size.height)

    if not all(math.isfinite(v) for v in (min_x, min_y, max_x, max_y)):
        return BoundingBox()

    return BoundingBox(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)


def finite_positions(raw: Mapping[str, tuple[float, float]]) -> dict[str, Position]:
    """Convert raw coordinates to Positions, replacing non-finite values with 0."""
    positions: dict[str, Position] = {}
    for node_id, (x, y) in raw.items():
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.warning("Non-finite position for node %s replaced with 0", node_id)
            x = x if math.isfinite(x) else 0.0
            y = y if math.isfinite(y) else 0.0
        positions[node_id] = Position(x=x, y=y)
    return positions


def build_result(
    graph: LayoutGraph,
    raw_positions: Mapping[str, tuple[float, float]],
    algorithm: LayoutAlgorithm,
    started: float,
    iterations: int = 0,
    edge_crossings: Optional[int] = None,
) -> LayoutResult:
    """Wrap engine output with execution time and bounding box metrics."""
    positions = finite_positions(raw_positions)
    box = calculate_bounding_box(
        {node_id: (pos.x, pos.y) for node_id, pos in positions.items()},
        graph.sizes,
    )
    return LayoutResult(
        node_positions=positions,
        iterations=iterations,
        algorithm=algorithm,
        metrics=LayoutMetrics(
            execution_time_ms=(time.perf_counter() - started) * 1000,
            edge_crossings=edge_crossings,
            bounding_box=BoundingBoxSize(width=box.width, height=box.height),
        ),
    )


def trivial_result(
    graph: LayoutGraph,
    algorithm: LayoutAlgorithm,
    started: float,
    edge_crossings: Optional[int] = None,
) -> Optional[LayoutResult]:
    """
    Result for graphs too small to lay out, or None.

    No nodes gives an empty mapping; a single node is placed at the origin.
    """
    if graph.node_count == 0:
        return build_result(graph, {}, algorithm, started, edge_crossings=edge_crossings)
    if graph.node_count == 1:
        only = graph.nodes[0].id
        return build_result(
            graph, {only: (0.0, 0.0)}, algorithm, started,
            iterations=0 if algorithm in (LayoutAlgorithm.FORCE, LayoutAlgorithm.GRID) else 1,
            edge_crossings=edge_crossings,
        )
    return None
