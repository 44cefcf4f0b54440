"""
Barnes-Hut quadtree for approximate repulsion forces.

The tree is built once per simulation step with `QuadTree.build` and is then
only queried. Each cell tracks the total mass and center of mass of the
bodies below it, so distant clusters can stand in for all of their bodies and
the repulsion on every body costs O(log n) instead of O(n).
"""

import math
import random
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from .models import DEFAULT_NODE_HEIGHT, DEFAULT_NODE_WIDTH, Size

DEFAULT_THETA = 0.7
# Beyond this depth coincident bodies share one leaf instead of subdividing
MAX_DEPTH = 32
# Distance under which two bodies are treated as overlapping
OVERLAP_DISTANCE = 1.0
# Floor for edge-to-edge distance so overlapping boxes still repel strongly
MIN_EDGE_DISTANCE = 10.0

NW, NE, SW, SE = range(4)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle (top-left corner plus size)."""
    x: float
    y: float
    width: float
    height: float

    def quadrant_of(self, px: float, py: float) -> int:
        mid_x = self.x + self.width / 2
        mid_y = self.y + self.height / 2
        if py < mid_y:
            return NW if px < mid_x else NE
        return SW if px < mid_x else SE

    def quadrant(self, index: int) -> "Bounds":
        half_w = self.width / 2
        half_h = self.height / 2
        dx = half_w if index in (NE, SE) else 0.0
        dy = half_h if index in (SW, SE) else 0.0
        return Bounds(self.x + dx, self.y + dy, half_w, half_h)

    def contains(self, px: float, py: float) -> bool:
        return (self.x <= px <= self.x + self.width
                and self.y <= py <= self.y + self.height)


@dataclass(frozen=True)
class Body:
    """A point mass; mass grows with the node's area."""
    id: str
    x: float
    y: float
    width: float = DEFAULT_NODE_WIDTH
    height: float = DEFAULT_NODE_HEIGHT

    @property
    def mass(self) -> float:
        return max(1.0, (self.width * self.height) / 1000)


class _Cell:
    __slots__ = ("bounds", "com_x", "com_y", "total_mass", "count", "children", "bodies")

    def __init__(self, bounds: Bounds):
        self.bounds = bounds
        self.com_x = 0.0
        self.com_y = 0.0
        self.total_mass = 0.0
        self.count = 0
        self.children: Optional[list[Optional["_Cell"]]] = None
        self.bodies: list[Body] = []

    @property
    def is_leaf(self) -> bool:
        return self.children is None


def repulsion_between(
    target: Body,
    other_x: float,
    other_y: float,
    other_width: float,
    other_height: float,
    other_mass: float,
    strength: float,
    size_aware: bool,
) -> tuple[float, float]:
    """
    Repulsion exerted on `target` by another (possibly aggregate) body.

    Magnitude is strength * mass / distance^2, where distance is edge-to-edge
    when `size_aware` is set and center-to-center otherwise.
    """
    dx = other_x - target.x
    dy = other_y - target.y
    center_dist = math.hypot(dx, dy)

    if center_dist < 0.01:
        return 0.0, 0.0

    if size_aware:
        edge_x = max(0.0, abs(dx) - target.width / 2 - other_width / 2)
        edge_y = max(0.0, abs(dy) - target.height / 2 - other_height / 2)
        effective = max(math.hypot(edge_x, edge_y), MIN_EDGE_DISTANCE)
    else:
        effective = center_dist

    force = (strength * other_mass) / (effective * effective)
    # Pushes away from the other body
    return -(dx / center_dist) * force, -(dy / center_dist) * force


def overlap_jitter(strength: float, rng: random.Random) -> tuple[float, float]:
    """Small random push used when two bodies (nearly) coincide."""
    return (
        (rng.random() - 0.5) * strength * 0.01,
        (rng.random() - 0.5) * strength * 0.01,
    )


def calculate_bounds(
    positions: Mapping[str, tuple[float, float]],
    sizes: Mapping[str, Size],
    padding: float = 100.0,
) -> Bounds:
    """
    Square region containing every node plus padding.

    Falls back to a 1000x1000 region around the origin when empty.
    """
    min_x = min_y = math.inf
    max_x = max_y = -math.inf

    for node_id, (x, y) in positions.items():
        size = sizes.get(node_id) or Size()
        min_x = min(min_x, x - size.width / 2)
        min_y = min(min_y, y - size.height / 2)
        max_x = max(max_x, x + size.width / 2)
        max_y = max(max_y, y + size.height / 2)

    if not math.isfinite(min_x):
        return Bounds(-500.0, -500.0, 1000.0, 1000.0)

    # Square regions keep quadrants square
    width = max_x - min_x + padding * 2
    height = max_y - min_y + padding * 2
    side = max(width, height, 1.0)

    return Bounds(
        x=min_x - padding - (side - width) / 2,
        y=min_y - padding - (side - height) / 2,
        width=side,
        height=side,
    )


class QuadTree:
    """Read-only Barnes-Hut tree. Create instances with `QuadTree.build`."""

    def __init__(self, root: _Cell, theta: float):
        self._root = root
        self.theta = theta

    @classmethod
    def build(
        cls,
        bodies: Iterable[Body],
        bounds: Bounds,
        theta: float = DEFAULT_THETA,
    ) -> "QuadTree":
        """Insert every body into a fresh tree covering `bounds`."""
        root = _Cell(bounds)
        for body in bodies:
            cls._insert(root, body, 0)
        return cls(root, theta)

    @staticmethod
    def _insert(cell: _Cell, body: Body, depth: int) -> None:
        while True:
            mass = body.mass
            new_total = cell.total_mass + mass
            cell.com_x = (cell.com_x * cell.total_mass + body.x * mass) / new_total
            cell.com_y = (cell.com_y * cell.total_mass + body.y * mass) / new_total
            cell.total_mass = new_total
            cell.count += 1

            if cell.is_leaf:
                if not cell.bodies or depth >= MAX_DEPTH:
                    cell.bodies.append(body)
                    return

                # Occupied leaf: subdivide and push the resident body down
                cell.children = [None, None, None, None]
                for resident in cell.bodies:
                    QuadTree._insert(QuadTree._child_for(cell, resident), resident, depth + 1)
                cell.bodies = []

            cell = QuadTree._child_for(cell, body)
            depth += 1

    @staticmethod
    def _child_for(cell: _Cell, body: Body) -> _Cell:
        index = cell.bounds.quadrant_of(body.x, body.y)
        child = cell.children[index]
        if child is None:
            child = _Cell(cell.bounds.quadrant(index))
            cell.children[index] = child
        return child

    @property
    def size(self) -> int:
        return self._root.count

    @property
    def total_mass(self) -> float:
        return self._root.total_mass

    @property
    def center_of_mass(self) -> tuple[float, float]:
        return self._root.com_x, self._root.com_y

    def repulsion_on(
        self,
        target: Body,
        strength: float,
        size_aware: bool,
        rng: random.Random,
    ) -> tuple[float, float]:
        """
        Approximate repulsion on `target` from every other body in the tree.

        A cell is treated as a single body when it is a leaf or when
        width / distance < theta and the cell does not contain the target.
        The target is skipped by ID.
        """
        fx = fy = 0.0
        stack = [self._root]

        while stack:
            cell = stack.pop()
            if cell.count == 0:
                continue

            if cell.is_leaf:
                for body in cell.bodies:
                    if body.id == target.id:
                        continue
                    if math.hypot(body.x - target.x, body.y - target.y) < OVERLAP_DISTANCE:
                        jx, jy = overlap_jitter(strength, rng)
                    else:
                        jx, jy = repulsion_between(
                            target, body.x, body.y, body.width, body.height,
                            body.mass, strength, size_aware,
                        )
                    fx += jx
                    fy += jy
                continue

            distance = math.hypot(cell.com_x - target.x, cell.com_y - target.y)
            far_enough = (
                distance >= OVERLAP_DISTANCE
                and cell.bounds.width / distance < self.theta
                and not cell.bounds.contains(target.x, target.y)
            )
            if far_enough:
                # Aggregates carry no size of their own; use the default node box
                ax, ay = repulsion_between(
                    target, cell.com_x, cell.com_y,
                    DEFAULT_NODE_WIDTH, DEFAULT_NODE_HEIGHT,
                    cell.total_mass, strength, size_aware,
                )
                fx += ax
                fy += ay
            else:
                stack.extend(child for child in cell.children if child is not None)

        return fx, fy
