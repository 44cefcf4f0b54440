"""
Tree layout in the Reingold-Tilford family.

Each node's parent is the source of its first incoming connection, giving a
forest. Every tree is drawn with two passes: a post-order pass that places
children, separates sibling subtrees by their contours and centers parents,
and a pre-order pass that applies the accumulated shifts. Trees are then set
side by side and the forest is centered on the origin.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from .graph import LayoutGraph
from .layered import apply_direction
from .metrics import build_result, calculate_bounding_box, trivial_result
from .models import LayoutAlgorithm, LayoutResult, TreeLayoutOptions

logger = logging.getLogger(__name__)


@dataclass
class TreeNode:
    """Arena record for one node; parent and children are arena indices."""
    id: str
    width: float
    height: float
    parent: Optional[int] = None
    children: list[int] = field(default_factory=list)
    depth: int = 0
    x: float = 0.0
    y: float = 0.0
    mod: float = 0.0  # Shift applied to every descendant


@dataclass
class Forest:
    """Tree records addressed by index, plus root indices in layout order."""
    nodes: list[TreeNode]
    roots: list[int]


def build_forest(graph: LayoutGraph) -> Forest:
    """
    Build a forest from the first incoming connection of each node.

    Later connections into an already-parented node and self-loops are
    ignored. When cycles leave nodes unreachable from every root, the
    unreachable node with the fewest incoming edges (ties broken by ID) is
    cut from its parent and becomes a root, until every node is placed.
    """
    index_of = {node_id: i for i, node_id in enumerate(graph.node_ids)}
    nodes = [
        TreeNode(id=node_id, width=graph.size_of(node_id).width, height=graph.size_of(node_id).height)
        for node_id in graph.node_ids
    ]

    for conn in graph.connections:
        if conn.source == conn.target:
            continue
        parent = index_of[conn.source]
        child = index_of[conn.target]
        if nodes[child].parent is None:
            nodes[child].parent = parent
            nodes[parent].children.append(child)

    roots = [i for i, node in enumerate(nodes) if node.parent is None]
    placed: set[int] = set()

    def assign_depths(root: int) -> None:
        nodes[root].depth = 0
        placed.add(root)
        queue = deque([root])
        while queue:
            current = queue.popleft()
            for child in nodes[current].children:
                nodes[child].depth = nodes[current].depth + 1
                placed.add(child)
                queue.append(child)

    for root in roots:
        assign_depths(root)

    while len(placed) < len(nodes):
        candidate = min(
            (i for i in range(len(nodes)) if i not in placed),
            key=lambda i: (graph.in_degree(nodes[i].id), nodes[i].id),
        )
        parent = nodes[candidate].parent
        if parent is not None:
            nodes[parent].children.remove(candidate)
            nodes[candidate].parent = None
        logger.debug("Breaking cycle: %s becomes a tree root", nodes[candidate].id)
        roots.append(candidate)
        assign_depths(candidate)

    return Forest(nodes=nodes, roots=roots)


def _post_order(forest: Forest, root: int) -> list[int]:
    order: list[int] = []
    stack = [root]
    while stack:
        current = stack.pop()
        order.append(current)
        stack.extend(forest.nodes[current].children)
    order.reverse()
    return order


def _contour(forest: Forest, root: int, leftmost: bool) -> dict[int, float]:
    """Per relative depth, the leftmost x (or rightmost x + width) of a subtree."""
    contour: dict[int, float] = {}
    stack = [(root, 0, 0.0)]
    while stack:
        index, level, mod_sum = stack.pop()
        node = forest.nodes[index]
        if leftmost:
            edge = node.x + mod_sum
            if level not in contour or edge < contour[level]:
                contour[level] = edge
        else:
            edge = node.x + node.width + mod_sum
            if level not in contour or edge > contour[level]:
                contour[level] = edge
        for child in node.children:
            stack.append((child, level + 1, mod_sum + node.mod))
    return contour


def _separate_children(forest: Forest, index: int, sibling_spacing: float) -> None:
    """Shift each child subtree right of its left siblings, then center the parent."""
    node = forest.nodes[index]
    if not node.children:
        node.x = 0.0
        return

    placed_right: dict[int, float] = {}
    for position, child_index in enumerate(node.children):
        child = forest.nodes[child_index]
        if position > 0:
            left = _contour(forest, child_index, leftmost=True)
            shift = max(
                placed_right[level] + sibling_spacing - left[level]
                for level in left
                if level in placed_right
            )
            child.x += shift
            child.mod += shift

        for level, edge in _contour(forest, child_index, leftmost=False).items():
            if level not in placed_right or edge > placed_right[level]:
                placed_right[level] = edge

    first = forest.nodes[node.children[0]]
    last = forest.nodes[node.children[-1]]
    node.x = (first.x + last.x + last.width) / 2 - node.width / 2


def _first_pass(forest: Forest, root: int, sibling_spacing: float) -> None:
    """Post-order: leaves at 0, parents centered over separated children."""
    for index in _post_order(forest, root):
        _separate_children(forest, index, sibling_spacing)


def _second_pass(forest: Forest, root: int, level_spacing: float) -> dict[int, tuple[float, float]]:
    """Pre-order: apply accumulated shifts; y from depth."""
    positions: dict[int, tuple[float, float]] = {}
    stack = [(root, 0.0)]
    while stack:
        index, mod_sum = stack.pop()
        node = forest.nodes[index]
        positions[index] = (node.x + mod_sum, node.depth * level_spacing)
        for child in node.children:
            stack.append((child, mod_sum + node.mod))
    return positions


def calculate_tree_layout(
    graph: LayoutGraph,
    options: Optional[TreeLayoutOptions] = None,
) -> LayoutResult:
    """
    Arrange nodes as a forest of trees.

    Args:
        graph: Graph to lay out
        options: Tree options (defaults if None)

    Returns:
        LayoutResult centered on the origin; `iterations` is the number of trees
    """
    started = time.perf_counter()
    trivial = trivial_result(graph, LayoutAlgorithm.TREE, started)
    if trivial is not None:
        return trivial

    options = options or TreeLayoutOptions()
    forest = build_forest(graph)

    raw: dict[str, tuple[float, float]] = {}
    right_edge: Optional[float] = None

    for root in forest.roots:
        _first_pass(forest, root, options.sibling_spacing)
        tree_positions = _second_pass(forest, root, options.level_spacing)

        min_x = min(x for x, _ in tree_positions.values())
        offset = 0.0 if right_edge is None else right_edge + options.sibling_spacing * 2 - min_x

        for index, (x, y) in tree_positions.items():
            node = forest.nodes[index]
            raw[node.id] = (x + offset, y)
            edge = x + offset + node.width
            if right_edge is None or edge > right_edge:
                right_edge = edge

    center_x, center_y = calculate_bounding_box(raw, graph.sizes).center
    centered = {node_id: (x - center_x, y - center_y) for node_id, (x, y) in raw.items()}

    return build_result(
        graph,
        apply_direction(centered, options.direction),
        LayoutAlgorithm.TREE,
        started,
        iterations=len(forest.roots),
    )
