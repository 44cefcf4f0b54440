"""
Layout orchestration - one entry point for every layout strategy.

`compute_layout` merges caller options over the defaults, builds the shared
graph once, resolves the "auto" strategy through graph analysis, and
dispatches to the chosen engine:
- Force: force-directed physics, any graph
- Layered: Sugiyama-style layers, DAGs
- Tree: Reingold-Tilford style, forests
- Grid: simple grid, edgeless graphs and fallback

Nothing passed in is modified; apply a result with `LayoutResult.apply_to`.
"""

import logging
import random
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from .analysis import analyze_graph, select_algorithm
from .force import calculate_force_layout
from .graph import LayoutGraph
from .grid import calculate_grid_layout
from .layered import calculate_layered_layout
from .models import (
    Connection,
    LayoutAlgorithm,
    LayoutOptions,
    LayoutOptionsError,
    LayoutResult,
    Node,
)
from .tree import calculate_tree_layout
from .validation import IssueSeverity, validate_graph

logger = logging.getLogger(__name__)

NodeInput = Union[Node, Mapping[str, Any]]
ConnectionInput = Union[Connection, Mapping[str, Any]]
OptionsInput = Union[LayoutOptions, Mapping[str, Any], None]


def resolve_options(options: OptionsInput = None) -> LayoutOptions:
    """
    Merge partial options over the defaults.

    Raises:
        LayoutOptionsError: If any option value is invalid
    """
    if options is None:
        return LayoutOptions()
    if isinstance(options, LayoutOptions):
        return options
    try:
        return LayoutOptions.model_validate(dict(options))
    except ValidationError as e:
        raise LayoutOptionsError(f"Invalid layout options: {e}") from e


def _coerce(items: Iterable[Any], model: type, kind: str) -> list:
    coerced = []
    for item in items:
        if isinstance(item, model):
            coerced.append(item)
            continue
        try:
            coerced.append(model.model_validate(item))
        except ValidationError as e:
            raise LayoutOptionsError(f"Invalid {kind}: {e}") from e
    return coerced


def compute_layout(
    nodes: Iterable[NodeInput],
    connections: Iterable[ConnectionInput],
    options: OptionsInput = None,
    rng: Optional[random.Random] = None,
) -> LayoutResult:
    """
    Compute positions for every node.

    Args:
        nodes: Nodes (models or dicts)
        connections: Connections (models or dicts); unknown endpoints are ignored
        options: LayoutOptions or a (partial) dict of them
        rng: Jitter source for the force engine (seeded from options if None)

    Returns:
        LayoutResult naming the concrete algorithm that ran

    Raises:
        LayoutOptionsError: On invalid options, malformed nodes or
            connections, or duplicate node IDs
    """
    opts = resolve_options(options)
    node_list: list[Node] = _coerce(nodes, Node, "node")
    connection_list: list[Connection] = _coerce(connections, Connection, "connection")

    for issue in validate_graph(node_list, connection_list, opts.node_sizes):
        if issue.severity == IssueSeverity.WARNING:
            logger.warning("Layout input: %s", issue.message)

    graph = LayoutGraph.build(node_list, connection_list, opts.node_sizes)

    algorithm = opts.algorithm
    if algorithm == LayoutAlgorithm.AUTO:
        algorithm = select_algorithm(analyze_graph(graph))

    if algorithm == LayoutAlgorithm.FORCE:
        result = calculate_force_layout(graph, opts.force, padding=opts.padding, rng=rng)
    elif algorithm == LayoutAlgorithm.LAYERED:
        result = calculate_layered_layout(graph, opts.layered)
    elif algorithm == LayoutAlgorithm.TREE:
        result = calculate_tree_layout(graph, opts.tree)
    else:
        result = calculate_grid_layout(graph, opts.grid)

    logger.debug(
        "%s layout of %d nodes took %.2f ms",
        result.algorithm.value, graph.node_count, result.metrics.execution_time_ms,
    )
    return result


def apply_layout(nodes: Iterable[NodeInput], result: LayoutResult) -> list[Node]:
    """Return copies of `nodes` moved to the positions in `result`."""
    return result.apply_to(_coerce(nodes, Node, "node"))
