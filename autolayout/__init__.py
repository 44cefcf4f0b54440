"""
Auto Layout - Automatic graph layout for diagram editors.

This package computes node positions for a graph of nodes and directed
connections, choosing among force-directed, layered, tree, and grid layouts.
It is a pure computation: it never mutates its input or performs I/O.
"""

from .models import (
    # Enums
    LayoutAlgorithm,
    LayoutDirection,
    CrossReduction,
    # Core models
    Position,
    Size,
    Node,
    Connection,
    # Options
    DirectionalBias,
    ForceLayoutOptions,
    LayeredLayoutOptions,
    TreeLayoutOptions,
    GridLayoutOptions,
    LayoutOptions,
    # Results
    BoundingBoxSize,
    LayoutMetrics,
    LayoutResult,
    # Errors
    LayoutOptionsError,
)

from .graph import LayoutGraph
from .analysis import (
    GraphCharacteristics,
    analyze_graph,
    select_algorithm,
    detect_cycles,
    is_tree,
    count_connected_components,
    find_connected_components,
)
from .validation import validate_graph, validation_summary, ValidationIssue, IssueSeverity
from .metrics import BoundingBox, calculate_bounding_box
from .force import calculate_force_layout
from .layered import calculate_layered_layout
from .tree import calculate_tree_layout
from .grid import calculate_grid_layout
from .layout import compute_layout, apply_layout, resolve_options

__version__ = "1.0.0"

__all__ = [
    # Enums
    "LayoutAlgorithm",
    "LayoutDirection",
    "CrossReduction",
    # Models
    "Position",
    "Size",
    "Node",
    "Connection",
    # Options
    "DirectionalBias",
    "ForceLayoutOptions",
    "LayeredLayoutOptions",
    "TreeLayoutOptions",
    "GridLayoutOptions",
    "LayoutOptions",
    # Results
    "BoundingBoxSize",
    "LayoutMetrics",
    "LayoutResult",
    "LayoutOptionsError",
    # Graph and analysis
    "LayoutGraph",
    "GraphCharacteristics",
    "analyze_graph",
    "select_algorithm",
    "detect_cycles",
    "is_tree",
    "count_connected_components",
    "find_connected_components",
    # Validation
    "validate_graph",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
    # Geometry
    "BoundingBox",
    "calculate_bounding_box",
    # Layout
    "calculate_force_layout",
    "calculate_layered_layout",
    "calculate_tree_layout",
    "calculate_grid_layout",
    "compute_layout",
    "apply_layout",
    "resolve_options",
]
