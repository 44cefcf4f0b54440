"""
Core data models for auto-layout.

These models define the canonical schema the layout engine consumes and emits:
- Nodes with an optional position and size
- Connections between nodes (using source/target naming convention)
- Per-algorithm option structures with defaults
- Layout results with quality metrics

Field Naming Convention:
- Connections use `source` and `target`
- For compatibility with editor payloads, `from`/`to` and
  `fromNodeId`/`toNodeId` are accepted on input and converted
- Port identifiers are accepted and ignored by every algorithm
"""

import math
import uuid
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_NODE_WIDTH = 100.0
DEFAULT_NODE_HEIGHT = 50.0


class LayoutOptionsError(ValueError):
    """Raised when layout input or options violate a precondition."""


class LayoutAlgorithm(str, Enum):
    """Layout strategies. AUTO is resolved to a concrete one before running."""
    FORCE = "force"
    LAYERED = "layered"
    TREE = "tree"
    GRID = "grid"
    AUTO = "auto"


class LayoutDirection(str, Enum):
    """Presentation direction for layered and tree layouts."""
    TOP_BOTTOM = "TB"
    BOTTOM_TOP = "BT"
    LEFT_RIGHT = "LR"
    RIGHT_LEFT = "RL"


class CrossReduction(str, Enum):
    """Edge crossing reduction methods for layered layout."""
    BARYCENTRIC = "barycentric"
    MEDIAN = "median"
    NONE = "none"


def generate_connection_id() -> str:
    """Generate a unique connection ID."""
    return f"c{uuid.uuid4().hex[:8]}"


class Position(BaseModel):
    """A point on the canvas (top-left corner of a node)."""
    x: float = 0.0
    y: float = 0.0

    @field_validator("x", "y")
    @classmethod
    def require_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("coordinates must be finite")
        return value


class Size(BaseModel):
    """Width and height of a node."""
    width: float = Field(default=DEFAULT_NODE_WIDTH, ge=0)
    height: float = Field(default=DEFAULT_NODE_HEIGHT, ge=0)

    @field_validator("width", "height")
    @classmethod
    def require_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("sizes must be finite")
        return value


class Node(BaseModel):
    """
    A node to be laid out.

    Accepts flat `x`/`y`/`width`/`height` fields on input as well as nested
    `position`/`size` objects.
    """
    id: str
    position: Optional[Position] = None
    size: Optional[Size] = None

    @model_validator(mode='before')
    @classmethod
    def convert_flat_fields(cls, data: Any) -> Any:
        """Convert flat 'x'/'y'/'width'/'height' fields to nested models."""
        if isinstance(data, dict):
            data = dict(data)
            if 'position' not in data and ('x' in data or 'y' in data):
                data['position'] = {'x': data.pop('x', 0.0), 'y': data.pop('y', 0.0)}
            if 'size' not in data and ('width' in data or 'height' in data):
                data['size'] = {
                    'width': data.pop('width', DEFAULT_NODE_WIDTH),
                    'height': data.pop('height', DEFAULT_NODE_HEIGHT),
                }
        return data


class Connection(BaseModel):
    """
    A directed connection between two nodes.

    Uses `source` and `target` as canonical field names.
    Accepts `from`/`to` and `fromNodeId`/`toNodeId` on input.
    """
    id: str = Field(default_factory=generate_connection_id)
    source: str  # Source node ID
    target: str  # Target node ID
    source_port: Optional[str] = None  # Ignored by layout
    target_port: Optional[str] = None  # Ignored by layout

    @model_validator(mode='before')
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        """Convert editor field names to 'source'/'target'."""
        if isinstance(data, dict):
            data = dict(data)
            for legacy in ('from', 'fromNodeId', 'from_node'):
                if legacy in data and 'source' not in data:
                    data['source'] = data.pop(legacy)
            for legacy in ('to', 'toNodeId', 'to_node'):
                if legacy in data and 'target' not in data:
                    data['target'] = data.pop(legacy)
            if 'fromPortId' in data and 'source_port' not in data:
                data['source_port'] = data.pop('fromPortId')
            if 'toPortId' in data and 'target_port' not in data:
                data['target_port'] = data.pop('toPortId')
        return data


# --- Layout options ---

class DirectionalBias(BaseModel):
    """Pushes connection targets along the positive direction of an axis."""
    model_config = ConfigDict(extra='forbid')

    axis: Literal["x", "y"] = "y"
    strength: float = Field(default=5.0, ge=0)


class ForceLayoutOptions(BaseModel):
    """Force-directed layout options."""
    model_config = ConfigDict(extra='forbid')

    iterations: int = Field(default=100, ge=0)
    spring_length: float = Field(default=200.0, gt=0)    # Ideal distance between connected nodes
    spring_strength: float = Field(default=0.4, ge=0)
    repulsion_strength: float = Field(default=2000.0, ge=0)
    damping: float = Field(default=0.85, ge=0, le=1)     # Velocity retained per iteration
    max_force: float = Field(default=50.0, gt=0)
    size_aware_repulsion: bool = True
    use_barnes_hut: bool = True
    barnes_hut_theta: float = Field(default=0.7, gt=0, le=2)
    directional_bias: Optional[DirectionalBias] = None
    seed: Optional[int] = None  # Seeds the overlap jitter source


class LayeredLayoutOptions(BaseModel):
    """Layered (Sugiyama-style) layout options."""
    model_config = ConfigDict(extra='forbid')

    direction: LayoutDirection = LayoutDirection.TOP_BOTTOM
    layer_spacing: float = Field(default=150.0, ge=0)
    node_spacing: float = Field(default=50.0, ge=0)
    cross_reduction: CrossReduction = CrossReduction.BARYCENTRIC
    cross_reduction_iterations: int = Field(default=4, ge=0)
    size_aware: bool = True


class TreeLayoutOptions(BaseModel):
    """Tree layout options."""
    model_config = ConfigDict(extra='forbid')

    direction: LayoutDirection = LayoutDirection.TOP_BOTTOM
    sibling_spacing: float = Field(default=30.0, ge=0)
    level_spacing: float = Field(default=100.0, ge=0)


class GridLayoutOptions(BaseModel):
    """Grid layout options."""
    model_config = ConfigDict(extra='forbid')

    spacing: float = Field(default=200.0, ge=0)
    columns: Optional[int] = Field(default=None, ge=1)  # Auto-calculated if None


class LayoutOptions(BaseModel):
    """
    Combined layout options.

    Nested per-algorithm structures may be given partially; missing fields
    take their defaults.
    """
    model_config = ConfigDict(extra='forbid')

    algorithm: LayoutAlgorithm = LayoutAlgorithm.AUTO
    padding: float = Field(default=100.0, ge=0)
    # Measured sizes take precedence over Node.size
    node_sizes: dict[str, Size] = Field(default_factory=dict)
    force: ForceLayoutOptions = Field(default_factory=ForceLayoutOptions)
    layered: LayeredLayoutOptions = Field(default_factory=LayeredLayoutOptions)
    tree: TreeLayoutOptions = Field(default_factory=TreeLayoutOptions)
    grid: GridLayoutOptions = Field(default_factory=GridLayoutOptions)

    @model_validator(mode='before')
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        """Accept 'hierarchical' as the older name of the layered algorithm."""
        if isinstance(data, dict):
            data = dict(data)
            if data.get('algorithm') == 'hierarchical':
                data['algorithm'] = LayoutAlgorithm.LAYERED.value
            if 'hierarchical' in data and 'layered' not in data:
                data['layered'] = data.pop('hierarchical')
            if 'nodeSizes' in data and 'node_sizes' not in data:
                data['node_sizes'] = data.pop('nodeSizes')
        return data


# --- Results ---

class BoundingBoxSize(BaseModel):
    """Extent of a layout including node sizes."""
    width: float = 0.0
    height: float = 0.0


class LayoutMetrics(BaseModel):
    """Quality and cost metrics of a layout run."""
    execution_time_ms: float = 0.0
    edge_crossings: Optional[int] = None
    bounding_box: BoundingBoxSize = Field(default_factory=BoundingBoxSize)


class LayoutResult(BaseModel):
    """Positions computed by a layout algorithm."""
    node_positions: dict[str, Position] = Field(default_factory=dict)
    iterations: int = 0
    algorithm: LayoutAlgorithm
    metrics: LayoutMetrics = Field(default_factory=LayoutMetrics)

    @field_validator("algorithm")
    @classmethod
    def require_concrete(cls, value: LayoutAlgorithm) -> LayoutAlgorithm:
        if value == LayoutAlgorithm.AUTO:
            raise ValueError("a layout result must name a concrete algorithm")
        return value

    def apply_to(self, nodes: list[Node]) -> list[Node]:
        """Return copies of `nodes` moved to their computed positions.

        Nodes without a computed position are copied unchanged. The input
        list is never mutated.
        """
        moved = []
        for node in nodes:
            position = self.node_positions.get(node.id)
            if position is None:
                moved.append(node.model_copy())
            else:
                moved.append(node.model_copy(update={"position": position.model_copy()}))
        return moved

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "node_positions": {
                node_id: {"x": pos.x, "y": pos.y}
                for node_id, pos in self.node_positions.items()
            },
            "iterations": self.iterations,
            "algorithm": self.algorithm.value,
            "metrics": {
                "execution_time_ms": self.metrics.execution_time_ms,
                "bounding_box": {
                    "width": self.metrics.bounding_box.width,
                    "height": self.metrics.bounding_box.height,
                },
            },
        }
        # Only include crossings if the algorithm measured them
        if self.metrics.edge_crossings is not None:
            result["metrics"]["edge_crossings"] = self.metrics.edge_crossings
        return result
