"""
Force-directed layout using spring physics.

Simulates physical forces:
- All nodes repel each other (like charged particles), exactly for small
  graphs and through a Barnes-Hut quadtree for large ones
- Connected nodes attract each other (like springs)
- Acyclic graphs get a gentle directional bias so edges flow one way

Parameters adapt to graph size and density before the simulation starts.
"""

import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Optional

from .analysis import calculate_density, detect_cycles
from .graph import LayoutGraph
from .metrics import build_result, calculate_bounding_box, trivial_result
from .models import (
    DirectionalBias,
    ForceLayoutOptions,
    LayoutAlgorithm,
    LayoutResult,
)
from .quadtree import (
    MIN_EDGE_DISTANCE,
    Body,
    QuadTree,
    calculate_bounds,
    repulsion_between,
)

logger = logging.getLogger(__name__)

# Graphs above this many nodes use the Barnes-Hut approximation
BARNES_HUT_MIN_NODES = 50
# Average per-node displacement under which the simulation has converged
CONVERGENCE_THRESHOLD = 0.1
# Distance under which a pair gets jitter instead of a real force
PAIR_OVERLAP_DISTANCE = 0.01
PAIR_JITTER = 10.0
# A biased connection's target should lead its source by this much
BIAS_LEAD = 50.0
AUTO_BIAS = DirectionalBias(axis="y", strength=5.0)


@dataclass
class SimulationState:
    """Per-node position and velocity; sizes are fixed for the run."""
    positions: dict[str, list[float]] = field(default_factory=dict)
    velocities: dict[str, list[float]] = field(default_factory=dict)


def adapt_parameters(
    node_count: int,
    edge_count: int,
    options: ForceLayoutOptions,
) -> ForceLayoutOptions:
    """
    Scale parameters for larger and denser graphs.

    - Spring length grows with sqrt(n / 10) to spread out larger graphs
    - Repulsion grows with density to prevent overlap
    - Iterations grow with n, at most doubling
    """
    if node_count <= 1:
        return options

    density = calculate_density(node_count, edge_count)
    spring_scale = max(1.0, math.sqrt(node_count / 10))
    repulsion_scale = 1 + density * 2
    iteration_scale = min(2.0, 1 + node_count / 200)

    return options.model_copy(update={
        "spring_length": options.spring_length * spring_scale,
        "repulsion_strength": options.repulsion_strength * repulsion_scale,
        "iterations": math.ceil(options.iterations * iteration_scale),
        "use_barnes_hut": options.use_barnes_hut and node_count > BARNES_HUT_MIN_NODES,
    })


def initialize_state(graph: LayoutGraph) -> SimulationState:
    """Seed positions from existing node positions, else a circle of radius sqrt(n) * 50."""
    state = SimulationState()
    count = graph.node_count
    radius = math.sqrt(count) * 50

    for index, node in enumerate(graph.nodes):
        if node.position is not None:
            state.positions[node.id] = [node.position.x, node.position.y]
        else:
            angle = (index / count) * 2 * math.pi
            state.positions[node.id] = [math.cos(angle) * radius, math.sin(angle) * radius]
        state.velocities[node.id] = [0.0, 0.0]

    return state


def _pairwise_repulsion(
    graph: LayoutGraph,
    state: SimulationState,
    forces: dict[str, list[float]],
    options: ForceLayoutOptions,
    rng: random.Random,
) -> None:
    """Exact O(n^2) repulsion."""
    ids = graph.node_ids
    strength = options.repulsion_strength
    size_aware = options.size_aware_repulsion

    for i in range(len(ids)):
        id_a = ids[i]
        ax, ay = state.positions[id_a]
        size_a = graph.sizes[id_a]
        for j in range(i + 1, len(ids)):
            id_b = ids[j]
            bx, by = state.positions[id_b]
            dx = bx - ax
            dy = by - ay
            center_dist = math.hypot(dx, dy)

            if center_dist < PAIR_OVERLAP_DISTANCE:
                for node_id in (id_a, id_b):
                    forces[node_id][0] += (rng.random() - 0.5) * PAIR_JITTER
                    forces[node_id][1] += (rng.random() - 0.5) * PAIR_JITTER
                continue

            if size_aware:
                size_b = graph.sizes[id_b]
                edge_x = max(0.0, abs(dx) - size_a.width / 2 - size_b.width / 2)
                edge_y = max(0.0, abs(dy) - size_a.height / 2 - size_b.height / 2)
                effective = max(math.hypot(edge_x, edge_y), MIN_EDGE_DISTANCE)
            else:
                effective = center_dist

            magnitude = strength / (effective * effective)
            fx = (dx / center_dist) * magnitude
            fy = (dy / center_dist) * magnitude

            forces[id_a][0] -= fx
            forces[id_a][1] -= fy
            forces[id_b][0] += fx
            forces[id_b][1] += fy


def _barnes_hut_repulsion(
    graph: LayoutGraph,
    state: SimulationState,
    forces: dict[str, list[float]],
    options: ForceLayoutOptions,
    padding: float,
    rng: random.Random,
) -> None:
    """Approximate O(n log n) repulsion through a quadtree."""
    bodies = [
        Body(
            id=node_id,
            x=state.positions[node_id][0],
            y=state.positions[node_id][1],
            width=graph.sizes[node_id].width,
            height=graph.sizes[node_id].height,
        )
        for node_id in graph.node_ids
    ]
    bounds = calculate_bounds(
        {body.id: (body.x, body.y) for body in bodies}, graph.sizes, padding,
    )
    tree = QuadTree.build(bodies, bounds, options.barnes_hut_theta)

    for body in bodies:
        fx, fy = tree.repulsion_on(
            body, options.repulsion_strength, options.size_aware_repulsion, rng,
        )
        forces[body.id][0] += fx
        forces[body.id][1] += fy


def _spring_forces(
    graph: LayoutGraph,
    state: SimulationState,
    forces: dict[str, list[float]],
    options: ForceLayoutOptions,
) -> None:
    """Hooke's law along every connection: F = k * (distance - ideal length)."""
    for conn in graph.connections:
        if conn.source == conn.target:
            continue
        sx, sy = state.positions[conn.source]
        tx, ty = state.positions[conn.target]
        dx = tx - sx
        dy = ty - sy
        distance = math.hypot(dx, dy)

        if distance < 0.01:
            continue

        ideal_length = options.spring_length
        if options.size_aware_repulsion:
            ideal_length += (graph.sizes[conn.source].width + graph.sizes[conn.target].width) / 4

        magnitude = options.spring_strength * (distance - ideal_length)
        fx = (dx / distance) * magnitude
        fy = (dy / distance) * magnitude

        forces[conn.source][0] += fx
        forces[conn.source][1] += fy
        forces[conn.target][0] -= fx
        forces[conn.target][1] -= fy


def _directional_bias(
    graph: LayoutGraph,
    state: SimulationState,
    forces: dict[str, list[float]],
    bias: DirectionalBias,
) -> None:
    """Push each connection's target toward the positive side of the bias axis."""
    axis = 1 if bias.axis == "y" else 0

    for conn in graph.connections:
        if conn.source == conn.target:
            continue
        source_pos = state.positions[conn.source][axis]
        target_pos = state.positions[conn.target][axis]
        if target_pos < source_pos + BIAS_LEAD:
            forces[conn.target][axis] += bias.strength
            forces[conn.source][axis] -= bias.strength * 0.5


def _integrate(
    graph: LayoutGraph,
    state: SimulationState,
    forces: dict[str, list[float]],
    options: ForceLayoutOptions,
) -> float:
    """Clamp forces, update velocities and positions; return total movement."""
    total_movement = 0.0

    for node_id in graph.node_ids:
        fx, fy = forces[node_id]
        magnitude = math.hypot(fx, fy)
        if magnitude > options.max_force:
            fx = fx / magnitude * options.max_force
            fy = fy / magnitude * options.max_force

        velocity = state.velocities[node_id]
        velocity[0] = velocity[0] * options.damping + fx
        velocity[1] = velocity[1] * options.damping + fy

        position = state.positions[node_id]
        position[0] += velocity[0]
        position[1] += velocity[1]

        total_movement += math.hypot(velocity[0], velocity[1])

    return total_movement


def normalize_positions(
    graph: LayoutGraph,
    state: SimulationState,
    offset: float = 0.0,
) -> dict[str, tuple[float, float]]:
    """
    Center the bounding box (including node sizes) on the origin, then shift
    every position by `offset` on both axes.
    """
    raw = {node_id: (pos[0], pos[1]) for node_id, pos in state.positions.items()}
    center_x, center_y = calculate_bounding_box(raw, graph.sizes).center
    return {
        node_id: (x - center_x + offset, y - center_y + offset)
        for node_id, (x, y) in raw.items()
    }


def calculate_force_layout(
    graph: LayoutGraph,
    options: Optional[ForceLayoutOptions] = None,
    padding: float = 100.0,
    rng: Optional[random.Random] = None,
) -> LayoutResult:
    """
    Arrange nodes using a force-directed simulation.

    Args:
        graph: Graph to lay out
        options: Force options (defaults if None)
        padding: Padding around the Barnes-Hut region
        rng: Source of overlap jitter; seeded from `options.seed` if None

    Returns:
        LayoutResult with the bounding box centered on
        (spring_length / 2, spring_length / 2) of the caller's options
    """
    started = time.perf_counter()
    trivial = trivial_result(graph, LayoutAlgorithm.FORCE, started)
    if trivial is not None:
        return trivial

    options = options or ForceLayoutOptions()
    if rng is None:
        rng = random.Random(options.seed)

    effective = adapt_parameters(graph.node_count, graph.edge_count, options)

    if effective.directional_bias is None and graph.edge_count > 0 and not detect_cycles(graph):
        effective = effective.model_copy(update={"directional_bias": AUTO_BIAS})

    state = initialize_state(graph)

    iterations = 0
    for _ in range(effective.iterations):
        iterations += 1
        forces = {node_id: [0.0, 0.0] for node_id in graph.node_ids}

        if effective.use_barnes_hut and graph.node_count > BARNES_HUT_MIN_NODES:
            _barnes_hut_repulsion(graph, state, forces, effective, padding, rng)
        else:
            _pairwise_repulsion(graph, state, forces, effective, rng)

        _spring_forces(graph, state, forces, effective)

        if effective.directional_bias is not None:
            _directional_bias(graph, state, forces, effective.directional_bias)

        total_movement = _integrate(graph, state, forces, effective)
        if total_movement / graph.node_count < CONVERGENCE_THRESHOLD:
            logger.debug("Force layout converged after %d iterations", iterations)
            break

    return build_result(
        graph,
        normalize_positions(graph, state, options.spring_length / 2),
        LayoutAlgorithm.FORCE,
        started,
        iterations=iterations,
    )
