#!/usr/bin/env python3
"""
Auto Layout MCP Server

Provides MCP tools for AI agents to lay out diagrams through the auto layout
backend. Tools take nodes and connections as JSON strings and return the
backend's JSON response.
"""

import json
import os
from typing import Optional

import httpx
from mcp.server.fastmcp import FastMCP

# Backend API URL
API_BASE = os.environ.get("AUTOLAYOUT_API_BASE", "http://127.0.0.1:8765/api")

# Create MCP server
mcp = FastMCP("autolayout")


# --- HTTP Client Helper ---

def api_request(method: str, endpoint: str, **kwargs) -> dict:
    """Make a request to the auto layout backend."""
    url = f"{API_BASE}{endpoint}"
    with httpx.Client(timeout=30.0) as client:
        if method == "GET":
            response = client.get(url, params=kwargs.get("params"))
        elif method == "POST":
            response = client.post(url, json=kwargs.get("json"))
        else:
            raise ValueError(f"Unknown method: {method}")

        if response.status_code >= 400:
            error = response.json().get("detail", "Unknown error")
            raise Exception(f"API error: {error}")

        return response.json()


def _parse_graph(nodes: str, connections: str) -> dict:
    """Parse JSON-encoded node and connection lists into a request body."""
    try:
        node_list = json.loads(nodes)
        connection_list = json.loads(connections) if connections else []
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}")
    return {"nodes": node_list, "connections": connection_list}


def _parse_sizes(node_sizes: str) -> dict:
    """Parse a JSON-encoded map of node id to size."""
    try:
        return json.loads(node_sizes)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}")


# ============================================================================
# LAYOUT TOOLS
# ============================================================================

@mcp.tool()
def layout_compute(
    nodes: str,
    connections: str = "[]",
    algorithm: str = "auto",
    direction: Optional[str] = None,
    node_sizes: Optional[str] = None,
    iterations: Optional[int] = None,
    seed: Optional[int] = None,
) -> str:
    """
    Compute positions for diagram nodes.

    Args:
        nodes: JSON list of nodes, e.g. [{"id": "a", "width": 120, "height": 60}]
        connections: JSON list of connections, e.g. [{"source": "a", "target": "b"}]
        algorithm: One of "auto", "force", "layered", "tree", "grid"
        direction: For layered/tree layouts: "TB", "BT", "LR", or "RL"
        node_sizes: Optional JSON object of measured sizes, e.g. {"a": {"width": 140, "height": 80}}
        iterations: Force-directed iteration budget
        seed: Seed for force-directed overlap jitter (reproducible output)

    Returns the node positions, the algorithm actually used, and metrics
    (execution time, edge crossings for layered layouts, bounding box).
    """
    body = _parse_graph(nodes, connections)

    options: dict = {"algorithm": algorithm}
    if direction:
        options["layered"] = {"direction": direction}
        options["tree"] = {"direction": direction}
    if node_sizes:
        options["node_sizes"] = _parse_sizes(node_sizes)
    force = {}
    if iterations is not None:
        force["iterations"] = iterations
    if seed is not None:
        force["seed"] = seed
    if force:
        options["force"] = force
    body["options"] = options

    result = api_request("POST", "/layout", json=body)
    return json.dumps(result, indent=2)


@mcp.tool()
def layout_analyze(nodes: str, connections: str = "[]") -> str:
    """
    Analyze graph structure before choosing a layout.

    Returns node/edge counts, whether the graph is a tree or a DAG, cycles,
    degree statistics, connected components, density, and the algorithm
    automatic layout would select.
    """
    result = api_request("POST", "/analyze", json=_parse_graph(nodes, connections))
    return json.dumps(result, indent=2)


@mcp.tool()
def layout_validate(nodes: str, connections: str = "[]", node_sizes: Optional[str] = None) -> str:
    """
    Check layout input for issues.

    Reports duplicate node IDs (rejected), connections to unknown nodes,
    self-loops, and duplicate connections (all ignored by layout), plus
    size overrides naming unknown nodes.
    """
    body = _parse_graph(nodes, connections)
    if node_sizes:
        body["options"] = {"node_sizes": _parse_sizes(node_sizes)}
    result = api_request("POST", "/validate", json=body)
    return json.dumps(result, indent=2)


@mcp.tool()
def layout_health() -> str:
    """Check that the auto layout backend is reachable."""
    return json.dumps(api_request("GET", "/health"), indent=2)


# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    mcp.run()
