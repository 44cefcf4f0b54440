"""
Auto Layout Backend - FastAPI Application

Exposes the layout engine to the diagram editor over HTTP:
- Layout computation (returns positions to apply as a batch node move)
- Graph analysis and algorithm recommendation
- Input validation
- CORS configuration for local frontend development

Layout routes are plain `def` functions so FastAPI runs the CPU-bound
computation in its threadpool instead of on the event loop.
"""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from autolayout import (
    Connection,
    LayoutGraph,
    LayoutOptions,
    Node,
    __version__,
    analyze_graph,
    compute_layout,
    select_algorithm,
    validate_graph,
    validation_summary,
)

from . import settings

settings.configure_logging()
logger = logging.getLogger(__name__)


# --- FastAPI App ---

app = FastAPI(
    title="Auto Layout API",
    description="Automatic graph layout for the diagram editor",
    version=__version__,
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Request Models ---

class GraphRequest(BaseModel):
    """Nodes and connections of the graph to process."""
    nodes: list[Node] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)


class LayoutRequest(GraphRequest):
    """Graph plus (partial) layout options."""
    options: LayoutOptions = Field(default_factory=LayoutOptions)


# --- Health Check ---

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


# --- Layout ---

@app.post("/api/layout")
def layout(request: LayoutRequest):
    """Compute node positions with the requested (or automatically chosen) algorithm."""
    try:
        result = compute_layout(request.nodes, request.connections, request.options)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        "Laid out %d nodes with %s in %.1f ms",
        len(result.node_positions), result.algorithm.value, result.metrics.execution_time_ms,
    )
    return {"success": True, **result.to_json_dict()}


@app.post("/api/analyze")
def analyze(request: GraphRequest):
    """Report graph characteristics and the algorithm auto layout would pick."""
    try:
        graph = LayoutGraph.build(request.nodes, request.connections)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    characteristics = analyze_graph(graph)
    return {
        "success": True,
        "characteristics": characteristics.to_dict(),
        "recommended_algorithm": select_algorithm(characteristics).value,
    }


@app.post("/api/validate")
async def validate(request: LayoutRequest):
    """Report structural issues the layout engine will tolerate or reject."""
    issues = validate_graph(request.nodes, request.connections, request.options.node_sizes)
    return {
        "success": True,
        "issues": [i.to_dict() for i in issues],
        "summary": validation_summary(issues),
    }


# --- Run with uvicorn ---

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
