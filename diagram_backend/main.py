"""
Diagram Tool Backend - FastAPI Application

REST API over the batch operations. Every request names the diagram file
it works on; the backend keeps no diagram in memory between requests.

Error mapping:
- NodeNotFoundError -> 404
- any other DiagramError (bad kind, duplicate id, bad layout, bad path) -> 400
- malformed request bodies -> 422 (FastAPI/pydantic)
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from diagram_core.errors import DiagramError, NodeNotFoundError
from diagram_core.models import EdgeSpec, LayoutSpec, NodeEdit, NodeSpec

from . import config, operations


logger = logging.getLogger(__name__)


# --- Request Models ---

class FileRequest(BaseModel):
    file_path: str


class AddNodesRequest(FileRequest):
    nodes: list[NodeSpec] = Field(min_length=1)
    layout: Optional[LayoutSpec] = None


class EditNodesRequest(FileRequest):
    nodes: list[NodeEdit] = Field(min_length=1)


class LinkNodesRequest(FileRequest):
    edges: list[EdgeSpec] = Field(min_length=1)


class RemoveNodesRequest(FileRequest):
    ids: list[str] = Field(min_length=1)


def _run(operation, *args, **kwargs) -> dict[str, Any]:
    """Run an operation and translate diagram errors into HTTP errors."""
    try:
        return operation(*args, **kwargs)
    except NodeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DiagramError as e:
        logger.info("Rejected %s: %s", operation.__name__, e)
        raise HTTPException(status_code=400, detail=str(e))


# --- FastAPI App ---

app = FastAPI(
    title="Diagram Tool API",
    description="Batch editing of draw.io-compatible SVG diagrams",
    version="1.0.0",
)


# --- Health Check ---

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    workspace = config.workspace_dir()
    return {"status": "ok", "workspace": str(workspace) if workspace else None}


# --- Diagram Files ---

@app.post("/api/diagram/new")
async def new_diagram(request: FileRequest):
    """Create (or reset) an empty diagram file."""
    return _run(operations.create_diagram, request.file_path)


@app.get("/api/diagram")
async def get_diagram(
    file_path: str = Query(...),
    top_n: int = Query(default=5, ge=1),
):
    """Get a diagram's contents, summary and validation issues."""
    return _run(operations.inspect_diagram, file_path, top_n=top_n)


# --- Node Operations ---

@app.post("/api/nodes")
async def add_nodes(request: AddNodesRequest):
    """Add a batch of nodes, with an optional layout pass."""
    return _run(operations.add_nodes, request.file_path, request.nodes, layout=request.layout)


@app.patch("/api/nodes")
async def edit_nodes(request: EditNodesRequest):
    """Update a batch of nodes or edges."""
    return _run(operations.edit_nodes, request.file_path, request.nodes)


@app.post("/api/nodes/remove")
async def remove_nodes(request: RemoveNodesRequest):
    """Remove nodes (with their children and edges) or single edges."""
    return _run(operations.remove_nodes, request.file_path, request.ids)


# --- Edge Operations ---

@app.post("/api/edges")
async def link_nodes(request: LinkNodesRequest):
    """Create or update a batch of edges."""
    return _run(operations.link_nodes, request.file_path, request.edges)


# --- Run with uvicorn ---

def run(host: Optional[str] = None, port: Optional[int] = None):
    """Serve the API with uvicorn."""
    import uvicorn

    config.configure_logging()
    uvicorn.run(app, host=host or config.HOST, port=port or config.PORT)


if __name__ == "__main__":
    run()
