"""FastAPI application exposing the schema outline over HTTP.

The server keeps one :class:`~xsd_outline.outline.SchemaOutline` per process.
A client loads a document (text, a path, or both), then walks the tree,
asks for decorations and resolves locators to source lines.

Quick start (run the server)::

    uvicorn xsd_outline.run_server:app --reload

Endpoints:

    GET  /health               Basic health probe
    POST /outline              Load or update the active document
    POST /refresh              Force a rebuild of the active document
    GET  /tree                 Root nodes, or children of ?locator=..., ?depth=N levels
    GET  /navigate?locator=... Owning location + zero-based line of a construct
    GET  /decorations?node_id= Occurrence badge / nillable hint of a rendered node
    GET  /config               Active outline configuration

Example: load a schema from disk and list two levels::

    curl -X POST http://localhost:8000/outline \
         -H "Content-Type: application/json" \
         -d '{"path": "/work/schemas/order.xsd"}'
    curl "http://localhost:8000/tree?depth=2" | jq '.items[].label'

Example: expand one node and jump to its source::

    curl "http://localhost:8000/tree?locator=//complexType[@name='OrderType']"
    curl "http://localhost:8000/navigate?locator=//schema/element[@name='Order']"

ETag notes:
    * ``/tree`` emits an ETag derived from the outline generation and the
      request parameters; a client may send ``If-None-Match`` to get a 304
      while the document is unchanged.

Error handling:
    * 404 and 500 are wrapped with JSON payloads for more consistent client UX.
"""

from __future__ import annotations

import hashlib
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .config import OutlineConfig
from .files import is_file_location
from .outline import OutlineSnapshot, SchemaOutline

logger = logging.getLogger(__name__)

app = FastAPI(
    title="XSD Outline API",
    version=__version__,
    description="Lazily expanded outline, navigation and occurrence badges for XML Schema documents",
    docs_url="/docs",
    redoc_url="/redoc",
)


class OutlineRequest(BaseModel):
    """Request model for loading the active document."""

    text: Optional[str] = Field(
        None, description="Schema text; read from `path` when omitted"
    )
    path: Optional[str] = Field(
        None, description="Location of the document, used to resolve imports"
    )
    force: bool = Field(False, description="Rebuild even if nothing changed")


class ImportInfo(BaseModel):
    namespace: str = Field(..., description="Namespace the import is bound to")
    location: str = Field(..., description="Resolved location of the imported document")


class OutlineResponse(BaseModel):
    """Response model describing the published outline."""

    rebuilt: bool = Field(..., description="Whether a new snapshot was published")
    is_schema: bool = Field(..., description="Whether the document is an XML Schema")
    location: Optional[str] = Field(None, description="Location of the root document")
    generation: int = Field(0, description="Outline generation number")
    imports: List[ImportInfo] = Field(
        default_factory=list, description="Loaded import/include bindings"
    )
    errors: List[str] = Field(
        default_factory=list, description="Problems reported while loading"
    )


class DecorationResponse(BaseModel):
    node_id: str
    badge: Optional[str] = None
    tooltip: Optional[str] = None
    nillable: bool = False
    color: Optional[str] = None


@lru_cache(maxsize=1)
def get_outline() -> SchemaOutline:
    return SchemaOutline(config=OutlineConfig.from_env())


def _require_schema(outline: SchemaOutline) -> OutlineSnapshot:
    snapshot = outline.snapshot
    if snapshot is None or not snapshot.is_schema:
        raise HTTPException(status_code=404, detail="No schema document is loaded")
    return snapshot


def _describe(outline: SchemaOutline, rebuilt: bool) -> OutlineResponse:
    snapshot = outline.snapshot
    if snapshot is None:
        return OutlineResponse(rebuilt=rebuilt, is_schema=False)
    imports = []
    if snapshot.document_set is not None:
        imports = [
            ImportInfo(namespace=binding.namespace, location=binding.location)
            for binding in snapshot.document_set.bindings.values()
        ]
    return OutlineResponse(
        rebuilt=rebuilt,
        is_schema=snapshot.is_schema,
        location=snapshot.location,
        generation=snapshot.generation,
        imports=imports,
        errors=list(snapshot.errors),
    )


@app.get("/health")
def health(outline: SchemaOutline = Depends(get_outline)) -> Dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "is_schema": outline.is_schema,
        "location": outline.location,
    }


@app.post("/outline")
def load_outline(
    request: OutlineRequest, outline: SchemaOutline = Depends(get_outline)
) -> OutlineResponse:
    """Load or update the active document.

    Example::

        curl -X POST http://localhost:8000/outline \
             -H "Content-Type: application/json" \
             -d '{"text": "<xs:schema xmlns:xs=\\"http://www.w3.org/2001/XMLSchema\\"/>"}'
    """
    text: Any = request.text
    if text is None:
        if not request.path:
            raise HTTPException(status_code=422, detail="Either text or path is required")
        try:
            text = outline.files.read(request.path)
        except OSError as e:
            raise HTTPException(
                status_code=404, detail=f"Document not found: {request.path}"
            ) from e
    rebuilt = outline.update(text, request.path, force=request.force)
    return _describe(outline, rebuilt)


@app.post("/refresh")
def refresh(outline: SchemaOutline = Depends(get_outline)) -> OutlineResponse:
    """Force a rebuild of the active document.

    File-backed documents are read again; buffers loaded as text are rebuilt
    from their last known text.
    """
    if outline.snapshot is None:
        raise HTTPException(status_code=404, detail="No document is loaded")
    text: Any = None
    location = outline.location
    if is_file_location(location) and outline.files.exists(location):
        try:
            text = outline.files.read(location)
        except OSError as e:
            raise HTTPException(
                status_code=404, detail=f"Document not found: {location}"
            ) from e
    rebuilt = outline.refresh(text)
    return _describe(outline, rebuilt)


@app.get("/tree")
def tree(
    locator: Optional[str] = Query(
        None, description="Locator of the node to expand (default: roots)"
    ),
    depth: int = Query(1, ge=1, le=10, description="Levels to expand"),
    response: Response = None,
    if_none_match: Optional[str] = Header(None),
    outline: SchemaOutline = Depends(get_outline),
) -> Dict[str, object]:
    """Return rendered tree items below ``locator`` (or the roots).

    Example (limit to two levels)::

        curl "http://localhost:8000/tree?depth=2" | jq '.items[0].children'
    """
    snapshot = _require_schema(outline)
    etag = _tree_etag(snapshot, locator, depth)
    if if_none_match and if_none_match == etag:
        response.status_code = 304
        return {}

    node = None
    if locator is not None:
        node = outline.find_node(locator)
        if node is None:
            raise HTTPException(status_code=404, detail=f"Node not found: {locator}")

    items = outline.build_tree(node, depth)
    response.headers["ETag"] = etag
    return {
        "locator": locator,
        "depth": depth,
        "items": [item.to_dict() for item in items],
    }


def _tree_etag(snapshot: OutlineSnapshot, locator: Optional[str], depth: int) -> str:
    key = f"{snapshot.location}:{snapshot.generation}:{locator}:{depth}"
    return '"' + hashlib.md5(key.encode("utf-8")).hexdigest() + '"'


@app.get("/navigate")
def navigate(
    locator: str = Query(..., description="Locator produced by /tree"),
    outline: SchemaOutline = Depends(get_outline),
) -> Dict[str, object]:
    """Resolve a locator to the owning document location and zero-based line."""
    _require_schema(outline)
    target = outline.focus(locator)
    if target is None:
        raise HTTPException(status_code=404, detail=f"Element not found: {locator}")
    return {
        "location": target.location,
        "line": target.line,
        "locator": target.locator,
        "name": target.name,
    }


@app.get("/decorations")
def decorations(
    node_id: str = Query(..., description="Node id of a rendered tree item"),
    outline: SchemaOutline = Depends(get_outline),
) -> DecorationResponse:
    """Occurrence badge and nillable hint registered for ``node_id``."""
    decoration = outline.decorations.get(node_id)
    if decoration is None:
        raise HTTPException(status_code=404, detail=f"No decoration for node: {node_id}")
    return DecorationResponse(
        node_id=node_id,
        badge=decoration.badge,
        tooltip=decoration.tooltip,
        nillable=decoration.nillable,
        color=decoration.color,
    )


@app.get("/config")
def get_config(outline: SchemaOutline = Depends(get_outline)) -> Dict[str, Any]:
    """Current outline configuration."""
    return outline.config.to_dict()


@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Custom 404 handler with more helpful error messages."""
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "detail": (
                str(exc.detail)
                if hasattr(exc, "detail")
                else "The requested resource was not found"
            ),
            "path": str(request.url.path),
        },
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Custom 500 handler for internal errors."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred processing your request",
        },
    )
