"""
FastAPI backend for the globe marker dashboard.

Serves the static marker graph through a filtering endpoint that recomputes
statistics for the filtered subset, plus a stub endpoint for adding markers.
Supports CORS for local development.
"""

import asyncio
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Ensure we import from the local src directory, not elsewhere
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import Settings, load_settings
from src.core.aggregator import query
from src.core.store import MarkerDataset, load_dataset

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

router = APIRouter()


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string (millisecond precision)."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def failure_response(
    status_code: int, message: str, error: Optional[str] = None
) -> JSONResponse:
    """
    Build a ``{success: false, message, timestamp, error?}`` response.

    ``error`` is left out entirely when None.
    """
    body: Dict[str, Any] = {
        "success": False,
        "message": message,
        "timestamp": utc_timestamp(),
    }
    if error is not None:
        body["error"] = error
    return JSONResponse(content=body, status_code=status_code)


def get_dataset(app: FastAPI) -> MarkerDataset:
    """Return the dataset, loading it on first use."""
    dataset = getattr(app.state, "dataset", None)
    if dataset is None:
        dataset = load_dataset(app.state.settings.data_path)
        app.state.dataset = dataset
    return dataset


def next_marker_id(app: FastAPI) -> str:
    """Synthesize a millisecond-epoch id, unique within this process."""
    candidate = int(time.time() * 1000)
    last = getattr(app.state, "last_marker_id", 0)
    if candidate <= last:
        candidate = last + 1
    app.state.last_marker_id = candidate
    return str(candidate)


@router.get("/")  # type: ignore[misc]
async def root() -> Dict[str, Any]:
    """
    Root endpoint with API information.

    Returns
    -------
    dict
        API information and status
    """
    return {
        "name": "Globe Markers API",
        "version": API_VERSION,
        "status": "running",
        "endpoints": {
            "GET /api/markers": "Filtered markers with statistics",
            "POST /api/markers": "Add a marker (not persisted)",
            "/health": "Health check",
        },
    }


@router.get("/health")  # type: ignore[misc]
async def health() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/api/markers", response_model=None)  # type: ignore[misc]
async def get_markers(
    request: Request,
    region: Optional[str] = Query(None, description="Case-insensitive region substring"),
    type: Optional[str] = Query(
        None, description="Marker type: 'capital', 'city', 'city-state' or 'other'"
    ),
    limit: Optional[str] = Query(None, description="Maximum number of markers"),
) -> Any:
    """
    Get markers, optionally filtered, with statistics for the result.

    Parameters
    ----------
    region : Optional[str]
        Keep markers whose region contains this text (case-insensitive)
    type : Optional[str]
        Keep markers of exactly this type
    limit : Optional[str]
        Keep only the first N markers; ignored unless a positive integer

    Returns
    -------
    dict
        Envelope with:
        - success: True
        - message: Dataset message
        - timestamp: When the response was built
        - data.markers: Filtered markers
        - data.statistics: Statistics over the filtered markers
        - data.metadata: Dataset metadata
    """
    settings: Settings = request.app.state.settings
    try:
        if settings.delay_seconds:
            await asyncio.sleep(settings.delay_seconds)

        dataset = get_dataset(request.app)
        result = query(dataset.markers, region=region, type=type, limit=limit)
        logger.info(
            f"Markers query region={region!r} type={type!r} limit={limit!r}: "
            f"{len(result.markers)}/{len(dataset.markers)} markers"
        )

        return {
            "success": True,
            "message": dataset.message,
            "timestamp": utc_timestamp(),
            "data": {
                "markers": [m.to_dict() for m in result.markers],
                "statistics": result.statistics.to_dict(),
                "metadata": dataset.metadata.to_dict(),
            },
        }
    except Exception as e:
        logger.error(f"Error in markers API: {e}", exc_info=True)
        return failure_response(
            500,
            "Internal server error",
            error=None if settings.is_production else str(e),
        )


@router.post("/api/markers", response_model=None)  # type: ignore[misc]
async def create_marker(request: Request) -> Any:
    """
    Accept a new marker.

    The body is echoed back with a synthesized id; nothing is stored and no
    fields are required. A submitted ``id`` overrides the synthesized one.
    A body that is valid JSON but not an object is echoed whole under
    ``data.body`` rather than spread into ``data``.

    Returns
    -------
    dict
        Envelope whose ``data`` is ``{id, ...body}``
    """
    try:
        body = await request.json()
    except Exception as e:
        logger.error(f"Error adding marker: {e}")
        return failure_response(400, "Error processing request")

    fields = body if isinstance(body, dict) else {"body": body}
    return {
        "success": True,
        "message": "Marker added successfully",
        "timestamp": utc_timestamp(),
        "data": {"id": next_marker_id(request.app), **fields},
    }


def create_app(
    settings: Optional[Settings] = None, dataset: Optional[MarkerDataset] = None
) -> FastAPI:
    """
    Create the API application.

    Parameters
    ----------
    settings : Optional[Settings]
        Settings to use (default: loaded from config.json and environment)
    dataset : Optional[MarkerDataset]
        Preloaded dataset (default: loaded from ``settings.data_path`` on
        first request)

    Returns
    -------
    FastAPI
        Configured application
    """
    app = FastAPI(
        title="Globe Markers API",
        description="Marker graph API for the interactive globe dashboard",
        version=API_VERSION,
    )

    # Configure CORS - allow all localhost origins in development
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"http://(localhost|127\.0\.0\.1):\d+",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings or load_settings()
    app.state.dataset = dataset
    app.state.last_marker_id = 0
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    port = app.state.settings.port
    logger.info(f"Starting Globe Markers API on http://0.0.0.0:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")  # nosec B104
