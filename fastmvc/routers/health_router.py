"""Health and diagnostics endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from fastmvc import __version__
from fastmvc.models import EngineInfo, EnginesResponse, HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health check endpoint."""
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/engines", response_model=EnginesResponse)
async def engines(request: Request):
    """List registered view engines in discovery order with their priorities.

    **Returns:**
    - 200: Engines and the configured view folder
    - 503: Registry not initialized yet
    """
    registry = getattr(request.app.state, "engine_registry", None)
    dispatcher = getattr(request.app.state, "view_dispatcher", None)
    if registry is None or dispatcher is None:
        return JSONResponse(status_code=503, content={"status": "starting"})

    return EnginesResponse(
        view_folder=dispatcher.base_folder,
        engines=[EngineInfo(name=d.name, priority=d.priority, order=d.order) for d in registry],
    )
