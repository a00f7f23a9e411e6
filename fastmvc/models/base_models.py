"""Pydantic models for health and diagnostics responses."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str
    version: str


class EngineInfo(BaseModel):
    """A registered view engine as listed by the diagnostics endpoint."""

    name: str = Field(..., description="Engine name")
    priority: int = Field(..., description="Effective selection priority")
    order: int = Field(..., description="Discovery order, used as tie-break")


class EnginesResponse(BaseModel):
    """Registered view engines in selection order."""

    view_folder: str = Field(..., description="Base folder for relative view names")
    engines: list[EngineInfo] = Field(..., description="Registered engines")
