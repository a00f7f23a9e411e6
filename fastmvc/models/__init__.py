"""fastmvc models"""

from fastmvc.models.base_models import EngineInfo, EnginesResponse, HealthResponse
from fastmvc.models.model_store import Models
from fastmvc.models.render_context import RenderContext
from fastmvc.models.view import View

__all__ = [
    "EngineInfo",
    "EnginesResponse",
    "HealthResponse",
    "Models",
    "RenderContext",
    "View",
]
