"""Page/view routes for serving HTML pages and handling forms."""

from annotated_types import Ge, Le, MaxLen, MinLen
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from fastmvc.binding.binder import BoundParams, Param
from fastmvc.binding.binding_result import BindingResult
from fastmvc.dependencies import bind_params, controller, get_view_renderer
from fastmvc.models.model_store import Models
from fastmvc.views.view_renderer import ViewRenderer

router = APIRouter()

NAME_CONSTRAINTS = (MinLen(1), MaxLen(50))
AGE_CONSTRAINTS = (Ge(1), Le(120))

REGISTRATION_PARAMS = (
    Param("name", str, constraints=NAME_CONSTRAINTS, opt_in=True),
    Param("age", int, constraints=AGE_CONSTRAINTS, opt_in=True),
)

STRICT_REGISTRATION_PARAMS = (
    Param("name", str, constraints=NAME_CONSTRAINTS),
    Param("age", int, constraints=AGE_CONSTRAINTS),
)


class RegistrationController:
    """Registration form handler with local error handling.

    Receives the request's BindingResult through its property setter.
    """

    def __init__(self):
        self._binding_result: BindingResult | None = None

    @property
    def binding_result(self) -> BindingResult | None:
        return self._binding_result

    @binding_result.setter
    def binding_result(self, value: BindingResult) -> None:
        self._binding_result = value

    def register(self, params: BoundParams) -> tuple[str, Models, int]:
        """Pick the view for a submitted registration form.

        Returns:
            View name, models and status code
        """
        models = Models(name=params.name, age=params.age)
        if self._binding_result is not None and self._binding_result.is_failed():
            models.put("errors", self._binding_result.error_map())
            return "register.html", models, 400
        return "registered.html", models, 200


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, renderer: ViewRenderer = Depends(get_view_renderer)):
    """Render the landing page (absolute view, outside the view folder)."""
    return await renderer.render(request, "/index.html", Models(title="fastmvc"))


@router.get("/hello", response_class=HTMLResponse)
async def hello(
    request: Request,
    params: BoundParams = Depends(
        bind_params(Param("name", str, source="query", constraints=(MaxLen(50),), default="World"))
    ),
    renderer: ViewRenderer = Depends(get_view_renderer),
):
    """Render a greeting for the ``name`` query parameter."""
    return await renderer.render(request, "hello.html", Models(name=params.name))


@router.get("/register", response_class=HTMLResponse)
async def register_form(request: Request, renderer: ViewRenderer = Depends(get_view_renderer)):
    """Render the empty registration form."""
    return await renderer.render(request, "register.html", Models(name="", age=None, errors={}))


@router.post("/register", response_class=HTMLResponse)
async def register(
    request: Request,
    params: BoundParams = Depends(bind_params(*REGISTRATION_PARAMS)),
    registration: RegistrationController = Depends(controller(RegistrationController)),
    renderer: ViewRenderer = Depends(get_view_renderer),
):
    """Handle the registration form, re-rendering it when binding failed."""
    view, models, status_code = registration.register(params)
    return await renderer.render(request, view, models, status_code=status_code)


@router.post("/register-strict", response_class=HTMLResponse)
async def register_strict(
    request: Request,
    params: BoundParams = Depends(bind_params(*STRICT_REGISTRATION_PARAMS)),
    renderer: ViewRenderer = Depends(get_view_renderer),
):
    """Handle the registration form without opt-in: invalid input fails the request."""
    return await renderer.render(request, "registered.html", Models(name=params.name, age=params.age))


@router.get("/profile.json")
async def profile_json(
    request: Request,
    params: BoundParams = Depends(
        bind_params(
            Param("name", str, source="query", default="World"),
            Param("tags", list[str], source="query"),
        )
    ),
    renderer: ViewRenderer = Depends(get_view_renderer),
):
    """Render the bound query parameters through the JSON view engine."""
    return await renderer.render(request, "profile.json", Models(name=params.name, tags=params.tags))


@router.get("/home")
async def home(request: Request, renderer: ViewRenderer = Depends(get_view_renderer)):
    """Redirect to the landing page."""
    return await renderer.render(request, "redirect:/")
