"""FastAPI dependencies for dependency injection."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import Depends, Request

from fastmvc.binding.binder import BoundParams, Param, ParameterBinder
from fastmvc.binding.binding_result import STATE_KEY, BindingResult
from fastmvc.binding.injection import create_controller
from fastmvc.engine.dispatcher import ViewDispatcher
from fastmvc.views.view_renderer import ViewRenderer

T = TypeVar("T")

_default_binder = ParameterBinder()


async def get_view_dispatcher(request: Request) -> ViewDispatcher:
    """
    Get the shared view dispatcher from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The dispatcher built at startup.

    Raises:
        RuntimeError: If the dispatcher is not initialized.
    """
    dispatcher: ViewDispatcher | None = getattr(request.app.state, "view_dispatcher", None)

    if dispatcher is None:
        raise RuntimeError("View dispatcher not initialized. Is the application lifespan running?")

    return dispatcher


async def get_view_renderer(dispatcher: ViewDispatcher = Depends(get_view_dispatcher)) -> ViewRenderer:
    """Get a response renderer over the shared dispatcher."""
    return ViewRenderer(dispatcher)


def get_binding_result(request: Request) -> BindingResult:
    """
    Get the BindingResult of the current request.

    A fresh aggregator is created on first use and kept on ``request.state``
    under a private key, so every dependency of the same request shares it
    and a model named ``binding_result`` cannot replace it.
    """
    binding_result: BindingResult | None = getattr(request.state, STATE_KEY, None)
    if binding_result is None:
        binding_result = BindingResult()
        setattr(request.state, STATE_KEY, binding_result)
    return binding_result


def get_parameter_binder(request: Request) -> ParameterBinder:
    """Get the application's parameter binder, falling back to the default converters."""
    return getattr(request.app.state, "parameter_binder", None) or _default_binder


def bind_params(*params: Param) -> Callable[..., Awaitable[BoundParams]]:
    """
    Build a dependency that binds the declared parameters.

    Opt-in parameters record failures in the request's BindingResult; the
    others raise and are handled by the registered error handlers.

    Example:
        @router.post("/register")
        async def register(params: BoundParams = Depends(bind_params(Param("age", int, opt_in=True)))):
            ...
    """
    needs_form = any(param.source == "form" for param in params)

    async def dependency(
        request: Request,
        binding_result: BindingResult = Depends(get_binding_result),
        binder: ParameterBinder = Depends(get_parameter_binder),
    ) -> BoundParams:
        sources: dict[str, Any] = {"query": request.query_params}
        if needs_form:
            sources["form"] = await request.form()
        return binder.bind_all(params, sources, binding_result)

    return dependency


def controller(cls: type[T]) -> Callable[..., T]:
    """
    Build a dependency that creates a per-request controller instance.

    The request's BindingResult is injected through the controller's
    BindingResult property or field, if it declares one.
    """

    def dependency(binding_result: BindingResult = Depends(get_binding_result)) -> T:
        return create_controller(cls, binding_result)

    return dependency
