"""Roomgate: the HTTP API layer of a shared remote-desktop room.

Route trees are built against a small ``Router`` protocol, an
authentication gate guards everything but login, health and metrics, and
extensions mount their own trees through a registry.

Basic usage::

    from roomgate import ApiManager, App

    api = ApiManager(sessions, members, desktop, capture)
    api.add_router("/plugins/chat", chat_routes)

    app = App()
    app.mount(api.route)
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "ApiManager",
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "Forbidden",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "RoomgateError",
    "RouteBuilder",
    "RouteGroup",
    "Router",
    "Unauthorized",
    "get_request",
    "get_session",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roomgate`` fast while providing a clean top-level API.
    """
    if name == "App":
        from roomgate.app import App

        return App

    if name == "ApiManager":
        from roomgate.api.manager import ApiManager

        return ApiManager

    if name == "AppConfig":
        from roomgate.config import AppConfig

        return AppConfig

    if name == "Request":
        from roomgate.http.request import Request

        return Request

    if name == "Response":
        from roomgate.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from roomgate.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("RouteBuilder", "RouteGroup", "Router"):
        from roomgate.routing import router as _router

        return getattr(_router, name)

    if name == "get_request":
        from roomgate.context import get_request

        return get_request

    if name == "get_session":
        from roomgate.auth import get_session

        return get_session

    if name in (
        "BadRequest",
        "ConfigurationError",
        "Forbidden",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "RoomgateError",
        "Unauthorized",
    ):
        from roomgate import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
