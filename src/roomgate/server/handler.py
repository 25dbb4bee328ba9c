"""ASGI handler: translates ASGI scope/messages to roomgate types.

The only component that touches raw ASGI directly. Converts the scope to a
Request, runs the application middleware, matches the route, runs the
route's scoped middleware (the authentication gate among them), calls the
handler and sends the Response back through ASGI send().
"""

import inspect
from collections.abc import Callable
from contextvars import Token
from typing import Any

from roomgate._internal.asgi import Receive, Scope, Send
from roomgate._internal.invoke import invoke
from roomgate.context import request_var
from roomgate.errors import HTTPError
from roomgate.http.request import Request
from roomgate.http.response import Response
from roomgate.middleware.protocol import Middleware, run_chain
from roomgate.routing.table import RouteTable
from roomgate.server.errors import handle_http_error, handle_internal_error
from roomgate.server.negotiation import negotiate
from roomgate.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    table: RouteTable,
    middleware: tuple[Middleware, ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)

    async def dispatch(req: Request) -> Response:
        match = table.match(req.method, req.path)
        route = match.route

        async def endpoint(routed: Request) -> Response:
            return await _invoke_handler(route.handler, routed)

        return await run_chain(route.middleware, req.with_path_params(match.path_params), endpoint)

    try:
        response = await run_chain(middleware, request, dispatch)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        request_var.reset(token)

    await send_response(response, send, head=request.method == "HEAD")


async def _invoke_handler(handler: Callable[..., Any], request: Request) -> Response:
    """Call the matched route handler and negotiate its return value."""
    result = await invoke(handler, **_build_handler_kwargs(handler, request))
    return negotiate(result)


def _build_handler_kwargs(handler: Callable[..., Any], request: Request) -> dict[str, Any]:
    """Inspect the handler signature and build kwargs.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name, converted to the annotated type)
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in request.path_params:
            value = request.path_params[name]
            if param.annotation in (int, float):
                try:
                    kwargs[name] = param.annotation(value)
                except ValueError:
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
