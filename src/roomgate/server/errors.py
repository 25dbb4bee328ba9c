"""Error translation for roomgate requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or plain-text defaults. The internal
cause of an HTTPError is logged here and never reaches the client.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from roomgate.errors import HTTPError
from roomgate.http.request import Request
from roomgate.http.response import Response
from roomgate.server.negotiation import negotiate

logger = logging.getLogger("roomgate.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result
    return negotiate(result)


def _log_http_error(exc: HTTPError, request: Request) -> None:
    if exc.internal is not None:
        logger.info(
            "%d %s %s: %s",
            exc.status,
            request.method,
            request.path,
            exc.internal,
            exc_info=(type(exc.internal), exc.internal, exc.internal.__traceback__),
        )
    else:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Response:
    """Map an HTTPError to a Response using registered error handlers.

    Headers and cookies carried by the error are applied to whatever
    response is produced, so a cookie cleared on failure is always sent.
    """
    _log_http_error(exc, request)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the error's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
    else:
        response = Response(body=exc.detail or f"Error {exc.status}", status=exc.status)

    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response.with_cookies(exc.cookies)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        return (await call_error_handler(handler, request, exc)).with_status(500)

    if debug:
        return Response(body=f"Internal Server Error: {type(exc).__name__}: {exc}", status=500)
    return Response(body="Internal Server Error", status=500)
