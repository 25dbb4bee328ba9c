"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. A middleware either returns ``await next(request)``
(possibly with a derived request and a decorated response) or
short-circuits by returning its own response or raising ``HTTPError``.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from roomgate.http.request import Request
from roomgate.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for roomgate middleware.

    Accepts both functions and callable objects::

        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")

        class RequireHeader:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...


async def run_chain(
    middleware: tuple[Middleware, ...],
    request: Request,
    endpoint: Next,
) -> Response:
    """Run *request* through *middleware* (outermost first) into *endpoint*."""
    handler = endpoint
    for mw in reversed(middleware):

        async def step(req: Request, _mw: Middleware = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = step
    return await handler(request)
