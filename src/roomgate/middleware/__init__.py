"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Application-wide middleware is added with ``App.add_middleware``; scoped
middleware is attached to a route group with ``RouteGroup.use``.
"""

from roomgate.middleware.protocol import Middleware, Next, run_chain

__all__ = [
    "Middleware",
    "Next",
    "run_chain",
]
