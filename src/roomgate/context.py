"""Request-scoped context via ContextVar.

``request_var`` holds the request currently being dispatched. The pipeline
sets it before middleware runs and resets it afterwards; the value is the
request as received, before any middleware derived a new one.

``ContextVar`` is task-local under asyncio, so concurrent requests never
see each other's values.
"""

from contextvars import ContextVar

from roomgate.http.request import Request

request_var: ContextVar[Request] = ContextVar("roomgate_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
