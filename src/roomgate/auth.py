"""Authenticated request context and profile guards.

The authentication gate stores the session handle in the request's
context with ``set_session``; handlers read it back with ``get_session``.
Guards are ordinary middleware meant to be installed inside the gated
group::

    def route(r: Router) -> None:
        r.use(admins_only)
        r.get("/", list_members)
"""

from roomgate.errors import Forbidden
from roomgate.http.request import Request
from roomgate.http.response import Response
from roomgate.middleware.protocol import Next
from roomgate.types import Session

SESSION_KEY = "roomgate.session"


def set_session(request: Request, session: Session) -> Request:
    """Return a request derived from *request* that carries *session*."""
    return request.with_context(SESSION_KEY, session)


def get_session(request: Request) -> Session:
    """Return the session attached by the authentication gate.

    Raises ``LookupError`` when the request never passed through the gate.
    """
    try:
        return request.context[SESSION_KEY]
    except KeyError:
        msg = "No session on this request. Is the route inside the authenticated group?"
        raise LookupError(msg) from None


async def admins_only(request: Request, next: Next) -> Response:
    """Reject members without the admin flag."""
    if not get_session(request).profile.is_admin:
        raise Forbidden("session is not admin")
    return await next(request)


async def clipboard_access_only(request: Request, next: Next) -> Response:
    """Reject members that may not read or write the clipboard."""
    if not get_session(request).profile.can_access_clipboard:
        raise Forbidden("session cannot access clipboard")
    return await next(request)
