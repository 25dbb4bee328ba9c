"""The HTTP API composition root.

``ApiManager`` owns the capabilities, the authentication gate and the
registry of late-bound route trees, and builds the whole API tree onto
a ``Router``::

    api = ApiManager(sessions, members, desktop, capture)
    api.add_router("/plugins/chat", chat.route)

    app = App()
    app.mount(api.route)
"""

import inspect
import logging
from typing import Self

import anyio

from roomgate.api.members import MembersHandler
from roomgate.api.room import RoomHandler
from roomgate.api.session import SessionHandler
from roomgate.auth import set_session
from roomgate.config import AppConfig
from roomgate.errors import Forbidden, HTTPError, Unauthorized
from roomgate.http.request import Request
from roomgate.http.response import Response
from roomgate.metrics import AUTH_FAILURES, metrics_handler
from roomgate.middleware.protocol import Next
from roomgate.routing.router import RouteBuilder, Router
from roomgate.types import (
    CaptureManager,
    DesktopManager,
    MemberManager,
    Session,
    SessionLoginDisabledError,
    SessionManager,
)

logger = logging.getLogger("roomgate.api")


def health() -> Response:
    return Response(body="true")


class ApiManager:
    """Builds the API route tree and authenticates requests entering it.

    Route trees registered with ``add_router()`` are mounted inside the
    authenticated group when ``route()`` runs. After that the registry is
    closed and ``add_router()`` raises ``RuntimeError``.
    """

    __slots__ = (
        "_auth_timeout",
        "_built",
        "_metrics_path",
        "_routers",
        "_sessions",
        "members",
        "room",
        "session",
    )

    def __init__(
        self,
        sessions: SessionManager,
        members: MemberManager,
        desktop: DesktopManager,
        capture: CaptureManager,
        *,
        auth_timeout: float = 5.0,
        metrics_path: str = "/metrics",
    ) -> None:
        self._sessions = sessions
        self._auth_timeout = auth_timeout
        self._metrics_path = metrics_path
        self._routers: dict[str, RouteBuilder] = {}
        self._built = False

        self.session = SessionHandler(sessions, members)
        self.members = MembersHandler(members)
        self.room = RoomHandler(desktop, capture)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        sessions: SessionManager,
        members: MemberManager,
        desktop: DesktopManager,
        capture: CaptureManager,
    ) -> Self:
        """Create a manager using the gate timeout and metrics path of *config*."""
        return cls(
            sessions,
            members,
            desktop,
            capture,
            auth_timeout=config.auth_timeout,
            metrics_path=config.metrics_path,
        )

    # -- Registry --

    def add_router(self, path: str, builder: RouteBuilder) -> None:
        """Mount *builder* at *path* inside the authenticated group.

        A later call for the same path replaces the earlier builder.
        """
        if self._built:
            msg = (
                f"Cannot add router {path!r}: the API tree has already been built. "
                "Register extension routers before mounting the API."
            )
            raise RuntimeError(msg)
        self._routers[path] = builder

    # -- Composition --

    def route(self, r: Router) -> None:
        """Register the complete API tree on *r*."""
        if self._built:
            msg = "The API tree can only be built once per ApiManager."
            raise RuntimeError(msg)
        self._built = True

        r.post("/login", self.session.login)
        r.group(self._authenticated)
        r.get("/health", health)
        r.get(self._metrics_path, metrics_handler)

    def _authenticated(self, r: Router) -> None:
        r.use(self.gate)

        r.post("/logout", self.session.logout)
        r.get("/whoami", self.session.whoami)

        r.route("/members", self.members.route)
        r.route("/members_bulk", self.members.route_bulk)
        r.route("/room", self.room.route)

        for path, builder in self._routers.items():
            r.route(path, builder)

    # -- Authentication gate --

    async def authenticate(self, request: Request) -> Request:
        """Return *request* carrying its session, or raise a classified ``HTTPError``.

        Raises ``Forbidden`` when the session store rejects the session by
        policy and ``Unauthorized`` for every other failure, including a
        store that does not answer within the configured timeout.
        """
        try:
            with anyio.fail_after(self._auth_timeout):
                session = await self._lookup(request)
        except Exception as err:
            raise self._rejection(err, request) from err
        return set_session(request, session)

    async def _lookup(self, request: Request) -> Session:
        authenticate = self._sessions.authenticate
        if inspect.iscoroutinefunction(authenticate):
            return await authenticate(request)
        # Blocking stores run in a worker thread the timeout can abandon.
        return await anyio.to_thread.run_sync(authenticate, request, abandon_on_cancel=True)

    async def gate(self, request: Request, next: Next) -> Response:
        """Middleware form of ``authenticate``."""
        return await next(await self.authenticate(request))

    def _rejection(self, err: Exception, request: Request) -> HTTPError:
        error: HTTPError
        if isinstance(err, SessionLoginDisabledError):
            error = Forbidden("login is disabled for this session")
        else:
            error = Unauthorized().with_internal_err(err)

        if self._sessions.cookie_enabled():
            error = self._sessions.cookie_clear_token(error, request)

        AUTH_FAILURES.labels(str(error.status)).inc()
        logger.debug("gate rejected %s %s with %d", request.method, request.path, error.status)
        return error
