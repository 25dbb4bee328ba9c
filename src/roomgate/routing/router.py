"""Router abstraction and its route-group adapter.

``Router`` is the capability that route builders program against::

    def route(r: Router) -> None:
        r.use(require_admin)
        r.get("/", list_members)
        r.route("/{member_id}", member_routes)

``RouteGroup`` is the one concrete implementation. It records every
registration into a ``RouteTable`` together with the middleware chain in
scope at that moment, so scoping is decided at composition time and
dispatch is a single table lookup.

Scoping rules:

- ``group(fn)`` opens a scope at the same path prefix.
- ``route(prefix, fn)`` opens a scope below ``prefix``.
- ``use(mw)`` affects the current scope and scopes opened after it,
  never siblings or ancestors. Calling it after the scope already holds
  routes or sub-scopes raises ``ConfigurationError``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from roomgate._internal.types import Handler
from roomgate.errors import ConfigurationError, NotFound
from roomgate.http.request import Request
from roomgate.middleware.protocol import Middleware
from roomgate.routing.route import Route
from roomgate.routing.table import RouteTable, join_paths

ALL_METHODS: frozenset[str] = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
)


class Router(Protocol):
    """Path-based handler registration with scoped middleware."""

    def get(self, pattern: str, handler: Handler) -> None: ...

    def post(self, pattern: str, handler: Handler) -> None: ...

    def put(self, pattern: str, handler: Handler) -> None: ...

    def delete(self, pattern: str, handler: Handler) -> None: ...

    def use(self, *middleware: Middleware) -> None: ...

    def group(self, fn: Callable[[Router], None]) -> Router: ...

    def route(self, prefix: str, fn: Callable[[Router], None]) -> Router: ...


type RouteBuilder = Callable[[Router], None]


def _mount_not_found(request: Request) -> None:
    raise NotFound(f"No route matches {request.method} {request.path!r}")


class RouteGroup:
    """A scope of the route tree: a path prefix plus a middleware chain.

    Created by ``App`` for the root scope; nested scopes are created by
    ``group()``, ``route()`` and ``with_()``.
    """

    __slots__ = ("_guard", "_middleware", "_prefix", "_sealed", "_table")

    def __init__(
        self,
        table: RouteTable,
        *,
        prefix: str = "",
        middleware: tuple[Middleware, ...] = (),
        guard: Callable[[], None] | None = None,
    ) -> None:
        self._table = table
        self._prefix = prefix
        self._middleware = middleware
        self._guard = guard
        self._sealed = False

    @property
    def prefix(self) -> str:
        """The path prefix shared by every route in this scope."""
        return self._prefix or "/"

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        """Middleware applied to routes of this scope, outermost first."""
        return self._middleware

    # -- Handler registration --

    def handle(
        self,
        methods: frozenset[str] | set[str] | list[str],
        pattern: str,
        handler: Handler,
        *,
        name: str | None = None,
    ) -> None:
        """Register *handler* for *methods* at *pattern* below this scope's prefix."""
        self._check_open()
        self._sealed = True
        self._table.add(
            Route(
                path=join_paths(self._prefix, pattern),
                handler=handler,
                methods=frozenset(m.upper() for m in methods),
                middleware=self._middleware,
                name=name,
            )
        )

    def get(self, pattern: str, handler: Handler) -> None:
        self.handle(("GET",), pattern, handler)

    def post(self, pattern: str, handler: Handler) -> None:
        self.handle(("POST",), pattern, handler)

    def put(self, pattern: str, handler: Handler) -> None:
        self.handle(("PUT",), pattern, handler)

    def delete(self, pattern: str, handler: Handler) -> None:
        self.handle(("DELETE",), pattern, handler)

    # -- Middleware & scopes --

    def use(self, *middleware: Middleware) -> None:
        """Append *middleware* to this scope's chain."""
        self._check_open()
        if self._sealed:
            msg = (
                f"Middleware must be added to scope {self.prefix!r} before its "
                "routes and sub-scopes; it cannot apply retroactively."
            )
            raise ConfigurationError(msg)
        self._middleware = (*self._middleware, *middleware)

    def group(self, fn: RouteBuilder) -> RouteGroup:
        """Open a scope at this prefix and let *fn* populate it."""
        child = self._child(self._prefix)
        fn(child)
        return child

    def route(self, prefix: str, fn: RouteBuilder) -> RouteGroup:
        """Open a scope below *prefix* and let *fn* populate it.

        Unmatched paths at or below the mount point still pass through
        this scope's middleware before answering 404.
        """
        child = self._child(join_paths(self._prefix, prefix))
        fn(child)
        for pattern in ("", "{rest:path}"):
            self._table.add(
                Route(
                    path=join_paths(child._prefix, pattern),
                    handler=_mount_not_found,
                    methods=ALL_METHODS,
                    middleware=self._middleware,
                    fallback=True,
                )
            )
        return child

    def with_(self, *middleware: Middleware) -> RouteGroup:
        """Return an inline scope at this prefix with extra middleware::

        r.with_(require_admin).post("/screen", set_screen)
        """
        child = self._child(self._prefix)
        child.use(*middleware)
        return child

    # -- Internal --

    def _child(self, prefix: str) -> RouteGroup:
        self._check_open()
        self._sealed = True
        return RouteGroup(
            self._table,
            prefix=prefix,
            middleware=self._middleware,
            guard=self._guard,
        )

    def _check_open(self) -> None:
        if self._guard is not None:
            self._guard()

    def __repr__(self) -> str:
        return f"<RouteGroup {self.prefix!r} middleware={len(self._middleware)}>"
