"""Roomgate exception hierarchy.

Shared across the route table, the router groups, the authentication gate
and the ASGI pipeline so every module raises and catches the same types.

``HTTPError`` is a classified error value: a public status and message, plus
an optional internal cause that is logged but never sent to the client.
"""

from dataclasses import dataclass, field, replace
from typing import Self

from roomgate.http.cookies import SetCookie


class RoomgateError(Exception):
    """Base for all roomgate-specific errors."""


class ConfigurationError(RoomgateError):
    """Raised when the route tree or app configuration is invalid.

    Duplicate routes, middleware added after routes, malformed patterns.
    Surfaces at startup, never at request time.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(RoomgateError):
    """An error that maps directly to an HTTP status code.

    Raised by the route table, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.

    ``detail`` is the only text the client sees. ``internal`` keeps the
    underlying cause for logs.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()
    internal: BaseException | None = field(default=None, compare=False)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)

    # -- Chainable transformations --

    def with_internal_err(self, err: BaseException) -> Self:
        """Return a copy carrying *err* as non-user-facing diagnostic detail."""
        return replace(self, internal=err)

    def with_header(self, name: str, value: str) -> Self:
        """Return a copy with an additional response header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str = "lax",
    ) -> Self:
        """Return a copy that sets a cookie on the error response."""
        cookie = SetCookie(
            name=name,
            value=value,
            max_age=max_age,
            path=path,
            domain=domain,
            secure=secure,
            httponly=httponly,
            samesite=samesite,
        )
        return replace(self, cookies=(*self.cookies, cookie))

    def without_cookie(self, name: str, path: str = "/") -> Self:
        """Return a copy that deletes a cookie (Max-Age=0) on the error response."""
        cookie = SetCookie(name=name, value="", max_age=0, path=path)
        return replace(self, cookies=(*self.cookies, cookie))


@dataclass(frozen=True, slots=True)
class BadRequest(HTTPError):  # noqa: N818
    """400: the request body or parameters are malformed."""

    status: int = field(default=400, kw_only=True)
    detail: str = "Bad Request"


@dataclass(frozen=True, slots=True)
class Unauthorized(HTTPError):  # noqa: N818
    """401: authentication failed.

    The client only ever sees the generic detail; attach the real cause
    with ``with_internal_err()``.
    """

    status: int = field(default=401, kw_only=True)
    detail: str = "Unauthorized"


@dataclass(frozen=True, slots=True)
class Forbidden(HTTPError):  # noqa: N818
    """403: the request is authenticated or identified but rejected by policy."""

    status: int = field(default=403, kw_only=True)
    detail: str = "Forbidden"


@dataclass(frozen=True, slots=True)
class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    status: int = field(default=404, kw_only=True)
    detail: str = "Not Found"


@dataclass(frozen=True, slots=True)
class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods and embeds
    the allowed methods in the detail string for developer visibility.
    """

    status: int = field(default=405, kw_only=True)
    allowed: frozenset[str] = field(default=frozenset(), kw_only=True)

    def __post_init__(self) -> None:
        allow_value = ", ".join(sorted(self.allowed))
        if not self.detail:
            object.__setattr__(
                self, "detail", f"Method not allowed. Allowed methods: {allow_value}"
            )
        if not any(name == "Allow" for name, _ in self.headers):
            object.__setattr__(self, "headers", (("Allow", allow_value), *self.headers))
