"""Route definitions and match results."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:  ``/members``        (is_param=False)
    Param:   ``/{member_id}``    (is_param=True, param_name="member_id")
    Typed:   ``/{limit:int}``    (is_param=True, param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A compiled route: full pattern, handler, and the middleware in scope.

    ``middleware`` is the chain captured from the route's group at the
    moment the route was registered, outermost first. A ``fallback`` route
    answers unmatched paths below a mount point and yields to any real
    route registered for the same pattern.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    middleware: tuple[Callable[..., Any], ...] = ()
    name: str | None = None
    fallback: bool = False


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
