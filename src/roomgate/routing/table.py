"""Compiled route table with trie-based path matching.

Routes are added while the app is being composed and the table is frozen
before the first request. Adding a second handler for an identical
(method, pattern) pair is a configuration error, reported immediately.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import NoReturn

from roomgate.errors import ConfigurationError, MethodNotAllowed, NotFound
from roomgate.routing.params import CONVERTERS
from roomgate.routing.route import PathSegment, Route, RouteMatch

logger = logging.getLogger("roomgate.routing")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/members"                -> [PathSegment("members")]
        "/members/{member_id}"    -> [..., PathSegment("{member_id}", is_param=True)]
        "/files/{rest:path}"      -> [..., PathSegment("{rest:path}", param_type="path")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = f"Route pattern {path!r} uses <param>; write parameters as {{param}}."
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            param_name, _, param_type = part[1:-1].partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown converter {param_type!r} in route pattern {path!r}."
                raise ConfigurationError(msg)
            if not param_name:
                msg = f"Unnamed parameter in route pattern {path!r}."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    if any(seg.param_type == "path" for seg in segments[:-1]):
        msg = f"A path converter must be the last segment of {path!r}."
        raise ConfigurationError(msg)
    return segments


def join_paths(prefix: str, pattern: str) -> str:
    """Join a mount prefix and a pattern into one normalized pattern.

    ``join_paths("/members", "/")`` is ``"/members"``;
    ``join_paths("", "")`` is ``"/"``.
    """
    parts = [p for p in (prefix.strip("/"), pattern.strip("/")) if p]
    return "/" + "/".join(parts)


class _TrieNode:
    """A node in the route trie. Mutable until the table is compiled."""

    __slots__ = ("catch_all", "children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        self.param_child: _ParamEdge | None = None
        self.catch_all: _CatchAllEdge | None = None
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge that consumes the rest of the path."""

    param_name: str
    routes_by_method: dict[str, Route] = field(default_factory=dict)


def _register(bucket: dict[str, Route], route: Route) -> None:
    if route.fallback:
        for method in route.methods:
            bucket.setdefault(method, route)
        return
    for method in route.methods:
        existing = bucket.get(method)
        if existing is not None and not existing.fallback:
            msg = (
                f"Duplicate route {method} {route.path!r}: "
                f"already handled by {getattr(existing.handler, '__qualname__', existing.handler)!r}."
            )
            raise ConfigurationError(msg)
    for method in route.methods:
        bucket[method] = route


class RouteTable:
    """Compiled route table with trie-based path matching.

    Usage::

        table = RouteTable()
        table.add(Route("/members", handler, frozenset({"GET"})))
        table.add(Route("/members/{member_id}", handler, frozenset({"GET"})))
        table.compile()
        match = table.match("GET", "/members/42")
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Raises ``ConfigurationError`` on a (method, pattern) collision."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            if seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(param_name=seg.param_name or "path")
                elif node.catch_all.param_name != seg.param_name and not route.fallback:
                    if any(not r.fallback for r in node.catch_all.routes_by_method.values()):
                        self._conflict(route, node.catch_all.param_name, seg)
                    node.catch_all.param_name = seg.param_name or "path"
                _register(node.catch_all.routes_by_method, route)
                logger.debug("route %s %s", sorted(route.methods), route.path)
                return

            if seg.is_param:
                if node.param_child is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        param_type=seg.param_type,
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                elif (node.param_child.param_name, node.param_child.param_type) != (
                    seg.param_name,
                    seg.param_type,
                ):
                    self._conflict(route, node.param_child.param_name, seg)
                node = node.param_child.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        _register(node.routes_by_method, route)
        logger.debug("route %s %s", sorted(route.methods), route.path)

    @staticmethod
    def _conflict(route: Route, existing_name: str, seg: PathSegment) -> NoReturn:
        msg = (
            f"Route {route.path!r} declares parameter {seg.value!r} where "
            f"another route already uses {{{existing_name}}} at the same position."
        )
        raise ConfigurationError(msg)

    @property
    def routes(self) -> list[Route]:
        """Every registered non-fallback route. Useful for introspection."""
        seen: set[int] = set()
        result: list[Route] = []

        def collect(bucket: dict[str, Route]) -> None:
            for route in bucket.values():
                if not route.fallback and id(route) not in seen:
                    seen.add(id(route))
                    result.append(route)

        stack = [self._root]
        while stack:
            node = stack.pop()
            collect(node.routes_by_method)
            if node.catch_all is not None:
                collect(node.catch_all.routes_by_method)
            if node.param_child is not None:
                stack.append(node.param_child.node)
            stack.extend(reversed(node.children.values()))
        return result

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against the table.

        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        Fallback routes answer only where the matched node holds no real route.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        found = self._match_node(self._root, parts, 0, {})
        if found is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes_by_method, params = found
        real = {m: r for m, r in routes_by_method.items() if not r.fallback}
        if real:
            routes_by_method = real
        if method in routes_by_method:
            return RouteMatch(route=routes_by_method[method], path_params=params)
        if method == "HEAD" and "GET" in routes_by_method:
            return RouteMatch(route=routes_by_method["GET"], path_params=params)
        raise MethodNotAllowed(allowed=frozenset(routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Route], dict[str, str]] | None:
        """Recursively match path parts: static first, then param, then catch-all."""
        if index == len(parts):
            if node.routes_by_method:
                return node.routes_by_method, params
            return None

        part = parts[index]

        if part in node.children:
            found = self._match_node(node.children[part], parts, index + 1, params)
            if found is not None:
                return found

        edge = node.param_child
        if edge is not None and edge.regex.match(part):
            found = self._match_node(
                edge.node, parts, index + 1, {**params, edge.param_name: part}
            )
            if found is not None:
                return found

        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return (
                node.catch_all.routes_by_method,
                {**params, node.catch_all.param_name: remaining},
            )

        return None
