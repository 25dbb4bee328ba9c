"""Routing: route groups over a compiled trie.

Route builders register against the ``Router`` protocol; ``RouteGroup``
records each registration with its scoped middleware into a
``RouteTable`` that is compiled when the app freezes.
"""

from roomgate.routing.route import Route, RouteMatch
from roomgate.routing.router import RouteBuilder, RouteGroup, Router
from roomgate.routing.table import RouteTable

__all__ = [
    "Route",
    "RouteBuilder",
    "RouteGroup",
    "RouteMatch",
    "RouteTable",
    "Router",
]
