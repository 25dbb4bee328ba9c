"""Shared type aliases used across roomgate modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: receives the request and/or path params by name
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
