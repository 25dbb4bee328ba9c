"""Content negotiation: maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

import json as json_module
from typing import Any

from roomgate.errors import ConfigurationError
from roomgate.http.response import Response

JSON_CONTENT_TYPE = "application/json"


def json_response(value: Any, status: int = 200) -> Response:
    """Serialize *value* as a JSON response."""
    return Response(
        body=json_module.dumps(value, separators=(",", ":")),
        status=status,
        content_type=JSON_CONTENT_TYPE,
    )


def negotiate(value: Any) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``           -> pass through
    2. ``None``               -> 204, empty body
    3. ``str``                -> 200, text/plain
    4. ``bytes``              -> 200, application/octet-stream
    5. ``dict`` / ``list`` / ``bool`` -> 200, application/json
    6. ``(value, int)``       -> negotiate value, override status
    """
    match value:
        case Response():
            return value
        case None:
            return Response(status=204)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list() | bool():
            return json_response(value)
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. Return a "
                "Response, str, bytes, dict, list, bool, None or (value, status)."
            )
            raise ConfigurationError(msg)
