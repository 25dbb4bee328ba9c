"""Request body helpers shared by the API handlers."""

import json
from typing import Any

from roomgate.errors import BadRequest
from roomgate.http.request import Request


async def read_object(request: Request) -> dict[str, Any]:
    """Parse the body as a JSON object or raise ``BadRequest``."""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise BadRequest("invalid JSON body") from exc
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


def require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise BadRequest(f"{key!r} must be a string")
    return value


def require_int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass
    if not isinstance(value, int) or isinstance(value, bool):
        raise BadRequest(f"{key!r} must be an integer")
    return value


def require_str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise BadRequest(f"{key!r} must be a list of strings")
    return value
