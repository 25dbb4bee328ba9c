"""Prometheus exposition and request counters.

Collectors are registered on ``prometheus_client``'s default registry, so
anything else the process instruments shows up on the same endpoint.
"""

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, generate_latest

from roomgate.errors import HTTPError
from roomgate.http.request import Request
from roomgate.http.response import Response
from roomgate.middleware.protocol import Next

REQUESTS = Counter(
    "roomgate_http_requests_total",
    "HTTP requests handled, by method and status.",
    ["method", "status"],
)

AUTH_FAILURES = Counter(
    "roomgate_auth_failures_total",
    "Requests rejected by the authentication gate, by status.",
    ["status"],
)


async def metrics_handler() -> Response:
    """Render the default registry in the Prometheus text format."""
    return Response(body=generate_latest(REGISTRY), content_type=CONTENT_TYPE_LATEST)


async def count_requests(request: Request, next: Next) -> Response:
    """Application middleware counting every request by final status."""
    try:
        response = await next(request)
    except HTTPError as exc:
        REQUESTS.labels(request.method, str(exc.status)).inc()
        raise
    except Exception:
        REQUESTS.labels(request.method, "500").inc()
        raise
    REQUESTS.labels(request.method, str(response.status)).inc()
    return response
