import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from .logging_utils import log_api_request
from .metrics import record_http_request


async def log_requests_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Log every HTTP request with timing information and record its metrics.

    Args:
        request: FastAPI request object
        call_next: Next middleware/route handler in the chain

    Returns:
        Response from the route handler
    """
    start_time = time.perf_counter()

    response = await call_next(request)

    elapsed = time.perf_counter() - start_time

    # Route template, so /api/cars/1 and /api/cars/2 share a label
    route = getattr(request.scope.get("route"), "path", request.url.path)

    log_api_request(
        request=request,
        response_status=response.status_code,
        process_time_ms=elapsed * 1000,
        route=route,
    )
    record_http_request(request.method, route, response.status_code, elapsed)

    return response
