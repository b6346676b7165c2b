"""Request timing middleware."""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class TimingMiddleware(BaseHTTPMiddleware):
    """Adds an X-Response-Time-Ms header and logs every request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        response.headers["X-Response-Time-Ms"] = str(duration_ms)
        logger.info(
            "request_completed",
            path=request.url.path,
            method=request.method,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        return response
