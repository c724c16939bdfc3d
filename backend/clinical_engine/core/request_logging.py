"""
Request logging middleware.
Logs method, path, status and latency for engine endpoints. Bodies are never logged:
they carry patient measurements.
"""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Endpoints that compute on patient data - requests to these paths are logged
ENGINE_PATH_PREFIXES = (
    "/api/v1/weight",
    "/api/v1/risk",
    "/api/v1/wounds",
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Middleware that logs every call to an engine endpoint."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not any(path.startswith(prefix) for prefix in ENGINE_PATH_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client = request.client.host if request.client else None
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d in %.1f ms (client=%s)",
            request.method, path, response.status_code, elapsed_ms, client,
        )
        return response
