"""Middleware: trace_id + access log for /api/v1 requests."""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from apps.backend.middleware.trace_id import ensure_trace_id

logger = logging.getLogger("uvicorn.error")

TRACE_HEADER = "X-Trace-Id"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        trace_id = ensure_trace_id(request.scope)
        request.state.trace_id = trace_id
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers[TRACE_HEADER] = trace_id
        if request.url.path.startswith("/api/"):
            # Query values and bodies may carry tokens; log keys only.
            logger.info(
                "http_request trace_id=%s method=%s path=%s query_keys=%s status=%s latency_ms=%s",
                trace_id,
                request.method,
                request.url.path,
                ",".join(request.query_params.keys()),
                response.status_code,
                latency_ms,
            )
        return response
