import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from bookverse_api.context import request_id_var

logger = logging.getLogger("bookverse_api.request")

REQUEST_ID_HEADER = "X-Request-Id"


def _new_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:12]}"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tags every log line of a request with its id and logs one summary line per request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or _new_request_id()
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        request_fields = {
            "method": request.method,
            "path": request.url.path,
            "user_id": request.headers.get("X-User-Id"),
        }

        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("http_request_failed", extra=request_fields)
                raise

            logger.info(
                "http_request_complete",
                extra={
                    **request_fields,
                    "status_code": response.status_code,
                    "latency_ms": round(max((time.perf_counter() - started) * 1000, 0.0), 3),
                },
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)
