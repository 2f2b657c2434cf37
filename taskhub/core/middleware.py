"""HTTP middleware."""
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from taskhub.core.logging import get_logger, request_id_var

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger("taskhub.access")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, echo it back and log one line per request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"{request.method} {request.url.path} failed",
                extra={"path": request.url.path, "status_code": 500,
                       "duration_ms": round((time.perf_counter() - start) * 1000, 2)},
            )
            raise
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={"request_id": request_id, "path": request.url.path, "status_code": response.status_code,
                   "duration_ms": round((time.perf_counter() - start) * 1000, 2)},
        )
        return response
