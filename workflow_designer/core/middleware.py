"""Middleware for request tagging, error responses and slow-request warnings."""

import time
import uuid
from datetime import datetime
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .exceptions import WorkflowEngineError, create_error_response
from .logging import get_logger, reset_logging_context, set_logging_context


logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _internal_error_body(error: Exception, request_id: str) -> dict:
    return {
        "error": "InternalServerError",
        "message": "An unexpected error occurred",
        "details": {
            "error_type": type(error).__name__,
            "timestamp": datetime.utcnow().isoformat()
        },
        "request_id": request_id
    }


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Tags requests with an ID and turns escaped exceptions into JSON responses.

    The request ID and route are bound to the logging context for the
    duration of the request only; the previous context is restored on exit.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        route = f"{request.method} {request.url.path}"
        token = set_logging_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown"
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except WorkflowEngineError as e:
            logger.warning(
                f"{route} failed with {e.error_code} after {time.perf_counter() - started:.3f}s",
                extra={"extra_fields": {"error_details": e.to_dict()}}
            )
            response = JSONResponse(status_code=e.status_code, content=create_error_response(e))
        except Exception as e:
            logger.error(f"{route} raised {type(e).__name__}: {e}", exc_info=True)
            response = JSONResponse(status_code=500, content=_internal_error_body(e, request_id))
        else:
            logger.info(f"{route} -> {response.status_code} in {time.perf_counter() - started:.3f}s")
        finally:
            reset_logging_context(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """Adds X-Response-Time and warns about requests above a threshold."""

    def __init__(self, app, slow_request_threshold: float = 5.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - started

        if duration > self.slow_request_threshold:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} took {duration:.3f}s "
                f"(threshold {self.slow_request_threshold}s)"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response
