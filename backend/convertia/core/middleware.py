"""
Request middleware: correlation ids, access logging and last-resort error rendering
"""
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
import structlog

from convertia.core.exceptions import ConvertiaException

logger = structlog.get_logger()

CORRELATION_HEADER = "X-Correlation-ID"
# Edge-function style endpoints answer {"success": false, "error": ...}
FUNCTION_PATH_PREFIX = "/functions/"


def error_response(
    request: Request,
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    error_type: str = "InternalServerError",
) -> JSONResponse:
    if request.url.path.startswith(FUNCTION_PATH_PREFIX):
        content: Dict[str, Any] = {"success": False, "error": message}
        if details and "reason" in details:
            content["reason"] = details["reason"]
    else:
        content = {"error": {"message": message, "details": details or {}, "type": error_type}}
    return JSONResponse(status_code=status_code, content=content)


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Bind a correlation id to every log line of the request and echo it back"""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=elapsed_ms,
        )
        response.headers["X-Process-Time-Ms"] = str(elapsed_ms)
        return response


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Render errors that escaped the route-level handlers"""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except ConvertiaException as e:
            return error_response(request, e.status_code, e.message, e.details, e.__class__.__name__)
        except Exception as e:
            logger.exception("unhandled_exception", path=request.url.path, error=str(e))
            return error_response(request, 500, "Internal server error")
