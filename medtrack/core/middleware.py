import time
import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from medtrack.core.config import settings

# Requests to these paths are served without access logging.
QUIET_PATHS = frozenset({"/health"})


def _bind_request_context(request: Request) -> tuple[str, str]:
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    correlation_id = request.headers.get("X-Correlation-ID") or request_id

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        correlation_id=correlation_id,
        method=request.method,
        path=request.url.path,
        client_ip=request.client.host if request.client else None,
    )
    return request_id, correlation_id


class StructlogMiddleware(BaseHTTPMiddleware):
    """Bind per-request context and log how each request ended."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id, correlation_id = _bind_request_context(request)
        logger = structlog.get_logger()
        quiet = request.url.path in QUIET_PATHS

        if settings.ENVIRONMENT in ["local", "dev"] and not quiet:
            logger.info("request_started")

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed", duration=time.perf_counter() - started)
            raise

        if not quiet:
            log_method = logger.warning if response.status_code >= 500 else logger.info
            log_method(
                "request_finished",
                status_code=response.status_code,
                duration=time.perf_counter() - started,
            )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Correlation-ID"] = correlation_id
        return response
