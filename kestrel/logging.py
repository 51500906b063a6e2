"""
Structured JSON logging.

Each request carries a request id (the caller's X-Request-ID when sent) that
is bound into every event logged while it is handled; one access event is
written when the request completes.
"""
import logging
import time
import uuid
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .config import settings


REQUEST_ID_HEADER = "X-Request-ID"
# Polled by load balancers and Prometheus; not worth an access line each
QUIET_PATHS = ("/metrics", "/api/health")

access_logger = structlog.get_logger("kestrel.access")


def _add_environment(logger, method_name, event_dict):
    event_dict.setdefault("env", settings.environment)
    return event_dict


def setup_logging(level: Optional[str] = None) -> None:
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.INFO))
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            _add_environment,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()
        status_code = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
        finally:
            if request.url.path not in QUIET_PATHS:
                access_logger.info(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status=status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 1),
                )
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
