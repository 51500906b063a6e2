"""
Error taxonomy shared by services and routers.

Services raise these; the handlers registered by ``install_error_handlers``
turn them (and anything unexpected) into ``{"error": ..., "details": ...}``
JSON bodies.
"""
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError


logger = structlog.get_logger(__name__)


class KestrelError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(KestrelError):
    """Missing or malformed required input."""

    status_code = 400


class NotFoundError(KestrelError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(KestrelError):
    """A uniqueness or state constraint would be violated."""

    status_code = 409


class InternalError(KestrelError):
    """Storage or otherwise unexpected failure."""

    status_code = 500


def error_body(message: str, details: Optional[str] = None) -> dict:
    return {"error": message, "details": details}


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(KestrelError)
    async def _kestrel_error(request: Request, exc: KestrelError):
        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=exc.message, details=exc.details)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body("Invalid request", _describe_validation(exc)),
        )

    @app.exception_handler(IntegrityError)
    async def _integrity(request: Request, exc: IntegrityError):
        logger.warning("integrity_error", path=request.url.path, error=str(exc.orig))
        return JSONResponse(
            status_code=409,
            content=error_body("Conflicting record", str(exc.orig)),
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content=error_body("Internal server error", str(exc)))
