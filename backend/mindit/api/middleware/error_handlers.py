"""Exception handlers that render API failures as ``{error, message, detail}``."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...services.session import SessionLookupError
from ...services.supabase import SupabaseConfigError, SupabaseError

logger = logging.getLogger(__name__)

ENVELOPE_KEYS = ("error", "message", "detail")

# status -> (error code, fallback message)
DEFAULT_ERRORS: Dict[int, tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("validation_error", "Invalid request payload"),
    status.HTTP_401_UNAUTHORIZED: ("unauthorized", "Sign in required"),
    status.HTTP_403_FORBIDDEN: ("forbidden", "Forbidden"),
    status.HTTP_404_NOT_FOUND: ("not_found", "Resource not found"),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("method_not_allowed", "Method not allowed"),
    status.HTTP_500_INTERNAL_SERVER_ERROR: ("internal_error", "Internal server error"),
    status.HTTP_502_BAD_GATEWAY: ("upstream_error", "Backend request failed"),
    status.HTTP_503_SERVICE_UNAVAILABLE: ("not_configured", "Backend is not configured"),
}


def build_envelope(status_code: int, detail: Any = None) -> Dict[str, Any]:
    """
    Shape ``detail`` into the error envelope.

    A mapping may carry its own ``error``/``message``/``detail``; any other keys
    are folded into ``detail``. A plain string replaces the fallback message.
    """
    error, message = DEFAULT_ERRORS.get(
        status_code, DEFAULT_ERRORS[status.HTTP_500_INTERNAL_SERVER_ERROR]
    )
    extra: Optional[Any] = None

    if isinstance(detail, Mapping):
        error = detail.get("error", error)
        message = detail.get("message", message)
        extra = detail.get("detail")
        if extra is None:
            extra = {k: v for k, v in detail.items() if k not in ENVELOPE_KEYS} or None
    elif isinstance(detail, str) and detail:
        message = detail

    return {"error": error, "message": message, "detail": extra}


def error_response(status_code: int, detail: Any = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=build_envelope(status_code, detail))


def jsonable_errors(exc: RequestValidationError) -> list[Dict[str, Any]]:
    # ctx may hold the raised ValueError, which is not JSON serializable
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST, {"detail": {"errors": jsonable_errors(exc)}}
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(exc.status_code, exc.detail)


async def backend_exception_handler(request: Request, exc: SupabaseError) -> JSONResponse:
    logger.error(
        "Backend error: %s",
        exc.message,
        extra={"upstream_status": exc.status_code, "path": request.url.path},
    )
    return error_response(
        status.HTTP_502_BAD_GATEWAY,
        {"message": exc.message, "upstream_status": exc.status_code},
    )


async def backend_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unconfigured or unreachable backend."""
    logger.error("Backend unavailable: %s", exc, extra={"path": request.url.path})
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SupabaseError, backend_exception_handler)
    app.add_exception_handler(SupabaseConfigError, backend_unavailable_handler)
    app.add_exception_handler(SessionLookupError, backend_unavailable_handler)
    app.add_exception_handler(Exception, internal_exception_handler)


__all__ = [
    "build_envelope",
    "error_response",
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "backend_exception_handler",
    "backend_unavailable_handler",
    "internal_exception_handler",
]
