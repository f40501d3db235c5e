"""Error Handlers — map every failure to the {success: false, error: {...}} envelope.

Invariants:
    - PropertyHubError → its own http_status and to_response() body
    - UnauthenticatedError carries a Bearer challenge; expired tokens say so
    - RequestValidationError → 400 VALIDATION_ERROR, one detail per field,
      field paths in the client's camelCase without the body/query/path prefix
    - Framework HTTP errors (unknown route, wrong method) keep their status
      but use the same envelope
    - Anything else → 500 INTERNAL_ERROR, never leaks internal details

Design Decisions:
    - 4xx logged at WARNING, 5xx at ERROR with traceback
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from propertyhub.core.errors import (
    ErrorSeverity, InternalError, PropertyHubError, UnauthenticatedError,
)

logger = logging.getLogger(__name__)

_LOCATIONS = {"body", "query", "path", "header", "cookie"}
_HTTP_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PropertyHubError, _domain_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unhandled_error)


def _envelope(code: str, message: str, category: str, severity: ErrorSeverity, **extra) -> dict:
    error = {
        "code": code,
        "message": message,
        "category": category,
        "severity": severity.value,
    }
    error.update(extra)
    return {"success": False, "error": error}


async def _domain_error(request: Request, exc: PropertyHubError) -> JSONResponse:
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level,
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    headers = None
    if isinstance(exc, UnauthenticatedError):
        challenge = 'Bearer error="invalid_token"' if exc.expired else "Bearer"
        headers = {"WWW-Authenticate": challenge}
    return JSONResponse(
        status_code=exc.http_status, content=exc.to_response(), headers=headers,
    )


def _field_path(loc: tuple) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATIONS:
        parts = parts[1:]
    return ".".join(_camel(p) for p in parts) or "request"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(word.title() for word in rest)


async def _request_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {"field": _field_path(e["loc"]), "message": e["msg"], "type": e["type"]}
        for e in exc.errors()
    ]
    logger.warning(
        f"Invalid request on {request.url.path}: "
        f"{', '.join(d['field'] for d in details)}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data", "validation",
            ErrorSeverity.ERROR, details=details,
        ),
    )


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(
            code, str(exc.detail), "http", ErrorSeverity.WARNING,
        ),
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=InternalError("An unexpected error occurred").to_response(),
    )
