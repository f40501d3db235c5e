"""Request Log — one ApiLog row per HTTP request, outside the business transaction.

Invariants:
    - Every request (success, domain error, crash) produces at most one ApiLog row
    - Writing the row never changes the response: failures are logged and swallowed
    - The caller id comes from a stateless access-token decode; no DB lookup

Design Decisions:
    - Starlette BaseHTTPMiddleware: sees the final status of handled errors and
      the exception of unhandled ones
    - Own unit of work per row: a rolled-back business transaction still gets logged
"""

import logging
import time
from datetime import datetime, timezone
from uuid import UUID

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from propertyhub.config import get_settings
from propertyhub.models.api_log import ApiLog
from propertyhub.services.token_manager import TokenManager

logger = logging.getLogger(__name__)


def _caller_id(request: Request, tokens: TokenManager) -> UUID | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    verification = tokens.verify_access_token(token.strip())
    if not verification.valid:
        return None
    try:
        return UUID(verification.claims["subjectId"])
    except (KeyError, ValueError):
        return None


async def write_api_log(db_manager, entry: dict) -> bool:
    """Persist one ApiLog row; report failure instead of raising."""
    if db_manager is None:
        return False
    try:
        async with db_manager.unit_of_work() as db:
            db.add(ApiLog(**entry))
        return True
    except Exception as e:
        logger.warning(
            f"Failed to write API log: {e}",
            extra={"path": entry.get("endpoint")},
        )
        return False


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Times each request and records it to api_logs."""

    async def dispatch(self, request: Request, call_next):
        settings = getattr(request.app.state, "settings", None) or get_settings()
        started_at = datetime.now(timezone.utc)
        t0 = time.perf_counter()
        status_code = 500
        error_message = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            error_message = str(e)
            raise
        finally:
            duration_ms = int((time.perf_counter() - t0) * 1000)
            logger.info(
                f"{request.method} {request.url.path} {status_code}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                },
            )
            await write_api_log(
                getattr(request.app.state, "db", None),
                {
                    "user_id": _caller_id(request, TokenManager(settings)),
                    "http_method": request.method,
                    "endpoint": request.url.path,
                    "query_params": dict(request.query_params) or None,
                    "response_status": status_code,
                    "ip_address": request.client.host if request.client else None,
                    "user_agent": request.headers.get("user-agent"),
                    "request_timestamp": started_at,
                    "response_timestamp": datetime.now(timezone.utc),
                    "response_time_ms": duration_ms,
                    "error_message": error_message,
                    "environment": settings.environment,
                },
            )
