"""Request Dependencies — bearer identity, permission guards, shared handles.

Invariants:
    - Missing or malformed Authorization header → UnauthenticatedError (401)
    - Invalid/expired access token → UnauthenticatedError with expired flag
    - Token for an unknown or inactive user → UnauthenticatedError
    - Permission guard failures → ForbiddenError (403) listing missing codes

Design Decisions:
    - The resolved identity is returned as an ActorContext value and passed to
      services explicitly; nothing is stashed on request.state
    - Guards are built by a factory so a route declares its codes inline:
      Depends(require_permissions(PermissionCode.PROPERTY_CREATE))
"""

from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from propertyhub.config import Settings, get_settings
from propertyhub.core.domain_types import (
    ActorContext, AuthorizationMode, DeviceContext, PermissionCode,
)
from propertyhub.core.errors import UnauthenticatedError
from propertyhub.core.repository_protocols import NotificationEmitter
from propertyhub.infrastructure.database import DatabaseSessionManager, get_db_manager
from propertyhub.services import credential_store, permission_resolver
from propertyhub.services.token_manager import TokenManager

_bearer = HTTPBearer(auto_error=False)


def get_token_manager(settings: Settings = Depends(get_settings)) -> TokenManager:
    return TokenManager(settings)


def get_emitter(request: Request) -> NotificationEmitter | None:
    return getattr(request.app.state, "emitter", None)


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def device_context(request: Request, device_id: str | None = None) -> DeviceContext:
    return DeviceContext(
        device_id=device_id,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip(request),
    )


async def get_actor(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    tokens: TokenManager = Depends(get_token_manager),
) -> ActorContext:
    """Resolve the bearer token into an ActorContext with active roles."""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Authentication required")
    verification = tokens.verify_access_token(credentials.credentials)
    if not verification.valid:
        raise UnauthenticatedError(
            verification.reason or "Invalid access token",
            expired=verification.expired,
        )
    try:
        user_id = UUID(verification.claims["subjectId"])
    except (KeyError, ValueError):
        raise UnauthenticatedError("Invalid access token")
    async with db_manager.session() as db:
        actor = await credential_store.load_actor(
            db, user_id,
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    if actor is None:
        raise UnauthenticatedError("Account not found or inactive")
    return actor


def require_permissions(
    *codes: PermissionCode | str,
    mode: AuthorizationMode = AuthorizationMode.ANY,
):
    """Build a dependency that authorizes the actor for `codes` under `mode`."""
    async def guard(
        actor: ActorContext = Depends(get_actor),
        db_manager: DatabaseSessionManager = Depends(get_db_manager),
    ) -> ActorContext:
        async with db_manager.session() as db:
            await permission_resolver.require_permissions(db, actor, codes, mode)
        return actor
    return guard
