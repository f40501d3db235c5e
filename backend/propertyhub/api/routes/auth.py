"""Auth Routes — signup, login, token refresh, logout.

Invariants:
    - Only /logout-all requires a bearer token; the rest authenticate by OTP
      or by the refresh token in the body
"""

from fastapi import APIRouter, Depends, Request, status

from propertyhub.api.dependencies import device_context, get_actor, get_token_manager
from propertyhub.config import Settings, get_settings
from propertyhub.core.domain_types import ActorContext
from propertyhub.infrastructure.database import DatabaseSessionManager, get_db_manager
from propertyhub.schemas.auth import (
    AccessTokenOut, AuthTokensOut, LoginRequest, RefreshRequest, RevokedOut,
    SignupRequest,
)
from propertyhub.schemas.base import ApiResponse
from propertyhub.services import auth_flows
from propertyhub.services.token_manager import TokenManager

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _tokens_out(result: auth_flows.AuthTokens) -> AuthTokensOut:
    return AuthTokensOut(
        user_id=result.user_id, role=result.role,
        access_token=result.access_token, refresh_token=result.refresh_token,
    )


@router.post(
    "/signup", response_model=ApiResponse[AuthTokensOut],
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    body: SignupRequest,
    request: Request,
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    tokens: TokenManager = Depends(get_token_manager),
    settings: Settings = Depends(get_settings),
):
    result = await auth_flows.signup(
        db_manager, tokens, settings,
        body.model_dump(), device_context(request, body.device_id),
    )
    return ApiResponse(message="User created successfully", data=_tokens_out(result))


@router.post("/login", response_model=ApiResponse[AuthTokensOut])
async def login(
    body: LoginRequest,
    request: Request,
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    tokens: TokenManager = Depends(get_token_manager),
    settings: Settings = Depends(get_settings),
):
    result = await auth_flows.login(
        db_manager, tokens, settings,
        body.model_dump(), device_context(request, body.device_id),
    )
    return ApiResponse(message="Login successful", data=_tokens_out(result))


@router.post("/refresh", response_model=ApiResponse[AccessTokenOut])
async def refresh(
    body: RefreshRequest,
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    tokens: TokenManager = Depends(get_token_manager),
):
    result = await auth_flows.refresh(db_manager, tokens, body.refresh_token)
    return ApiResponse(
        message="Access token refreshed",
        data=AccessTokenOut(
            user_id=result.user_id, role=result.role,
            access_token=result.access_token,
        ),
    )


@router.post("/logout", response_model=ApiResponse[RevokedOut])
async def logout(
    body: RefreshRequest,
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    tokens: TokenManager = Depends(get_token_manager),
):
    revoked = await auth_flows.logout(db_manager, tokens, body.refresh_token)
    return ApiResponse(message="Logged out", data=RevokedOut(revoked=revoked))


@router.post("/logout-all", response_model=ApiResponse[RevokedOut])
async def logout_all(
    actor: ActorContext = Depends(get_actor),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    tokens: TokenManager = Depends(get_token_manager),
):
    revoked = await auth_flows.logout_all(db_manager, tokens, actor)
    return ApiResponse(
        message="Logged out from all devices", data=RevokedOut(revoked=revoked),
    )
