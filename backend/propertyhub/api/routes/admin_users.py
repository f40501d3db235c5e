"""Admin User Routes — staff account CRUD and Super Admin bootstrap.

Invariants:
    - Each route is guarded by exactly one USER_* permission
    - /super-admin is unauthenticated but requires the configured secret
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from propertyhub.api.dependencies import (
    client_ip, get_token_manager, require_permissions,
)
from propertyhub.config import Settings, get_settings
from propertyhub.core.domain_types import ActorContext, PermissionCode
from propertyhub.infrastructure.database import DatabaseSessionManager, get_db_manager
from propertyhub.schemas.base import ApiResponse, Pagination
from propertyhub.schemas.user import (
    AdminUserCreate, AdminUserUpdate, SuperAdminCreate, UserList, UserOut,
    user_out,
)
from propertyhub.services import user_admin
from propertyhub.services.token_manager import TokenManager

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.post(
    "/users", response_model=ApiResponse[UserOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: AdminUserCreate,
    actor: ActorContext = Depends(require_permissions(PermissionCode.USER_CREATE)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    result = await user_admin.create_user(db_manager, actor, body.model_dump())
    return ApiResponse(
        message="User created successfully",
        data=user_out(result.user, result.role_name),
    )


@router.get("/users", response_model=ApiResponse[UserList])
async def list_users(
    role_name: str | None = Query(None, alias="roleName"),
    is_active: bool | None = Query(None, alias="isActive"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: ActorContext = Depends(require_permissions(PermissionCode.USER_VIEW)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    result = await user_admin.list_users(
        db_manager, role_name=role_name, is_active=is_active,
        page=page, limit=limit,
    )
    return ApiResponse(
        message="Users fetched successfully",
        data=UserList(
            users=[user_out(i.user, i.role_name) for i in result.items],
            pagination=Pagination(
                page=result.page, limit=result.limit,
                total=result.total, total_pages=result.total_pages,
            ),
        ),
    )


@router.put("/users/{user_id}", response_model=ApiResponse[UserOut])
async def update_user(
    user_id: UUID,
    body: AdminUserUpdate,
    actor: ActorContext = Depends(require_permissions(PermissionCode.USER_UPDATE)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    tokens: TokenManager = Depends(get_token_manager),
):
    result = await user_admin.update_user(
        db_manager, actor, user_id, body.model_dump(exclude_unset=True), tokens,
    )
    return ApiResponse(
        message="User updated successfully",
        data=user_out(result.user, result.role_name),
    )


@router.delete("/users/{user_id}", response_model=ApiResponse[dict])
async def delete_user(
    user_id: UUID,
    actor: ActorContext = Depends(require_permissions(PermissionCode.USER_DELETE)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    tokens: TokenManager = Depends(get_token_manager),
):
    revoked = await user_admin.delete_user(db_manager, actor, tokens, user_id)
    return ApiResponse(
        message="User deactivated successfully",
        data={"userId": str(user_id), "revokedTokens": revoked},
    )


@router.post(
    "/super-admin", response_model=ApiResponse[UserOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_super_admin(
    body: SuperAdminCreate,
    request: Request,
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    settings: Settings = Depends(get_settings),
):
    result = await user_admin.create_super_admin(
        db_manager, settings, body.model_dump(), body.secret_key,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ApiResponse(
        message="Super Admin created successfully",
        data=user_out(result.user, result.role_name),
    )
