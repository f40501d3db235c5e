"""Property Routes — listing lifecycle behind PROPERTY_* permissions.

Invariants:
    - Identity and permission are resolved by dependencies before any service call
    - Update bodies are dumped with exclude_unset so absent fields stay untouched
"""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from propertyhub.api.dependencies import get_emitter, require_permissions
from propertyhub.config import Settings, get_settings
from propertyhub.core.domain_types import ActorContext, PermissionCode
from propertyhub.core.repository_protocols import NotificationEmitter
from propertyhub.infrastructure.database import DatabaseSessionManager, get_db_manager
from propertyhub.schemas.base import ApiResponse, Pagination
from propertyhub.schemas.property import (
    AssignRequest, CompareRequest, PropertyCreate, PropertyDetail, PropertyList,
    PropertyUpdate, property_detail, property_summary,
)
from propertyhub.services import property_mutations, property_queries

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.post(
    "", response_model=ApiResponse[PropertyDetail],
    status_code=status.HTTP_201_CREATED,
)
async def create_property(
    body: PropertyCreate,
    actor: ActorContext = Depends(require_permissions(PermissionCode.PROPERTY_CREATE)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    settings: Settings = Depends(get_settings),
    emitter: NotificationEmitter | None = Depends(get_emitter),
):
    aggregate = await property_mutations.create_property(
        db_manager, actor, body.model_dump(), settings, emitter,
    )
    return ApiResponse(
        message="Property created successfully", data=property_detail(aggregate),
    )


@router.get("", response_model=ApiResponse[PropertyList])
async def list_properties(
    min_price: Decimal | None = Query(None, alias="minPrice"),
    max_price: Decimal | None = Query(None, alias="maxPrice"),
    property_types: str | None = Query(None, alias="propertyTypes"),
    min_rent: Decimal | None = Query(None, alias="minRent"),
    max_rent: Decimal | None = Query(None, alias="maxRent"),
    min_yield: Decimal | None = Query(None, alias="minYield"),
    max_yield: Decimal | None = Query(None, alias="maxYield"),
    min_tenure: float | None = Query(None, alias="minTenure"),
    max_tenure: float | None = Query(None, alias="maxTenure"),
    city: str | None = None,
    state: str | None = None,
    micro_market: str | None = Query(None, alias="microMarket"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: ActorContext = Depends(require_permissions(PermissionCode.PROPERTY_VIEW)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    result = await property_queries.list_properties(
        db_manager,
        property_queries.PropertyFilters(
            min_price=min_price, max_price=max_price,
            property_types=property_types,
            min_rent=min_rent, max_rent=max_rent,
            min_yield=min_yield, max_yield=max_yield,
            min_tenure=min_tenure, max_tenure=max_tenure,
            city=city, state=state, micro_market=micro_market,
            sort_by=sort_by, sort_order=sort_order, page=page, limit=limit,
        ),
    )
    return ApiResponse(
        message="Properties fetched successfully",
        data=PropertyList(
            properties=[property_summary(p) for p in result.items],
            pagination=Pagination(
                page=result.page, limit=result.limit,
                total=result.total, total_pages=result.total_pages,
            ),
        ),
    )


@router.post("/compare", response_model=ApiResponse[list[PropertyDetail]])
async def compare_properties(
    body: CompareRequest,
    actor: ActorContext = Depends(require_permissions(PermissionCode.PROPERTY_VIEW)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    aggregates = await property_queries.compare_properties(db_manager, body.property_ids)
    return ApiResponse(
        message="Properties fetched for comparison",
        data=[property_detail(a) for a in aggregates],
    )


@router.get("/{property_id}", response_model=ApiResponse[PropertyDetail])
async def get_property(
    property_id: UUID,
    actor: ActorContext = Depends(require_permissions(PermissionCode.PROPERTY_VIEW)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    aggregate = await property_queries.get_property_aggregate(db_manager, property_id)
    return ApiResponse(
        message="Property fetched successfully", data=property_detail(aggregate),
    )


@router.put("/{property_id}", response_model=ApiResponse[PropertyDetail])
async def update_property(
    property_id: UUID,
    body: PropertyUpdate,
    actor: ActorContext = Depends(require_permissions(PermissionCode.PROPERTY_UPDATE)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    emitter: NotificationEmitter | None = Depends(get_emitter),
):
    aggregate = await property_mutations.update_property(
        db_manager, actor, property_id,
        body.model_dump(exclude_unset=True), emitter,
    )
    return ApiResponse(
        message="Property updated successfully", data=property_detail(aggregate),
    )


@router.patch("/{property_id}/assign", response_model=ApiResponse[PropertyDetail])
async def assign_property(
    property_id: UUID,
    body: AssignRequest,
    actor: ActorContext = Depends(require_permissions(PermissionCode.PROPERTY_ASSIGN)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    emitter: NotificationEmitter | None = Depends(get_emitter),
):
    aggregate = await property_mutations.assign_property(
        db_manager, actor, property_id, body.sales_id, emitter,
    )
    return ApiResponse(
        message="Property assigned successfully", data=property_detail(aggregate),
    )


@router.delete("/{property_id}", response_model=ApiResponse[dict])
async def delete_property(
    property_id: UUID,
    actor: ActorContext = Depends(require_permissions(PermissionCode.PROPERTY_DELETE)),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    emitter: NotificationEmitter | None = Depends(get_emitter),
):
    await property_mutations.delete_property(db_manager, actor, property_id, emitter)
    return ApiResponse(
        message="Property deleted successfully",
        data={"propertyId": str(property_id)},
    )
