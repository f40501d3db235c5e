"""Catalog Routes — reference data for listing forms (amenities, caretakers)."""

from fastapi import APIRouter, Depends

from propertyhub.api.dependencies import get_actor
from propertyhub.core.domain_types import ActorContext
from propertyhub.infrastructure.database import DatabaseSessionManager, get_db_manager
from propertyhub.schemas.base import ApiResponse
from propertyhub.schemas.property import AmenityOut, CaretakerOut
from propertyhub.services import property_queries

router = APIRouter(prefix="/api/v1/catalog", tags=["catalog"])


@router.get("/amenities", response_model=ApiResponse[list[AmenityOut]])
async def list_amenities(
    actor: ActorContext = Depends(get_actor),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    amenities = await property_queries.list_amenities(db_manager)
    return ApiResponse(
        message="Amenities fetched successfully",
        data=[AmenityOut.model_validate(a.to_dict()) for a in amenities],
    )


@router.get("/caretakers", response_model=ApiResponse[list[CaretakerOut]])
async def list_caretakers(
    actor: ActorContext = Depends(get_actor),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    caretakers = await property_queries.list_caretakers(db_manager)
    return ApiResponse(
        message="Caretakers fetched successfully",
        data=[CaretakerOut.model_validate(c.to_dict()) for c in caretakers],
    )
