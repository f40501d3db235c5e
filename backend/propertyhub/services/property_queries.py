"""Property Queries — read side of the Property aggregate.

Invariants:
    - Only active properties are visible (is_active=True)
    - An aggregate read returns the root plus every child collection, loaded by
      explicit queries (no lazy relationship traversal)
    - Sorting accepts whitelisted columns only; anything else falls back to created_at
    - compare_properties keeps the caller's id order and skips ids it cannot find

Design Decisions:
    - Read paths use db_manager.session() (no transaction), mutations use unit_of_work()
    - Location filters: "A,B" is an exact-match set, a single value is a
      case-insensitive substring match
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.errors import ResourceNotFoundError, ValidationError
from propertyhub.core.property_rules import tenure_cutoff
from propertyhub.infrastructure.database import DatabaseSessionManager
from propertyhub.models.amenity import Amenity
from propertyhub.models.caretaker import Caretaker
from propertyhub.models.property import Property
from propertyhub.models.property_amenity import PropertyAmenity
from propertyhub.models.property_certification import PropertyCertification
from propertyhub.models.property_connectivity import PropertyConnectivity
from propertyhub.models.property_media import PropertyMedia

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "createdAt": Property.created_at,
    "sellingPrice": Property.selling_price,
    "annualGrossRent": Property.annual_gross_rent,
    "grossRentalYield": Property.gross_rental_yield,
    "netRentalYield": Property.net_rental_yield,
    "carpetArea": Property.carpet_area,
    "leaseEndDate": Property.lease_end_date,
    "city": Property.city,
}
MAX_PAGE_SIZE = 100


@dataclass
class PropertyAggregate:
    """Root row plus child collections, as committed."""
    root: Property
    amenities: list[Amenity] = field(default_factory=list)
    media: list[PropertyMedia] = field(default_factory=list)
    certifications: list[PropertyCertification] = field(default_factory=list)
    connectivity: list[PropertyConnectivity] = field(default_factory=list)
    caretaker: Caretaker | None = None

    @property
    def amenity_ids(self) -> list[int]:
        return [a.amenity_id for a in self.amenities]


@dataclass
class PropertyFilters:
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    property_types: str | None = None
    min_rent: Decimal | None = None
    max_rent: Decimal | None = None
    min_yield: Decimal | None = None
    max_yield: Decimal | None = None
    min_tenure: float | None = None
    max_tenure: float | None = None
    city: str | None = None
    state: str | None = None
    micro_market: str | None = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    page: int = 1
    limit: int = 10


@dataclass
class Page:
    items: list[Property]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


# ─── Aggregate ──────────────────────────────────────────────────

async def amenity_ids_for(db: AsyncSession, property_id: UUID) -> list[int]:
    rows = (await db.execute(
        select(PropertyAmenity.amenity_id)
        .where(PropertyAmenity.property_id == property_id)
        .order_by(PropertyAmenity.amenity_id)
    )).scalars().all()
    return list(rows)


async def load_aggregate(
    db: AsyncSession, property_id: UUID, include_inactive: bool = False,
) -> PropertyAggregate | None:
    query = select(Property).where(Property.property_id == property_id)
    if not include_inactive:
        query = query.where(Property.is_active.is_(True))
    prop = (await db.execute(query)).scalar_one_or_none()
    if prop is None:
        return None

    amenities = (await db.execute(
        select(Amenity)
        .join(PropertyAmenity, PropertyAmenity.amenity_id == Amenity.amenity_id)
        .where(PropertyAmenity.property_id == property_id)
        .order_by(Amenity.amenity_id)
    )).scalars().all()
    media = (await db.execute(
        select(PropertyMedia)
        .where(PropertyMedia.property_id == property_id)
        .order_by(PropertyMedia.media_id)
    )).scalars().all()
    certifications = (await db.execute(
        select(PropertyCertification)
        .where(PropertyCertification.property_id == property_id)
        .order_by(PropertyCertification.certification_type)
    )).scalars().all()
    connectivity = (await db.execute(
        select(PropertyConnectivity)
        .where(PropertyConnectivity.property_id == property_id)
        .order_by(PropertyConnectivity.connectivity_id)
    )).scalars().all()
    caretaker = (
        await db.get(Caretaker, prop.caretaker_id)
        if prop.caretaker_id is not None else None
    )
    return PropertyAggregate(
        root=prop,
        amenities=list(amenities),
        media=list(media),
        certifications=list(certifications),
        connectivity=list(connectivity),
        caretaker=caretaker,
    )


async def get_property_aggregate(
    db_manager: DatabaseSessionManager, property_id: UUID,
) -> PropertyAggregate:
    async with db_manager.session() as db:
        aggregate = await load_aggregate(db, property_id)
    if aggregate is None:
        raise ResourceNotFoundError("Property", str(property_id))
    return aggregate


# ─── Listing ────────────────────────────────────────────────────

def _location_clause(column, value: str):
    parts = [p.strip() for p in value.split(",") if p.strip()]
    if len(parts) > 1:
        return column.in_(parts)
    return column.ilike(f"%{parts[0]}%") if parts else None


def _filter_clauses(filters: PropertyFilters) -> list:
    clauses = [Property.is_active.is_(True)]
    if filters.min_price is not None:
        clauses.append(Property.selling_price >= filters.min_price)
    if filters.max_price is not None:
        clauses.append(Property.selling_price <= filters.max_price)
    if filters.property_types:
        types = [t.strip() for t in filters.property_types.split(",") if t.strip()]
        if types:
            clauses.append(Property.property_type.in_(types))
    if filters.min_rent is not None:
        clauses.append(Property.annual_gross_rent >= filters.min_rent)
    if filters.max_rent is not None:
        clauses.append(Property.annual_gross_rent <= filters.max_rent)
    if filters.min_yield is not None:
        clauses.append(Property.gross_rental_yield >= filters.min_yield)
    if filters.max_yield is not None:
        clauses.append(Property.gross_rental_yield <= filters.max_yield)
    if filters.min_tenure is not None:
        clauses.append(Property.lease_end_date >= tenure_cutoff(filters.min_tenure))
    if filters.max_tenure is not None:
        clauses.append(Property.lease_end_date <= tenure_cutoff(filters.max_tenure))
    for column, value in (
        (Property.city, filters.city),
        (Property.state, filters.state),
        (Property.micro_market, filters.micro_market),
    ):
        if value:
            clause = _location_clause(column, value)
            if clause is not None:
                clauses.append(clause)
    return clauses


async def list_properties(
    db_manager: DatabaseSessionManager, filters: PropertyFilters,
) -> Page:
    page = max(filters.page, 1)
    limit = min(max(filters.limit, 1), MAX_PAGE_SIZE)
    clauses = _filter_clauses(filters)
    column = SORTABLE_COLUMNS.get(filters.sort_by, Property.created_at)
    ordering = column.asc() if filters.sort_order.lower() == "asc" else column.desc()

    async with db_manager.session() as db:
        total = (await db.execute(
            select(func.count(Property.property_id)).where(*clauses)
        )).scalar_one()
        rows = (await db.execute(
            select(Property)
            .where(*clauses)
            .order_by(ordering, Property.property_id)
            .offset((page - 1) * limit)
            .limit(limit)
        )).scalars().all()
    return Page(items=list(rows), page=page, limit=limit, total=total)


# ─── Compare ────────────────────────────────────────────────────

def parse_compare_ids(raw_ids: list[str]) -> list[UUID]:
    if not 2 <= len(raw_ids) <= 3:
        raise ValidationError(
            "Provide between 2 and 3 property IDs to compare", field="ids",
        )
    parsed: list[UUID] = []
    for raw in raw_ids:
        try:
            parsed.append(UUID(str(raw).strip()))
        except ValueError:
            raise ValidationError(f"Invalid property ID: {raw}", field="ids")
    return parsed


async def compare_properties(
    db_manager: DatabaseSessionManager, raw_ids: list[str],
) -> list[PropertyAggregate]:
    ids = parse_compare_ids(raw_ids)
    found: list[PropertyAggregate] = []
    async with db_manager.session() as db:
        for property_id in ids:
            aggregate = await load_aggregate(db, property_id)
            if aggregate is None:
                logger.warning(
                    f"Compare: property {property_id} not found, skipping",
                    extra={"property_id": str(property_id)},
                )
                continue
            found.append(aggregate)
    if not found:
        raise ResourceNotFoundError(
            "Property", message="None of the requested properties were found",
        )
    return found


# ─── Reference data ─────────────────────────────────────────────

async def list_amenities(db_manager: DatabaseSessionManager) -> list[Amenity]:
    async with db_manager.session() as db:
        rows = (await db.execute(
            select(Amenity)
            .where(Amenity.is_active.is_(True))
            .order_by(Amenity.amenity_name)
        )).scalars().all()
    return list(rows)


async def list_caretakers(db_manager: DatabaseSessionManager) -> list[Caretaker]:
    async with db_manager.session() as db:
        rows = (await db.execute(
            select(Caretaker)
            .where(Caretaker.is_active.is_(True))
            .order_by(Caretaker.caretaker_name)
        )).scalars().all()
    return list(rows)
