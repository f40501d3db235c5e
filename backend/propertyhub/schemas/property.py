"""Property Schemas — create / update bodies and aggregate views.

Invariants:
    - PropertyFields mirrors core.property_rules.DESCRIPTIVE_FIELDS one to one
    - PropertyUpdate accepts ownerId / brokerId / propertyId so the service can
      detect and drop them; they never reach the row
    - Update payloads are dumped with exclude_unset: absent keys are untouched,
      explicit nulls clear the column

Design Decisions:
    - city/state are optional here; services/property_mutations.py raises the
      ValidationError so API and non-API callers share one message
    - distanceKm is kept as str/float so the "must be a number" check lives in core
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import Field

from propertyhub.core.property_rules import tenure_left_years
from propertyhub.schemas.base import CamelModel, Pagination


class ConnectivityIn(CamelModel):
    connectivity_type: str | None = None
    name: str | None = Field(None, max_length=200)
    distance_km: str | float | None = None


class CertificationsIn(CamelModel):
    rera: bool = False
    leed: bool = False
    igbc: bool = False
    others: list[str] = Field(default_factory=list)


class MediaIn(CamelModel):
    """Descriptor of an already-uploaded file."""
    file_url: str
    content_type: str | None = None


class PropertyFields(CamelModel):
    property_type: str | None = None
    carpet_area: Decimal | None = None
    carpet_area_unit: str | None = None
    completion_year: int | None = None
    last_refurbished_year: int | None = None
    building_grade: str | None = None
    ownership_type: str | None = None
    parking_two_wheeler: int | None = None
    parking_four_wheeler: int | None = None
    power_backup: str | None = None
    number_of_lifts: int | None = None
    hvac_type: str | None = None
    furnishing_status: str | None = None
    building_maintained_by: str | None = None
    title_status: str | None = None
    occupancy_certificate: str | None = None
    lease_registration: str | None = None
    has_pending_litigation: bool | None = None
    litigation_details: str | None = None
    rera_number: str | None = None
    tenant_type: str | None = None
    lease_start_date: date | None = None
    lease_end_date: date | None = None
    lock_in_period_years: int | None = None
    lock_in_period_months: int | None = None
    lease_duration_years: int | None = None
    rent_type: str | None = None
    rent_per_sqft_monthly: Decimal | None = None
    total_monthly_rent: Decimal | None = None
    security_deposit_type: str | None = None
    security_deposit_months: int | None = None
    security_deposit_amount: Decimal | None = None
    escalation_frequency_years: int | None = None
    annual_escalation_percent: Decimal | None = None
    maintenance_costs_included: bool | None = None
    maintenance_type: str | None = None
    maintenance_amount: Decimal | None = None
    micro_market: str | None = None
    city: str | None = None
    state: str | None = None
    demand_drivers: str | None = None
    upcoming_developments: str | None = None
    selling_price: Decimal | None = None
    property_tax_annual: Decimal | None = None
    insurance_annual: Decimal | None = None
    other_costs_annual: Decimal | None = None
    total_operating_annual_costs: Decimal | None = None
    additional_income_annual: Decimal | None = None
    annual_gross_rent: Decimal | None = None
    gross_rental_yield: Decimal | None = None
    net_rental_yield: Decimal | None = None
    payback_period_years: Decimal | None = None
    description: str | None = None
    additional_description: str | None = None
    other_amenities: str | None = None


class PropertyCreate(PropertyFields):
    caretaker_id: int | None = None
    amenity_ids: list[int] = Field(default_factory=list)
    connectivity_details: list[ConnectivityIn] = Field(default_factory=list)
    certifications: CertificationsIn | None = None
    media: list[MediaIn] = Field(default_factory=list)


class PropertyUpdate(PropertyFields):
    caretaker_id: int | None = None
    amenity_ids: list[int] | None = None
    media: list[MediaIn] = Field(default_factory=list)
    # Accepted only so the service can log and drop them
    owner_id: Any = None
    broker_id: Any = None
    property_id: Any = None


class AssignRequest(CamelModel):
    sales_id: UUID


class CompareRequest(CamelModel):
    property_ids: list[str]


# ─── Views ──────────────────────────────────────────────────────

class AmenityOut(CamelModel):
    amenity_id: int
    amenity_name: str
    category: str | None = None


class CaretakerOut(CamelModel):
    caretaker_id: int
    caretaker_name: str
    caretaker_type: str | None = None
    contact_info: str | None = None


class MediaOut(CamelModel):
    media_id: int
    media_type: str
    file_url: str
    uploaded_at: datetime | None = None


class CertificationOut(CamelModel):
    certification_type: str
    certification_details: str | None = None


class ConnectivityOut(CamelModel):
    connectivity_id: int
    connectivity_type: str
    name: str | None = None
    distance_km: Decimal | None = None


class PropertySummary(PropertyFields):
    property_id: UUID
    owner_id: UUID | None = None
    broker_id: UUID | None = None
    sales_id: UUID | None = None
    caretaker_id: int | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tenure_left_years: float | None = None


class PropertyDetail(PropertySummary):
    amenities: list[AmenityOut] = Field(default_factory=list)
    media: list[MediaOut] = Field(default_factory=list)
    certifications: list[CertificationOut] = Field(default_factory=list)
    connectivity: list[ConnectivityOut] = Field(default_factory=list)
    caretaker: CaretakerOut | None = None


class PropertyList(CamelModel):
    properties: list[PropertySummary]
    pagination: Pagination


def property_summary(prop) -> PropertySummary:
    return PropertySummary.model_validate({
        **prop.to_dict(),
        "tenure_left_years": tenure_left_years(prop.lease_end_date),
    })


def property_detail(aggregate) -> PropertyDetail:
    prop = aggregate.root
    return PropertyDetail.model_validate({
        **prop.to_dict(),
        "tenure_left_years": tenure_left_years(prop.lease_end_date),
        "amenities": [a.to_dict() for a in aggregate.amenities],
        "media": [m.to_dict() for m in aggregate.media],
        "certifications": [c.to_dict() for c in aggregate.certifications],
        "connectivity": [c.to_dict() for c in aggregate.connectivity],
        "caretaker": aggregate.caretaker.to_dict() if aggregate.caretaker else None,
    })
