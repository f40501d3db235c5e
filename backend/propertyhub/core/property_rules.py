"""Property Rules — pure validation and shaping for the Property aggregate.

Invariants:
    - city and state are required on create
    - Exactly one of owner_id / broker_id is set, chosen by the actor's primary role
    - Only MUTABLE_PROPERTY_FIELDS are ever written by an update
    - owner_id, broker_id, property_id in an update patch are dropped, never applied
    - Every connectivity entry carries a non-empty connectivity_type
    - distance_km, when given, parses as a number
    - Certification rows are keyed by type: RERA / LEED / IGBC / OTHER_<n>

Design Decisions:
    - Protected fields are dropped rather than rejected; the caller logs a warning
    - amenity_ids=None means "no amenity change"; [] means "clear all amenities"
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping
from uuid import UUID

from propertyhub.core.domain_types import ActorContext, MediaType, RoleName
from propertyhub.core.errors import ForbiddenError, ValidationError
from propertyhub.core.validators import check_required_fields

REQUIRED_CREATE_FIELDS = ("city", "state")

DESCRIPTIVE_FIELDS = (
    # Basic details
    "property_type", "carpet_area", "carpet_area_unit", "completion_year",
    "last_refurbished_year", "building_grade", "ownership_type",
    # Parking
    "parking_two_wheeler", "parking_four_wheeler",
    # Infrastructure
    "power_backup", "number_of_lifts", "hvac_type", "furnishing_status",
    "building_maintained_by",
    # Legal
    "title_status", "occupancy_certificate", "lease_registration",
    "has_pending_litigation", "litigation_details", "rera_number",
    # Lease
    "tenant_type", "lease_start_date", "lease_end_date",
    "lock_in_period_years", "lock_in_period_months", "lease_duration_years",
    # Rental
    "rent_type", "rent_per_sqft_monthly", "total_monthly_rent",
    "security_deposit_type", "security_deposit_months", "security_deposit_amount",
    # Escalation & maintenance
    "escalation_frequency_years", "annual_escalation_percent",
    "maintenance_costs_included", "maintenance_type", "maintenance_amount",
    # Location
    "micro_market", "city", "state",
    # Market intelligence
    "demand_drivers", "upcoming_developments",
    # Financial
    "selling_price", "property_tax_annual", "insurance_annual",
    "other_costs_annual", "total_operating_annual_costs",
    "additional_income_annual", "annual_gross_rent", "gross_rental_yield",
    "net_rental_yield", "payback_period_years",
    # Description
    "description", "additional_description", "other_amenities",
)

MUTABLE_PROPERTY_FIELDS = frozenset(DESCRIPTIVE_FIELDS) | {"caretaker_id"}
PROTECTED_PROPERTY_FIELDS = ("owner_id", "broker_id", "property_id")
PREDEFINED_CERTIFICATIONS = ("RERA", "LEED", "IGBC")


@dataclass
class UpdatePlan:
    """An update patch split into what will be applied and what was dropped."""
    field_updates: dict[str, Any] = field(default_factory=dict)
    amenity_ids: list[int] | None = None
    protected_attempted: list[str] = field(default_factory=list)

    def is_empty(self, new_media_count: int = 0) -> bool:
        return (
            not self.field_updates
            and new_media_count == 0
            and self.amenity_ids is None
        )


# ─── Create ─────────────────────────────────────────────────────

def check_create_required(data: Mapping[str, Any]) -> None:
    check_required_fields(REQUIRED_CREATE_FIELDS, data)


def ownership_for(actor: ActorContext) -> dict[str, UUID | None]:
    """Owner → owner_id, Broker → broker_id. Any other primary role cannot list."""
    role = actor.primary_role
    if role == RoleName.OWNER.value:
        return {"owner_id": actor.user_id, "broker_id": None}
    if role == RoleName.BROKER.value:
        return {"owner_id": None, "broker_id": actor.user_id}
    raise ForbiddenError(
        f"Role '{role}' cannot list properties; Owner or Broker required",
    )


def normalize_connectivity(entries: Iterable[Mapping[str, Any]] | None) -> list[dict]:
    """Validate connectivity entries and coerce distance_km to Decimal."""
    rows: list[dict] = []
    for index, entry in enumerate(entries or [], start=1):
        connectivity_type = (entry.get("connectivity_type") or "").strip()
        if not connectivity_type:
            raise ValidationError(
                f"Connectivity entry {index}: connectivityType is required",
                field="connectivityDetails",
            )
        rows.append({
            "connectivity_type": connectivity_type,
            "name": entry.get("name") or None,
            "distance_km": _parse_distance(entry.get("distance_km"), index),
        })
    return rows


def _parse_distance(value: Any, index: int) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        parsed = None
    if parsed is None or not parsed.is_finite():
        raise ValidationError(
            f"Connectivity entry {index}: distanceKm must be a number",
            field="connectivityDetails",
        )
    return parsed


def certification_rows(certifications: Mapping[str, Any] | None) -> list[tuple[str, str | None]]:
    """Flatten the certification payload into (certification_type, details) rows."""
    if not certifications:
        return []
    rows: list[tuple[str, str | None]] = []
    for cert_type in PREDEFINED_CERTIFICATIONS:
        if certifications.get(cert_type.lower()) is True:
            rows.append((cert_type, None))
    for index, other in enumerate(certifications.get("others") or [], start=1):
        if other and other.strip():
            rows.append((f"OTHER_{index}", other.strip()))
    return rows


def media_type_for(content_type: str | None) -> MediaType:
    if content_type and content_type.startswith("video/"):
        return MediaType.VIDEO
    return MediaType.PHOTO


# ─── Update ─────────────────────────────────────────────────────

def plan_update(patch: Mapping[str, Any]) -> UpdatePlan:
    """Split a patch into allow-listed field updates, amenity change, dropped keys."""
    plan = UpdatePlan()
    for key, value in patch.items():
        if key in PROTECTED_PROPERTY_FIELDS:
            if value is not None:
                plan.protected_attempted.append(key)
        elif key == "amenity_ids":
            plan.amenity_ids = list(value) if value is not None else None
        elif key in MUTABLE_PROPERTY_FIELDS:
            plan.field_updates[key] = value
    return plan


def ownership_scope(actor: ActorContext) -> tuple[str, UUID] | None:
    """Column/value restricting which properties the actor may touch.

    None means unrestricted (admin-side roles, gated by permissions upstream).
    """
    role = actor.primary_role
    if role == RoleName.OWNER.value:
        return ("owner_id", actor.user_id)
    if role == RoleName.BROKER.value:
        return ("broker_id", actor.user_id)
    return None


def tenure_left_years(lease_end: date | None, now: datetime | None = None) -> float | None:
    """Years remaining until lease end, floored at 0, two decimals."""
    if lease_end is None:
        return None
    today = (now or datetime.now(timezone.utc)).date()
    years = (lease_end - today).days / 365.25
    return max(0.0, round(years, 2))


def check_required_not_cleared(field_updates: Mapping[str, Any]) -> None:
    """An update may change city/state but never blank them."""
    for name in REQUIRED_CREATE_FIELDS:
        if name in field_updates and not field_updates[name]:
            raise ValidationError(f"{name} cannot be empty", field=name)


def tenure_cutoff(years: float, now: datetime | None = None) -> date:
    """Lease end date that leaves exactly `years` of tenure from today."""
    today = (now or datetime.now(timezone.utc)).date()
    return today + timedelta(days=round(years * 365.25))
