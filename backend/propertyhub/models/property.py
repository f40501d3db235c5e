"""Property ORM — aggregate root of the listing domain.

Invariants:
    - property_id is immutable UUID primary key
    - Exactly one of owner_id / broker_id is non-null (check constraint)
    - sales_id is the assigned internal handler; null when no Sales user exists
    - is_active=False is the soft delete; rows are never hard-deleted
    - Child rows (amenity links, media, certifications, connectivity) are only
      written inside a property-scoped unit of work

Design Decisions:
    - No relationship() attributes: children are loaded by explicit queries in
      services/property_queries.py, never by lazy traversal
    - Numeric for money and areas: Decimal end to end, no float drift in audit deltas
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    String, Text, Boolean, Integer, Numeric, Date, DateTime, ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from propertyhub.db.base import Base


class Property(Base):
    """Listing aggregate root."""
    __tablename__ = "properties"
    __table_args__ = (
        CheckConstraint(
            "(owner_id IS NULL) <> (broker_id IS NULL)",
            name="ck_properties_single_lister",
        ),
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    owner_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.user_id"), nullable=True, index=True,
    )
    broker_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.user_id"), nullable=True, index=True,
    )
    sales_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.user_id"), nullable=True, index=True,
    )
    caretaker_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("caretakers.caretaker_id"), nullable=True,
    )

    # Basic details
    property_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    carpet_area: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    carpet_area_unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    completion_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_refurbished_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    building_grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    ownership_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Parking
    parking_two_wheeler: Mapped[int | None] = mapped_column(Integer, nullable=True)
    parking_four_wheeler: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Infrastructure
    power_backup: Mapped[str | None] = mapped_column(String(50), nullable=True)
    number_of_lifts: Mapped[int | None] = mapped_column(Integer, nullable=True)
    hvac_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    furnishing_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    building_maintained_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Legal
    title_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    occupancy_certificate: Mapped[str | None] = mapped_column(String(50), nullable=True)
    lease_registration: Mapped[str | None] = mapped_column(String(50), nullable=True)
    has_pending_litigation: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    litigation_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    rera_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Lease
    tenant_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    lease_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    lease_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    lock_in_period_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lock_in_period_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lease_duration_years: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Rental
    rent_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rent_per_sqft_monthly: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    total_monthly_rent: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    security_deposit_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    security_deposit_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    security_deposit_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    # Escalation & maintenance
    escalation_frequency_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    annual_escalation_percent: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    maintenance_costs_included: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    maintenance_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    maintenance_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    # Location
    micro_market: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)

    # Market intelligence
    demand_drivers: Mapped[str | None] = mapped_column(Text, nullable=True)
    upcoming_developments: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Financial
    selling_price: Mapped[Decimal | None] = mapped_column(Numeric(16, 2), nullable=True)
    property_tax_annual: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    insurance_annual: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    other_costs_annual: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    total_operating_annual_costs: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    additional_income_annual: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    annual_gross_rent: Mapped[Decimal | None] = mapped_column(Numeric(16, 2), nullable=True)
    gross_rental_yield: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    net_rental_yield: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    payback_period_years: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)

    # Description
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    additional_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    other_amenities: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
