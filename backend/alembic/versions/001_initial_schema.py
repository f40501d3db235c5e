"""Initial schema — identity, RBAC, tokens, property aggregate, audit and API logs.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), nullable=False,
        server_default=sa.func.now(),
    )


def _money(name: str, precision: int = 14) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision, 2), nullable=True)


def upgrade() -> None:
    # ─── Identity & RBAC ──────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("user_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("mobile_number", sa.String(20), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("rera_number", sa.String(50), nullable=True, unique=True),
        sa.Column("user_type", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "roles",
        sa.Column("role_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("role_name", sa.String(50), nullable=False, unique=True),
        sa.Column("role_type", sa.String(20), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
    )

    op.create_table(
        "permissions",
        sa.Column("permission_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "user_roles",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", sa.Integer, sa.ForeignKey("roles.role_id"), primary_key=True),
        sa.Column("assigned_by", UUID(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "role_permissions",
        sa.Column("role_id", sa.Integer, sa.ForeignKey("roles.role_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("permission_id", sa.Integer, sa.ForeignKey("permissions.permission_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("granted_by", UUID(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "tokens",
        sa.Column("token_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("refresh_token", sa.String(1000), nullable=False, unique=True),
        sa.Column(
            "device_id", sa.String(255), nullable=False,
            server_default="unknown",
        ),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("ip_address", sa.String(50), nullable=True),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("revocation_reason", sa.String(100), nullable=True),
    )
    op.create_index("ix_tokens_user_id", "tokens", ["user_id"])
    op.create_index(
        "uq_tokens_active_user_device", "tokens", ["user_id", "device_id"],
        unique=True, postgresql_where=sa.text("is_active"),
    )

    # ─── Reference data ───────────────────────────────────────
    op.create_table(
        "amenities",
        sa.Column("amenity_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("amenity_name", sa.String(100), nullable=False, unique=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
    )

    op.create_table(
        "caretakers",
        sa.Column("caretaker_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("caretaker_name", sa.String(200), nullable=False, unique=True),
        sa.Column("caretaker_type", sa.String(50), nullable=True),
        sa.Column("contact_info", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
    )

    # ─── Property aggregate ───────────────────────────────────
    op.create_table(
        "properties",
        sa.Column("property_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", UUID(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("broker_id", UUID(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("sales_id", UUID(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("caretaker_id", sa.Integer, sa.ForeignKey("caretakers.caretaker_id"), nullable=True),
        sa.Column("property_type", sa.String(50), nullable=True),
        _money("carpet_area", 12),
        sa.Column("carpet_area_unit", sa.String(20), nullable=True),
        sa.Column("completion_year", sa.Integer, nullable=True),
        sa.Column("last_refurbished_year", sa.Integer, nullable=True),
        sa.Column("building_grade", sa.String(20), nullable=True),
        sa.Column("ownership_type", sa.String(50), nullable=True),
        sa.Column("parking_two_wheeler", sa.Integer, nullable=True),
        sa.Column("parking_four_wheeler", sa.Integer, nullable=True),
        sa.Column("power_backup", sa.String(50), nullable=True),
        sa.Column("number_of_lifts", sa.Integer, nullable=True),
        sa.Column("hvac_type", sa.String(50), nullable=True),
        sa.Column("furnishing_status", sa.String(50), nullable=True),
        sa.Column("building_maintained_by", sa.String(100), nullable=True),
        sa.Column("title_status", sa.String(50), nullable=True),
        sa.Column("occupancy_certificate", sa.String(50), nullable=True),
        sa.Column("lease_registration", sa.String(50), nullable=True),
        sa.Column("has_pending_litigation", sa.Boolean, nullable=True),
        sa.Column("litigation_details", sa.Text, nullable=True),
        sa.Column("rera_number", sa.String(50), nullable=True),
        sa.Column("tenant_type", sa.String(50), nullable=True),
        sa.Column("lease_start_date", sa.Date, nullable=True),
        sa.Column("lease_end_date", sa.Date, nullable=True),
        sa.Column("lock_in_period_years", sa.Integer, nullable=True),
        sa.Column("lock_in_period_months", sa.Integer, nullable=True),
        sa.Column("lease_duration_years", sa.Integer, nullable=True),
        sa.Column("rent_type", sa.String(50), nullable=True),
        _money("rent_per_sqft_monthly", 12),
        _money("total_monthly_rent"),
        sa.Column("security_deposit_type", sa.String(50), nullable=True),
        sa.Column("security_deposit_months", sa.Integer, nullable=True),
        _money("security_deposit_amount"),
        sa.Column("escalation_frequency_years", sa.Integer, nullable=True),
        _money("annual_escalation_percent", 6),
        sa.Column("maintenance_costs_included", sa.Boolean, nullable=True),
        sa.Column("maintenance_type", sa.String(50), nullable=True),
        _money("maintenance_amount"),
        sa.Column("micro_market", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("demand_drivers", sa.Text, nullable=True),
        sa.Column("upcoming_developments", sa.Text, nullable=True),
        _money("selling_price", 16),
        _money("property_tax_annual"),
        _money("insurance_annual"),
        _money("other_costs_annual"),
        _money("total_operating_annual_costs"),
        _money("additional_income_annual"),
        _money("annual_gross_rent", 16),
        _money("gross_rental_yield", 6),
        _money("net_rental_yield", 6),
        _money("payback_period_years", 6),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("additional_description", sa.Text, nullable=True),
        sa.Column("other_amenities", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "(owner_id IS NULL) <> (broker_id IS NULL)",
            name="ck_properties_single_lister",
        ),
    )
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"])
    op.create_index("ix_properties_broker_id", "properties", ["broker_id"])
    op.create_index("ix_properties_sales_id", "properties", ["sales_id"])

    op.create_table(
        "property_amenities",
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("properties.property_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("amenity_id", sa.Integer, sa.ForeignKey("amenities.amenity_id"), primary_key=True),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "property_media",
        sa.Column("media_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("properties.property_id", ondelete="CASCADE"), nullable=False),
        sa.Column("media_type", sa.String(20), nullable=False),
        sa.Column("file_url", sa.Text, nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_property_media_property_id", "property_media", ["property_id"])

    op.create_table(
        "property_certifications",
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("properties.property_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("certification_type", sa.String(50), primary_key=True),
        sa.Column("certification_details", sa.Text, nullable=True),
        _created_at(),
    )

    op.create_table(
        "property_connectivity",
        sa.Column("connectivity_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("property_id", UUID(as_uuid=True), sa.ForeignKey("properties.property_id", ondelete="CASCADE"), nullable=False),
        sa.Column("connectivity_type", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("distance_km", sa.Numeric(10, 2), nullable=True),
        _created_at(),
    )
    op.create_index("ix_property_connectivity_property_id", "property_connectivity", ["property_id"])

    # ─── Audit & request logs ─────────────────────────────────
    op.create_table(
        "audit_logs",
        sa.Column("audit_log_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("operation", sa.String(20), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("record_id", UUID(as_uuid=True), nullable=False),
        sa.Column("old_value", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("new_value", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("table_name", sa.String(50), nullable=True),
        sa.Column("ip_address", sa.String(50), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        _created_at(),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_record_id", "audit_logs", ["record_id"])

    op.create_table(
        "api_logs",
        sa.Column("log_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=True),
        sa.Column("http_method", sa.String(10), nullable=False),
        sa.Column("endpoint", sa.String(500), nullable=False),
        sa.Column("query_params", sa.JSON, nullable=True),
        sa.Column("response_status", sa.Integer, nullable=True),
        sa.Column("ip_address", sa.String(50), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("request_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("response_timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.Column("response_time_ms", sa.Integer, nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("environment", sa.String(20), nullable=True),
    )


def downgrade() -> None:
    for table in (
        "api_logs", "audit_logs",
        "property_connectivity", "property_certifications", "property_media",
        "property_amenities", "properties",
        "caretakers", "amenities",
        "tokens", "role_permissions", "user_roles", "permissions", "roles",
        "users",
    ):
        op.drop_table(table)
