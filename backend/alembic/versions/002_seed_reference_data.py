"""Seed roles, permission codes and role grants.

Revision ID: 002_seed_reference_data
Revises: 001_initial
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002_seed_reference_data"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLES = [
    (1, "Owner", "client", "Lists and manages their own properties"),
    (2, "Broker", "client", "Lists and manages properties on behalf of owners"),
    (3, "Investor", "client", "Browses and compares listings"),
    (4, "Sales", "admin", "Internal handler assigned to new listings"),
    (5, "Admin", "admin", "Manages listings and staff accounts"),
    (6, "Super Admin", "admin", "Full access"),
]

PERMISSIONS = [
    (1, "PROPERTY_CREATE", "Create property listings"),
    (2, "PROPERTY_UPDATE", "Update property listings"),
    (3, "PROPERTY_DELETE", "Delete property listings"),
    (4, "PROPERTY_ASSIGN", "Assign a Sales handler to a listing"),
    (5, "PROPERTY_VIEW", "View property listings"),
    (6, "USER_CREATE", "Create staff accounts"),
    (7, "USER_VIEW", "View staff accounts"),
    (8, "USER_UPDATE", "Update staff accounts"),
    (9, "USER_DELETE", "Deactivate staff accounts"),
]

_LISTER = ["PROPERTY_CREATE", "PROPERTY_UPDATE", "PROPERTY_DELETE", "PROPERTY_VIEW"]

GRANTS = {
    "Owner": _LISTER,
    "Broker": _LISTER,
    "Investor": ["PROPERTY_VIEW"],
    "Sales": ["PROPERTY_VIEW", "PROPERTY_ASSIGN"],
    "Admin": [
        "PROPERTY_VIEW", "PROPERTY_ASSIGN", "PROPERTY_UPDATE", "PROPERTY_DELETE",
        "USER_CREATE", "USER_VIEW", "USER_UPDATE",
    ],
    "Super Admin": [code for _, code, _ in PERMISSIONS],
}


def upgrade() -> None:
    roles = sa.table(
        "roles",
        sa.column("role_id", sa.Integer),
        sa.column("role_name", sa.String),
        sa.column("role_type", sa.String),
        sa.column("description", sa.Text),
    )
    permissions = sa.table(
        "permissions",
        sa.column("permission_id", sa.Integer),
        sa.column("code", sa.String),
        sa.column("description", sa.Text),
    )
    role_permissions = sa.table(
        "role_permissions",
        sa.column("role_id", sa.Integer),
        sa.column("permission_id", sa.Integer),
    )

    op.bulk_insert(roles, [
        {"role_id": rid, "role_name": name, "role_type": rtype, "description": desc}
        for rid, name, rtype, desc in ROLES
    ])
    op.bulk_insert(permissions, [
        {"permission_id": pid, "code": code, "description": desc}
        for pid, code, desc in PERMISSIONS
    ])
    role_ids = {name: rid for rid, name, _, _ in ROLES}
    permission_ids = {code: pid for pid, code, _ in PERMISSIONS}
    op.bulk_insert(role_permissions, [
        {"role_id": role_ids[role], "permission_id": permission_ids[code]}
        for role, codes in GRANTS.items()
        for code in codes
    ])

    # Explicit ids above; move the sequences past them on PostgreSQL
    if op.get_bind().dialect.name == "postgresql":
        op.execute("SELECT setval('roles_role_id_seq', (SELECT MAX(role_id) FROM roles))")
        op.execute(
            "SELECT setval('permissions_permission_id_seq', "
            "(SELECT MAX(permission_id) FROM permissions))"
        )


def downgrade() -> None:
    op.execute("DELETE FROM role_permissions")
    op.execute("DELETE FROM permissions")
    op.execute("DELETE FROM roles")
