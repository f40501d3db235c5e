"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ActorContext is immutable and passed explicitly into every service call
    - All valid states encoded as Enums — no raw string matching
    - Permission codes are case-sensitive exact strings

Design Decisions:
    - str Enums: serialize to JSON (audit payloads, API responses) without custom encoders
    - ActorContext as frozen dataclass instead of attaching identity to the request object
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

UNKNOWN_DEVICE_ID = "unknown"


# ─── Enums ───────────────────────────────────────────────────────

class UserType(str, Enum):
    """Account family — maps to users.user_type."""
    CLIENT = "client"
    ADMIN = "admin"


class RoleType(str, Enum):
    """Role family — client roles come from signup, admin roles from the admin API."""
    CLIENT = "client"
    ADMIN = "admin"


class RoleName(str, Enum):
    """Seeded role names referenced by business rules."""
    OWNER = "Owner"
    BROKER = "Broker"
    INVESTOR = "Investor"
    SALES = "Sales"
    ADMIN = "Admin"
    SUPER_ADMIN = "Super Admin"


class PermissionCode(str, Enum):
    """Contract between route guards and the permission resolver."""
    PROPERTY_CREATE = "PROPERTY_CREATE"
    PROPERTY_UPDATE = "PROPERTY_UPDATE"
    PROPERTY_DELETE = "PROPERTY_DELETE"
    PROPERTY_ASSIGN = "PROPERTY_ASSIGN"
    PROPERTY_VIEW = "PROPERTY_VIEW"
    USER_CREATE = "USER_CREATE"
    USER_VIEW = "USER_VIEW"
    USER_UPDATE = "USER_UPDATE"
    USER_DELETE = "USER_DELETE"


class AuthorizationMode(str, Enum):
    """ANY succeeds on the first granted code; ALL requires every code."""
    ANY = "any"
    ALL = "all"


class AuditOperation(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class MediaType(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"


class NotificationEvent(str, Enum):
    """Post-commit events — delivery is at-most-once, best-effort."""
    PROPERTY_CREATED = "property:created"
    PROPERTY_UPDATED = "property:updated"
    PROPERTY_ASSIGNED = "property:assigned"
    PROPERTY_DELETED = "property:deleted"


class RevocationReason(str, Enum):
    LOGOUT = "LOGOUT"
    LOGOUT_ALL = "LOGOUT_ALL"
    ROTATED = "ROTATED"
    USER_DEACTIVATED = "USER_DEACTIVATED"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class RoleRef:
    """An active role held by an actor."""
    role_id: int
    role_name: str
    role_type: str


@dataclass(frozen=True)
class ActorContext:
    """Authenticated identity performing an action.

    roles are the actor's *active* roles in assignment order; the first one is
    the primary role used for ownership decisions.
    """
    user_id: UUID
    roles: tuple[RoleRef, ...] = ()
    ip_address: str | None = None
    user_agent: str | None = None

    @property
    def role_ids(self) -> list[int]:
        return [r.role_id for r in self.roles]

    @property
    def primary_role(self) -> str | None:
        return self.roles[0].role_name if self.roles else None


@dataclass(frozen=True)
class DeviceContext:
    """Client metadata stored alongside a refresh token.

    A login without a device id is bound to UNKNOWN_DEVICE_ID so the
    one-active-token-per-device rule covers it as well.
    """
    device_id: str | None = None
    user_agent: str | None = None
    ip_address: str | None = None

    @property
    def token_device_id(self) -> str:
        return self.device_id or UNKNOWN_DEVICE_ID


@dataclass
class AuthorizationResult:
    """Outcome of a permission check. missing is empty when granted."""
    granted: bool
    missing: list[str] = field(default_factory=list)
