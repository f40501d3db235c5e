"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Property is the aggregate root; its child tables are keyed by property_id
    - Join entities (UserRole, RolePermission, PropertyAmenity) are mapped classes

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from propertyhub.models.user import User  # noqa: F401
from propertyhub.models.role import Role  # noqa: F401
from propertyhub.models.permission import Permission  # noqa: F401
from propertyhub.models.user_role import UserRole  # noqa: F401
from propertyhub.models.role_permission import RolePermission  # noqa: F401
from propertyhub.models.token import Token  # noqa: F401
from propertyhub.models.amenity import Amenity  # noqa: F401
from propertyhub.models.caretaker import Caretaker  # noqa: F401
from propertyhub.models.property import Property  # noqa: F401
from propertyhub.models.property_amenity import PropertyAmenity  # noqa: F401
from propertyhub.models.property_media import PropertyMedia  # noqa: F401
from propertyhub.models.property_certification import PropertyCertification  # noqa: F401
from propertyhub.models.property_connectivity import PropertyConnectivity  # noqa: F401
from propertyhub.models.audit_log import AuditLog  # noqa: F401
from propertyhub.models.api_log import ApiLog  # noqa: F401
