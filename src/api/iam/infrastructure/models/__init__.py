"""SQLAlchemy ORM models for IAM bounded context.

Read-only mappings of the relational tables the authorization layer
reconciles from. The tables themselves are owned by the CRUD service.
"""

from iam.infrastructure.models.device import DeviceModel
from iam.infrastructure.models.site import SiteModel
from iam.infrastructure.models.tenant import TenantModel
from iam.infrastructure.models.user import UserModel
from iam.infrastructure.models.user_tenant_association import (
    UserTenantAssociationModel,
)

__all__ = [
    "DeviceModel",
    "SiteModel",
    "TenantModel",
    "UserModel",
    "UserTenantAssociationModel",
]
