"""Authorization type definitions for SpiceDB.

Defines resource types, relations, and permissions that map to the SpiceDB
schema, plus the relationship tuple and permission check value objects that
the cache, the authorization client, and the sync layer all operate on.
These enums ensure type safety and prevent hardcoded strings across the codebase.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

SYSTEM_ENTITY_ID = "main"


class ResourceType(StrEnum):
    """SpiceDB resource types matching schema definitions.

    Each value corresponds to a `definition` in the SpiceDB schema (.zed file).
    """

    USER = "user"
    SYSTEM = "system"
    TENANT = "tenant"
    SITE = "site"
    DEVICE = "device"
    TASK = "task"


class RelationType(StrEnum):
    """SpiceDB relations matching schema relations.

    Each value corresponds to a `relation` in the SpiceDB schema definitions.
    """

    ADMIN = "admin"
    OWNER = "owner"
    MEMBER = "member"
    SYSTEM = "system"
    TENANT = "tenant"
    MANAGER = "manager"
    OPERATOR = "operator"
    SITE = "site"
    DEVICE = "device"
    ASSIGNEE = "assignee"
    CREATOR = "creator"


class Permission(StrEnum):
    """SpiceDB permissions matching schema permissions.

    Each value corresponds to a `permission` in the SpiceDB schema definitions.
    Names are shared across definitions (e.g. both tenant and site declare
    `manage`).
    """

    # system
    MANAGE_ALL = "manage_all"
    CREATE_TENANT = "create_tenant"
    DELETE_TENANT = "delete_tenant"
    VIEW_ALL_TENANTS = "view_all_tenants"
    MANAGE_USERS = "manage_users"

    # tenant
    MANAGE = "manage"
    INVITE_USERS = "invite_users"
    REMOVE_USERS = "remove_users"
    VIEW_SETTINGS = "view_settings"
    EDIT_SETTINGS = "edit_settings"
    DELETE = "delete"
    ADMIN_ACCESS = "admin_access"
    MEMBER_ACCESS = "member_access"

    # site
    OPERATE = "operate"
    VIEW = "view"
    DEVICE_ADMIN = "device_admin"
    DEVICE_ACCESS = "device_access"

    # device
    CONFIGURE = "configure"
    MONITOR = "monitor"
    CONTROL = "control"
    VIEW_LOGS = "view_logs"
    UPDATE_FIRMWARE = "update_firmware"
    REBOOT = "reboot"

    # task
    EDIT = "edit"
    ASSIGN = "assign"


def format_resource(resource_type: ResourceType | str, resource_id: str) -> str:
    """Format a resource identifier for SpiceDB.

    Args:
        resource_type: The type of resource
        resource_id: The unique identifier for the resource

    Returns:
        Formatted resource string (e.g., "site:abc123")

    Example:
        >>> format_resource(ResourceType.SITE, "abc123")
        "site:abc123"
    """
    return f"{resource_type}:{resource_id}"


def format_subject(
    subject_type: ResourceType | str,
    subject_id: str,
    relation: str | None = None,
) -> str:
    """Format a subject identifier for SpiceDB.

    Args:
        subject_type: The type of subject (usually USER)
        subject_id: The unique identifier for the subject
        relation: Optional subject relation (userset subjects)

    Returns:
        Formatted subject string (e.g., "user:alice" or "tenant:t1#member")
    """
    subject = f"{subject_type}:{subject_id}"
    if relation:
        return f"{subject}#{relation}"
    return subject


@dataclass(frozen=True)
class ObjectRef:
    """Reference to an entity in the authorization graph."""

    type: str
    id: str

    def __str__(self) -> str:
        return format_resource(self.type, self.id)


@dataclass(frozen=True)
class SubjectRef:
    """Reference to the subject side of a relationship.

    Attributes:
        type: Subject type (e.g. "user", "tenant")
        id: Subject identifier
        relation: Optional relation on the subject (e.g. "member" in
            "tenant:t1#member")
    """

    type: str
    id: str
    relation: str | None = None

    def __str__(self) -> str:
        return format_subject(self.type, self.id, self.relation)


@dataclass(frozen=True)
class RelationshipTuple:
    """An authorization fact: ``entity#relation@subject``.

    A tuple is identified by its full triple. Writing the same triple twice
    is idempotent. Tuples are never updated in place; a role change is a
    delete of the old tuple followed by a write of the new one.
    """

    entity: ObjectRef
    relation: str
    subject: SubjectRef

    @classmethod
    def of(
        cls,
        entity_type: ResourceType | str,
        entity_id: str,
        relation: RelationType | str,
        subject_type: ResourceType | str,
        subject_id: str,
        subject_relation: str | None = None,
    ) -> RelationshipTuple:
        """Build a tuple from plain type/id values."""
        return cls(
            entity=ObjectRef(type=str(entity_type), id=entity_id),
            relation=str(relation),
            subject=SubjectRef(
                type=str(subject_type),
                id=subject_id,
                relation=subject_relation,
            ),
        )

    @property
    def resource(self) -> str:
        """Format entity as 'type:id' string."""
        return str(self.entity)

    @property
    def subject_str(self) -> str:
        """Format subject as 'type:id[#relation]' string."""
        return str(self.subject)

    def __str__(self) -> str:
        return f"{self.entity}#{self.relation}@{self.subject}"


@dataclass(frozen=True)
class PermissionCheck:
    """A single permission question: may `subject` perform `action` on an entity.

    Used as the permission cache key. Two logically identical checks are
    always equal and hash the same, whatever order the caller supplied the
    fields in.
    """

    subject_id: str
    action: str
    entity_type: str
    entity_id: str
    subject_type: str = ResourceType.USER.value

    def __post_init__(self) -> None:
        # Normalize enum members so keys built from enums and plain strings collide
        for name in (
            "subject_id",
            "action",
            "entity_type",
            "entity_id",
            "subject_type",
        ):
            object.__setattr__(self, name, str(getattr(self, name)))

    @property
    def entity(self) -> ObjectRef:
        return ObjectRef(type=str(self.entity_type), id=self.entity_id)

    @property
    def subject(self) -> SubjectRef:
        return SubjectRef(type=str(self.subject_type), id=self.subject_id)

    @property
    def key(self) -> str:
        """Deterministic serialization, e.g. ``user:u1#manage@tenant:t1``."""
        return (
            f"{self.subject_type}:{self.subject_id}"
            f"#{self.action}"
            f"@{self.entity_type}:{self.entity_id}"
        )
