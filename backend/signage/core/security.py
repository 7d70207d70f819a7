"""
Actor identity as forwarded by the upstream gateway.

Authentication happens before requests reach this service; the gateway
passes the tenant, user and role through headers and they are trusted here.
"""
import enum
import uuid
from dataclasses import dataclass

from signage.core.exceptions import UnauthorizedError


class ActorRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    EDITOR = "editor"
    VIEWER = "viewer"


# Roles allowed to schedule content that has not been through approval
APPROVAL_EXEMPT_ROLES = frozenset({ActorRole.OWNER, ActorRole.ADMIN, ActorRole.MANAGER})


@dataclass(frozen=True)
class Actor:
    tenant_id: uuid.UUID
    user_id: uuid.UUID | None = None
    role: ActorRole = ActorRole.VIEWER

    @property
    def requires_approval(self) -> bool:
        return self.role not in APPROVAL_EXEMPT_ROLES


def actor_from_headers(tenant_id: str | None, user_id: str | None, role: str | None) -> Actor:
    if not tenant_id:
        raise UnauthorizedError("X-Tenant-Id header is required")
    try:
        tenant = uuid.UUID(tenant_id)
        user = uuid.UUID(user_id) if user_id else None
    except ValueError:
        raise UnauthorizedError("Malformed actor identifiers")
    try:
        actor_role = ActorRole((role or ActorRole.VIEWER.value).strip().lower())
    except ValueError:
        raise UnauthorizedError(f"Unknown role: {role}")
    return Actor(tenant_id=tenant, user_id=user, role=actor_role)
