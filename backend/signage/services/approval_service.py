"""Content approval gate for schedule writes."""
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from signage.core.exceptions import ContentNotApprovedError, NotFoundError
from signage.core.security import Actor
from signage.services.content_catalog import ContentRef, kind_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApprovalResult:
    allowed: bool
    reason: str | None = None


async def can_assign_content(db: AsyncSession, actor: Actor, ref: ContentRef) -> ApprovalResult:
    kind = kind_for(ref.content_type)
    item = await kind.load(db, ref.content_id)
    if item is None or item.tenant_id != actor.tenant_id:
        raise NotFoundError(f"{ref.content_type.value.capitalize()} not found", content_id=str(ref.content_id))

    if not actor.requires_approval:
        return ApprovalResult(allowed=True)
    if kind.is_approved(item):
        return ApprovalResult(allowed=True)

    status = getattr(item.approval_status, "value", item.approval_status)
    if status == "approved":
        reason = f"{ref.content_type.value} '{item.name}' is inactive"
    else:
        reason = f"{ref.content_type.value} '{item.name}' is {status}, not approved"
    return ApprovalResult(allowed=False, reason=reason)


async def ensure_can_assign(db: AsyncSession, actor: Actor, ref: ContentRef | None) -> None:
    """Raise ContentNotApprovedError when the actor may not schedule this content."""
    if ref is None:
        return
    result = await can_assign_content(db, actor, ref)
    if not result.allowed:
        logger.info("Approval gate blocked %s %s for role %s: %s",
                    ref.content_type.value, ref.content_id, actor.role.value, result.reason)
        raise ContentNotApprovedError(result.reason)
