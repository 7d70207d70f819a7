"""
Content catalog — the closed set of content kinds a schedule can point at.

Each kind owns its lookups (name, thumbnail, approval) so callers pick the
kind from the ContentType member instead of branching on type strings.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from signage.models.content import ApprovalStatus, ContentType, Layout, MediaAsset, Playlist, Scene

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentRef:
    """A typed pointer to a playlist, layout, media asset or scene."""

    content_type: ContentType
    content_id: uuid.UUID | str

    @classmethod
    def maybe(cls, content_type: ContentType | str | None, content_id: Any) -> "ContentRef | None":
        if content_type is None or content_id is None:
            return None
        return cls(ContentType(content_type), content_id)


class ContentKind:
    """Capability shared by every content kind."""

    content_type: ContentType
    model: type

    async def load(self, db: AsyncSession, content_id: uuid.UUID | str):
        result = await db.execute(select(self.model).where(self.model.id == _as_uuid(content_id)))
        return result.scalar_one_or_none()

    async def resolve_name(self, db: AsyncSession, content_id: uuid.UUID | str) -> str | None:
        item = await self.load(db, content_id)
        return item.name if item else None

    async def resolve_thumbnail(self, db: AsyncSession, content_id: uuid.UUID | str) -> str | None:
        item = await self.load(db, content_id)
        return self.thumbnail_of(item) if item else None

    def thumbnail_of(self, item) -> str | None:
        return item.thumbnail_url

    def is_approved(self, item) -> bool:
        return item.approval_status == ApprovalStatus.APPROVED

    async def names_for(self, db: AsyncSession, content_ids: Iterable[uuid.UUID | str]) -> dict[str, str]:
        ids = {_as_uuid(cid) for cid in content_ids}
        if not ids:
            return {}
        result = await db.execute(select(self.model.id, self.model.name).where(self.model.id.in_(ids)))
        return {str(row[0]): row[1] for row in result.all()}


class PlaylistKind(ContentKind):
    content_type = ContentType.PLAYLIST
    model = Playlist


class LayoutKind(ContentKind):
    content_type = ContentType.LAYOUT
    model = Layout

    def thumbnail_of(self, item) -> str | None:
        return item.thumbnail_url or item.preview_url


class MediaKind(ContentKind):
    content_type = ContentType.MEDIA
    model = MediaAsset

    def thumbnail_of(self, item) -> str | None:
        # Images are their own thumbnail
        if item.thumbnail_url:
            return item.thumbnail_url
        return item.url if item.media_type == "image" else None


class SceneKind(ContentKind):
    content_type = ContentType.SCENE
    model = Scene

    def is_approved(self, item) -> bool:
        # Inactive scenes never play even if approved
        return item.is_active and item.approval_status == ApprovalStatus.APPROVED


CONTENT_KINDS: dict[ContentType, ContentKind] = {
    kind.content_type: kind for kind in (PlaylistKind(), LayoutKind(), MediaKind(), SceneKind())
}


def kind_for(content_type: ContentType | str) -> ContentKind:
    return CONTENT_KINDS[ContentType(content_type)]


async def resolve_names(db: AsyncSession, refs: Iterable[ContentRef | None]) -> dict[ContentRef, str]:
    """Resolve display names for many refs with one query per kind."""
    by_type: dict[ContentType, set[str]] = {}
    for ref in refs:
        if ref is not None:
            by_type.setdefault(ref.content_type, set()).add(str(ref.content_id))

    names: dict[ContentRef, str] = {}
    for content_type, ids in by_type.items():
        found = await kind_for(content_type).names_for(db, ids)
        for content_id, name in found.items():
            names[ContentRef(content_type, uuid.UUID(content_id))] = name
    return names


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
