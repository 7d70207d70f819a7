"""
Content tables referenced by schedule entries, filler and campaigns.

Only the columns the scheduling engine reads are modelled here; rendering
details live with the editors that own these tables.
"""
import enum
import uuid

from sqlalchemy import Boolean, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from signage.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum


class ContentType(str, enum.Enum):
    PLAYLIST = "playlist"
    LAYOUT = "layout"
    MEDIA = "media"
    SCENE = "scene"


class ApprovalStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContentMixin:
    tenant_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        pg_enum(ApprovalStatus, "approval_status"),
        default=ApprovalStatus.DRAFT,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Playlist(ContentMixin, UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "playlists"


class Layout(ContentMixin, UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "layouts"

    preview_url: Mapped[str | None] = mapped_column(Text, nullable=True)


class MediaAsset(ContentMixin, UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "media_assets"

    media_type: Mapped[str] = mapped_column(String(50), default="image", nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)


class Scene(ContentMixin, UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "scenes"

    business_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
