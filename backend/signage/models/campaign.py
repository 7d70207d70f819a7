import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from signage.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from signage.models.content import ContentType


class CampaignSeverity(str, enum.Enum):
    NORMAL = "normal"
    EMERGENCY = "emergency"


class CampaignStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class Campaign(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "campaigns"

    tenant_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[CampaignSeverity] = mapped_column(
        pg_enum(CampaignSeverity, "campaign_severity"), default=CampaignSeverity.NORMAL, nullable=False
    )
    status: Mapped[CampaignStatus] = mapped_column(
        pg_enum(CampaignStatus, "campaign_status"), default=CampaignStatus.DRAFT, nullable=False
    )
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Own time window; NULL bounds are open
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    content_type: Mapped[ContentType] = mapped_column(pg_enum(ContentType, "content_type"), nullable=False)
    content_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)

    # {"device_ids": [...], "group_ids": [...]}
    targets: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
