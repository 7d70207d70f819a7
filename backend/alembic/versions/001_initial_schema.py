"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    "content_type": ("playlist", "layout", "media", "scene"),
    "approval_status": ("draft", "pending", "approved", "rejected"),
    "event_type": ("content", "screen_off"),
    "repeat_type": ("daily", "weekly"),
    "campaign_severity": ("normal", "emergency"),
    "campaign_status": ("draft", "scheduled", "active", "paused", "completed"),
    "preset_type": ("meal", "period", "custom"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _content_columns() -> list[sa.Column]:
    return [
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("approval_status", _enum("approval_status"), nullable=False, server_default="draft"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    # Content
    op.create_table("playlists", _id(), *_content_columns(), *_timestamps())
    op.create_table(
        "layouts", _id(), *_content_columns(),
        sa.Column("preview_url", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "media_assets", _id(), *_content_columns(),
        sa.Column("media_type", sa.String(50), nullable=False, server_default="image"),
        sa.Column("url", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "scenes", _id(), *_content_columns(),
        sa.Column("business_type", sa.String(100), nullable=True),
        *_timestamps(),
    )

    # Campaigns
    op.create_table(
        "campaigns",
        _id(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("severity", _enum("campaign_severity"), nullable=False, server_default="normal"),
        sa.Column("status", _enum("campaign_status"), nullable=False, server_default="draft"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("content_type", _enum("content_type"), nullable=False),
        sa.Column("content_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("targets", postgresql.JSONB(), nullable=True),
        *_timestamps(),
    )

    # Schedules
    op.create_table(
        "schedules",
        _id(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("filler_content_type", _enum("content_type"), nullable=True),
        sa.Column("filler_content_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "schedule_entries",
        _id(),
        sa.Column("schedule_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("content_type", _enum("content_type"), nullable=False, server_default="playlist"),
        sa.Column("content_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("days_of_week", postgresql.JSONB(), nullable=False, server_default=sa.text("'[1, 2, 3, 4, 5]'::jsonb")),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("event_type", _enum("event_type"), nullable=False, server_default="content"),
        sa.Column("repeat_type", _enum("repeat_type"), nullable=True),
        sa.Column("repeat_config", postgresql.JSONB(), nullable=True),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )

    # Screens
    op.create_table(
        "screen_groups",
        _id(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("assigned_schedule_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("schedules.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column("default_scene_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("scenes.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "devices",
        _id(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("screen_group_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("screen_groups.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column("assigned_schedule_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("schedules.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column("default_scene_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("scenes.id", ondelete="SET NULL"), nullable=True),
        sa.Column("needs_refresh", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    # Dayparts (tenant_id NULL = system preset)
    op.create_table(
        "daypart_presets",
        _id(),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=True, index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("preset_type", _enum("preset_type"), nullable=False, server_default="custom"),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("days_of_week", postgresql.JSONB(), nullable=False, server_default=sa.text("'[0, 1, 2, 3, 4, 5, 6]'::jsonb")),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("daypart_presets")
    op.drop_table("devices")
    op.drop_table("screen_groups")
    op.drop_table("schedule_entries")
    op.drop_table("schedules")
    op.drop_table("campaigns")
    op.drop_table("scenes")
    op.drop_table("media_assets")
    op.drop_table("layouts")
    op.drop_table("playlists")

    for name in reversed(ENUMS):
        op.execute(f"DROP TYPE IF EXISTS {name}")
