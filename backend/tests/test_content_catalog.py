import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from signage.core.exceptions import ContentNotApprovedError, NotFoundError
from signage.core.security import Actor, ActorRole
from signage.models.content import ApprovalStatus, ContentType, Layout, MediaAsset, Scene
from signage.services.approval_service import can_assign_content, ensure_can_assign
from signage.services.content_catalog import ContentRef, kind_for, resolve_names


@pytest.mark.asyncio
async def test_thumbnails_per_kind(db_session: AsyncSession, tenant_id):
    layout = Layout(id=uuid.uuid4(), tenant_id=tenant_id, name="Menu board", preview_url="https://cdn/layout.png")
    image = MediaAsset(id=uuid.uuid4(), tenant_id=tenant_id, name="Logo", media_type="image", url="https://cdn/logo.png")
    video = MediaAsset(id=uuid.uuid4(), tenant_id=tenant_id, name="Promo", media_type="video", url="https://cdn/promo.mp4")
    db_session.add_all([layout, image, video])
    await db_session.commit()

    assert await kind_for(ContentType.LAYOUT).resolve_thumbnail(db_session, layout.id) == "https://cdn/layout.png"
    assert await kind_for(ContentType.MEDIA).resolve_thumbnail(db_session, image.id) == "https://cdn/logo.png"
    assert await kind_for(ContentType.MEDIA).resolve_thumbnail(db_session, video.id) is None
    assert await kind_for("layout").resolve_name(db_session, layout.id) == "Menu board"
    assert await kind_for(ContentType.PLAYLIST).resolve_name(db_session, uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_resolve_names_batches_by_kind(db_session: AsyncSession, make_playlist, make_scene):
    playlist = await make_playlist("Lunch Menu")
    scene = await make_scene("Welcome")
    missing = ContentRef(ContentType.PLAYLIST, uuid.uuid4())

    names = await resolve_names(
        db_session,
        [ContentRef(ContentType.PLAYLIST, playlist.id), ContentRef(ContentType.SCENE, scene.id), missing, None],
    )
    assert names == {
        ContentRef(ContentType.PLAYLIST, playlist.id): "Lunch Menu",
        ContentRef(ContentType.SCENE, scene.id): "Welcome",
    }


@pytest.mark.asyncio
async def test_approval_depends_on_role(db_session: AsyncSession, tenant_id, make_playlist):
    draft = await make_playlist("Draft", status=ApprovalStatus.DRAFT)
    ref = ContentRef(ContentType.PLAYLIST, draft.id)

    editor = Actor(tenant_id=tenant_id, role=ActorRole.EDITOR)
    result = await can_assign_content(db_session, editor, ref)
    assert result.allowed is False
    assert "draft" in result.reason

    manager = Actor(tenant_id=tenant_id, role=ActorRole.MANAGER)
    assert (await can_assign_content(db_session, manager, ref)).allowed is True


@pytest.mark.asyncio
async def test_inactive_scene_is_not_assignable(db_session: AsyncSession, tenant_id):
    scene = Scene(
        id=uuid.uuid4(), tenant_id=tenant_id, name="Old welcome",
        approval_status=ApprovalStatus.APPROVED, is_active=False,
    )
    db_session.add(scene)
    await db_session.commit()

    editor = Actor(tenant_id=tenant_id, role=ActorRole.EDITOR)
    with pytest.raises(ContentNotApprovedError) as exc_info:
        await ensure_can_assign(db_session, editor, ContentRef(ContentType.SCENE, scene.id))
    assert "inactive" in exc_info.value.message


@pytest.mark.asyncio
async def test_content_of_other_tenant_is_not_found(db_session: AsyncSession, make_playlist):
    playlist = await make_playlist(tenant_id=uuid.uuid4())
    owner = Actor(tenant_id=uuid.uuid4(), role=ActorRole.OWNER)
    with pytest.raises(NotFoundError):
        await can_assign_content(db_session, owner, ContentRef(ContentType.PLAYLIST, playlist.id))
