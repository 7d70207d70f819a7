import uuid
from collections.abc import AsyncIterator
from datetime import time

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from signage.db.base import Base
from signage.db.session import get_db, get_session_factory
from signage.main import create_app
from signage.models.content import ApprovalStatus, Playlist, Scene
from signage.models.schedule import Schedule
from signage.models.schedule_entry import ScheduleEntry
from signage.services.decision_cache import decision_cache

# Use SQLite for testing (no PostgreSQL needed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# SQLite compatibility: compile PostgreSQL types to SQLite equivalents
from sqlalchemy.dialects.postgresql import UUID as PG_UUID, JSONB, ENUM as PG_ENUM


@event.listens_for(engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _register_sqlite_compilers():
    """Register SQLite-compatible compilers for PG types."""
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_UUID, "sqlite")
    def compile_uuid(type_, compiler, **kw):
        return "VARCHAR(36)"

    @compiles(JSONB, "sqlite")
    def compile_jsonb(type_, compiler, **kw):
        return "TEXT"

    @compiles(PG_ENUM, "sqlite")
    def compile_enum(type_, compiler, **kw):
        return "VARCHAR(50)"


_register_sqlite_compilers()

TENANT_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER_TENANT_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Reset the polling rate limiter and decision cache between tests."""
    from signage.core.middleware import limiter

    limiter.reset()
    decision_cache.clear()
    yield
    limiter.reset()
    decision_cache.clear()


@pytest_asyncio.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    # Import all models
    import signage.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def app(db_session: AsyncSession):
    app = create_app()

    async def override_get_db():
        yield db_session

    async def override_get_session_factory():
        return TestSessionLocal

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = override_get_session_factory
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def actor_headers(role: str = "manager", tenant_id: uuid.UUID = TENANT_ID) -> dict:
    return {"X-Tenant-Id": str(tenant_id), "X-User-Id": str(uuid.uuid4()), "X-User-Role": role}


@pytest.fixture
def manager_headers() -> dict:
    return actor_headers("manager")


@pytest.fixture
def editor_headers() -> dict:
    return actor_headers("editor")


@pytest_asyncio.fixture
async def make_playlist(db_session: AsyncSession):
    async def _make(name: str = "Lunch Menu", status: ApprovalStatus = ApprovalStatus.APPROVED,
                    tenant_id: uuid.UUID = TENANT_ID) -> Playlist:
        playlist = Playlist(id=uuid.uuid4(), tenant_id=tenant_id, name=name, approval_status=status)
        db_session.add(playlist)
        await db_session.commit()
        await db_session.refresh(playlist)
        return playlist
    return _make


@pytest_asyncio.fixture
async def make_scene(db_session: AsyncSession):
    async def _make(name: str = "Welcome", tenant_id: uuid.UUID = TENANT_ID) -> Scene:
        scene = Scene(id=uuid.uuid4(), tenant_id=tenant_id, name=name, approval_status=ApprovalStatus.APPROVED)
        db_session.add(scene)
        await db_session.commit()
        await db_session.refresh(scene)
        return scene
    return _make


@pytest_asyncio.fixture
async def make_schedule(db_session: AsyncSession):
    async def _make(name: str = "Cafe", timezone: str = "UTC", tenant_id: uuid.UUID = TENANT_ID, **kwargs) -> Schedule:
        schedule = Schedule(id=uuid.uuid4(), tenant_id=tenant_id, name=name, timezone=timezone, **kwargs)
        db_session.add(schedule)
        await db_session.commit()
        await db_session.refresh(schedule)
        return schedule
    return _make


@pytest_asyncio.fixture
async def make_entry(db_session: AsyncSession):
    async def _make(schedule: Schedule, content_id: uuid.UUID | None, start: time, end: time,
                    days: list[int] | None = None, priority: int = 0, **kwargs) -> ScheduleEntry:
        entry = ScheduleEntry(
            id=uuid.uuid4(),
            schedule_id=schedule.id,
            content_id=content_id,
            start_time=start,
            end_time=end,
            days_of_week=days if days is not None else [0, 1, 2, 3, 4, 5, 6],
            priority=priority,
            **kwargs,
        )
        db_session.add(entry)
        await db_session.commit()
        await db_session.refresh(entry)
        return entry
    return _make


@pytest.fixture
def other_tenant_headers() -> dict:
    return actor_headers("owner", OTHER_TENANT_ID)


@pytest.fixture
def tenant_id() -> uuid.UUID:
    return TENANT_ID
