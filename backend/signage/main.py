import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from signage.config import settings
from signage.core.exceptions import register_exception_handlers
from signage.core.logging_config import configure_logging
from signage.core.middleware import setup_middleware

logger = logging.getLogger(__name__)

_tables_created = False


async def ensure_tables():
    """Create DB tables if they haven't been created yet."""
    global _tables_created
    if _tables_created:
        return
    from signage.db.engine import engine
    from signage.db.base import Base
    import signage.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    _tables_created = True


async def _seed_dayparts():
    """Insert the shared meal and period presets if they are missing."""
    from signage.db.session import session_scope
    from signage.services.daypart_service import seed_system_presets

    async with session_scope() as db:
        await seed_system_presets(db)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Startup: schema and system presets; the database must be reachable
    await ensure_tables()
    await _seed_dayparts()
    logger.info("Signage engine started (%s, overnight policy=%s)", settings.APP_ENV, settings.OVERNIGHT_WINDOW_POLICY)
    yield
    from signage.db.engine import engine
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Signage Scheduling API",
        version="0.1.0",
        description="Schedule and content resolution engine for digital signage",
        debug=settings.APP_DEBUG,
        lifespan=lifespan,
    )

    setup_middleware(app)
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    from signage.api.v1 import router as api_v1_router
    app.include_router(api_v1_router, prefix="/api/v1")

    return app


app = create_app()
