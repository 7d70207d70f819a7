import logging
import time

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from signage.config import settings

logger = logging.getLogger(__name__)


def watch_slow_queries(target: AsyncEngine, threshold: float | None = None) -> None:
    """Log statements slower than `threshold` seconds; polling runs several per request."""
    limit = settings.SLOW_QUERY_THRESHOLD_SECONDS if threshold is None else threshold

    @event.listens_for(target.sync_engine, "before_cursor_execute")
    def _started(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_started", []).append(time.monotonic())

    @event.listens_for(target.sync_engine, "after_cursor_execute")
    def _finished(conn, cursor, statement, parameters, context, executemany):
        started = conn.info.get("query_started")
        if not started:
            return
        elapsed = time.monotonic() - started.pop()
        if elapsed >= limit:
            logger.warning("Slow query (%.3fs): %s", elapsed, " ".join(statement.split())[:300])


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    pool_recycle=300,
)
watch_slow_queries(engine)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
