"""Database engine factory for SQLite (local/test) and Postgres (production)."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from app.core.config import settings

logger = logging.getLogger(__name__)

_POSTGRES_POOL_KWARGS: dict[str, Any] = {
    "poolclass": QueuePool,
    "pool_size": 5,
    "max_overflow": 10,
    # Fail fast when pool exhausted - routes translate this into a 503
    "pool_timeout": 5,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}

_POSTGRES_CONNECT_ARGS: dict[str, Any] = {
    "connect_timeout": 5,
    "application_name": "festival_archive_api",
    "options": "-c statement_timeout=15000",
}


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _add_pool_events(engine: Engine, pool_name: str) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        logger.debug("[%s] Database connection established", pool_name)
        if _is_sqlite(str(engine.url)):
            # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled per connection
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    @event.listens_for(engine, "checkout")
    def _on_checkout(_dbapi_connection: Any, _connection_record: Any, _proxy: Any) -> None:
        logger.debug("[%s] Connection checked out from pool", pool_name)

    @event.listens_for(engine, "checkin")
    def _on_checkin(_dbapi_connection: Any, _connection_record: Any) -> None:
        logger.debug("[%s] Connection returned to pool", pool_name)


def build_engine(db_url: str | None = None, *, pool_name: str = "api") -> Engine:
    """Create an engine for the given URL with dialect-appropriate pooling."""
    url = db_url or settings.database_url
    if _is_sqlite(url):
        engine = create_engine(
            url,
            echo=settings.database_echo,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            url,
            echo=settings.database_echo,
            connect_args=dict(_POSTGRES_CONNECT_ARGS),
            **_POSTGRES_POOL_KWARGS,
        )
    _add_pool_events(engine, pool_name)
    logger.info("[%s] Database engine created for dialect %s", pool_name, engine.dialect.name)
    return engine
