from __future__ import annotations
"""SQLAlchemy 2.0 async database engine and session management.

MySQL 8.0+ (asyncmy, utf8mb4) in production. Any async URL given through
DB_URL is accepted; SQLite gets a NullPool so connections never outlive
the event loop that opened them.
"""

import logging
import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote_plus

from sqlalchemy import DateTime, text
from sqlalchemy.dialects.mysql import DATETIME as MYSQL_DATETIME
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from storyforge.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "connect_args": {"connect_timeout": 30},
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_kwargs(settings.DATABASE_URL),
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)



class Base(DeclarativeBase):
    """Declarative base; every table defaults to utf8mb4 on MySQL."""

    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }


# Microsecond precision keeps "newest first" ordering stable within a second
Timestamp = DateTime().with_variant(MYSQL_DATETIME(fsp=6), "mysql")


def utcnow() -> datetime:
    """Naive UTC now, matching what the DATETIME columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id(prefix: str) -> str:
    """Short prefixed identifier, e.g. ``AST_1F3A9C0B``."""
    return f"{prefix}_{uuid.uuid4().hex[:8].upper()}"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: commit when the handler returns, roll back if it raises."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def _ensure_mysql_database() -> None:
    """CREATE DATABASE IF NOT EXISTS over a server-level connection."""
    server_url = (
        f"mysql+asyncmy://{settings.DB_USER}:{quote_plus(settings.DB_PASSWORD)}"
        f"@{settings.DB_HOST}:{settings.DB_PORT}/?charset=utf8mb4"
    )
    server_engine = create_async_engine(server_url, connect_args={"connect_timeout": 30})
    try:
        async with server_engine.begin() as conn:
            await conn.execute(text(
                f"CREATE DATABASE IF NOT EXISTS `{settings.DB_NAME}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            ))
    finally:
        await server_engine.dispose()


async def init_db() -> None:
    """Create missing tables; used at startup when AUTO_CREATE_TABLES is set.

    Alembic owns the schema everywhere else.
    """
    import storyforge.models  # noqa: F401  registers models on Base.metadata

    # A DB_URL override points at an existing database
    if settings.is_mysql and not settings.DB_URL:
        try:
            await _ensure_mysql_database()
        except Exception as e:
            logger.warning("Could not create database %s (may already exist): %s", settings.DB_NAME, e)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
