from __future__ import annotations

import logging

import asyncpg

from app.core.config import Settings

logger = logging.getLogger(__name__)


async def create_pool(settings: Settings) -> asyncpg.Pool:
    """Создаёт пул соединений; владельцем пула является lifespan приложения."""
    pool = await asyncpg.create_pool(
        dsn=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=settings.db_command_timeout,
    )
    logger.info("Database pool created (max_size=%d)", settings.db_pool_max_size)
    return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return
    await pool.close()
    logger.info("Database pool closed")


__all__ = ["create_pool", "close_pool"]
