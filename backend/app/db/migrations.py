"""
Миграции схемы сервиса флагов.

Каждая миграция применяется один раз в отдельной транзакции; применённые
версии фиксируются в таблице schema_migrations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import asyncpg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    version: str
    statements: tuple[str, ...]


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version="0001_features",
        statements=(
            """
            CREATE TABLE IF NOT EXISTS features (
                id VARCHAR(255) PRIMARY KEY,
                key VARCHAR(255) NOT NULL UNIQUE,
                name VARCHAR(255) NOT NULL,
                description TEXT,
                created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
            )
            """,
        ),
    ),
    Migration(
        version="0002_feature_states",
        statements=(
            """
            CREATE TABLE IF NOT EXISTS feature_states (
                id VARCHAR(255) PRIMARY KEY,
                feature_id VARCHAR(255) NOT NULL REFERENCES features (id),
                context_type VARCHAR(20) NOT NULL
                    CHECK (context_type IN ('global', 'organization', 'workspace')),
                context_id VARCHAR(255),
                state BOOLEAN NOT NULL,
                created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
            )
            """,
            # NULL context_id у global-состояний иначе не считается дублем
            """
            CREATE UNIQUE INDEX IF NOT EXISTS feature_context_unique
            ON feature_states (feature_id, context_type, COALESCE(context_id, ''))
            """,
        ),
    ),
)

_CREATE_VERSIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version VARCHAR(255) PRIMARY KEY,
        applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
"""


async def apply_migrations(
    pool: asyncpg.Pool, migrations: tuple[Migration, ...] = MIGRATIONS
) -> list[str]:
    """Применяет недостающие миграции и возвращает их версии."""
    applied: list[str] = []
    async with pool.acquire() as conn:
        await conn.execute(_CREATE_VERSIONS_TABLE)
        rows = await conn.fetch("SELECT version FROM schema_migrations")
        done = {row["version"] for row in rows}

        for migration in migrations:
            if migration.version in done:
                continue
            async with conn.transaction():
                for statement in migration.statements:
                    await conn.execute(statement)
                await conn.execute(
                    "INSERT INTO schema_migrations (version) VALUES ($1)",
                    migration.version,
                )
            logger.info("Migration applied", extra={"migration": migration.version})
            applied.append(migration.version)

    return applied


__all__ = ["MIGRATIONS", "Migration", "apply_migrations"]
