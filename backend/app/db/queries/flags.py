from __future__ import annotations

from typing import Any, Union

import asyncpg

Executor = Union[asyncpg.Pool, asyncpg.Connection]

_FEATURE_COLUMNS = "id, key, name, description, created_at, updated_at"

_STATE_COLUMNS = """
    fs.id, fs.feature_id, f.key AS feature_key, fs.context_type, fs.context_id,
    fs.state, fs.created_at, fs.updated_at
"""


async def fetch_features(db: Executor) -> list[dict[str, Any]]:
    rows = await db.fetch(f"SELECT {_FEATURE_COLUMNS} FROM features ORDER BY key")
    return [dict(row) for row in rows]


async def fetch_feature(db: Executor, *, feature_id: str) -> dict[str, Any] | None:
    row = await db.fetchrow(f"SELECT {_FEATURE_COLUMNS} FROM features WHERE id = $1", feature_id)
    return dict(row) if row else None


async def fetch_feature_for_update(db: Executor, *, feature_id: str) -> dict[str, Any] | None:
    """Блокирует строку флага до конца транзакции; FK-проверка вставки состояния ждёт её."""
    row = await db.fetchrow(
        f"SELECT {_FEATURE_COLUMNS} FROM features WHERE id = $1 FOR UPDATE", feature_id
    )
    return dict(row) if row else None


async def fetch_feature_by_key(db: Executor, *, key: str) -> dict[str, Any] | None:
    row = await db.fetchrow(f"SELECT {_FEATURE_COLUMNS} FROM features WHERE key = $1", key)
    return dict(row) if row else None


async def insert_feature(
    db: Executor, *, feature_id: str, key: str, name: str, description: str | None
) -> dict[str, Any]:
    sql = f"""
        INSERT INTO features (id, key, name, description)
        VALUES ($1, $2, $3, $4)
        RETURNING {_FEATURE_COLUMNS}
    """
    row = await db.fetchrow(sql, feature_id, key, name, description)
    return dict(row)


async def update_feature(
    db: Executor, *, feature_id: str, key: str, name: str, description: str | None
) -> dict[str, Any] | None:
    sql = f"""
        UPDATE features
        SET key = $2, name = $3, description = $4, updated_at = now()
        WHERE id = $1
        RETURNING {_FEATURE_COLUMNS}
    """
    row = await db.fetchrow(sql, feature_id, key, name, description)
    return dict(row) if row else None


async def delete_feature(db: Executor, *, feature_id: str) -> dict[str, Any] | None:
    row = await db.fetchrow(
        f"DELETE FROM features WHERE id = $1 RETURNING {_FEATURE_COLUMNS}", feature_id
    )
    return dict(row) if row else None


async def count_feature_states(db: Executor, *, feature_id: str) -> int:
    value = await db.fetchval(
        "SELECT count(*) FROM feature_states WHERE feature_id = $1", feature_id
    )
    return int(value or 0)


async def fetch_feature_states(db: Executor) -> list[dict[str, Any]]:
    sql = f"""
        SELECT {_STATE_COLUMNS}
        FROM feature_states fs
        JOIN features f ON f.id = fs.feature_id
        ORDER BY f.key, fs.context_type, fs.context_id NULLS FIRST
    """
    rows = await db.fetch(sql)
    return [dict(row) for row in rows]


async def fetch_feature_state(db: Executor, *, state_id: str) -> dict[str, Any] | None:
    sql = f"""
        SELECT {_STATE_COLUMNS}
        FROM feature_states fs
        JOIN features f ON f.id = fs.feature_id
        WHERE fs.id = $1
    """
    row = await db.fetchrow(sql, state_id)
    return dict(row) if row else None


async def insert_feature_state(
    db: Executor,
    *,
    state_id: str,
    feature_id: str,
    context_type: str,
    context_id: str | None,
    state: bool,
) -> None:
    sql = """
        INSERT INTO feature_states (id, feature_id, context_type, context_id, state)
        VALUES ($1, $2, $3, $4, $5)
    """
    await db.execute(sql, state_id, feature_id, context_type, context_id, state)


async def update_feature_state(
    db: Executor,
    *,
    state_id: str,
    feature_id: str | None,
    context_type: str,
    context_id: str | None,
    state: bool,
) -> bool:
    sql = """
        UPDATE feature_states
        SET feature_id = COALESCE($2, feature_id),
            context_type = $3,
            context_id = $4,
            state = $5,
            updated_at = now()
        WHERE id = $1
    """
    status = await db.execute(sql, state_id, feature_id, context_type, context_id, state)
    return status != "UPDATE 0"


async def delete_feature_state(db: Executor, *, state_id: str) -> bool:
    status = await db.execute("DELETE FROM feature_states WHERE id = $1", state_id)
    return status != "DELETE 0"


__all__ = [
    "count_feature_states",
    "delete_feature",
    "delete_feature_state",
    "fetch_feature",
    "fetch_feature_by_key",
    "fetch_feature_for_update",
    "fetch_feature_state",
    "fetch_feature_states",
    "fetch_features",
    "insert_feature",
    "insert_feature_state",
    "update_feature",
    "update_feature_state",
]
