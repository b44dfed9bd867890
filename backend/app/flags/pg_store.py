"""Хранилище флагов в PostgreSQL."""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from app.core.ids import generate_id
from app.db.queries import flags as queries
from app.flags.errors import (
    DuplicateFeatureStateError,
    FeatureInUseError,
    FeatureKeyConflictError,
    FeatureKeyLockedError,
    FeatureNotFoundError,
    FeatureStateNotFoundError,
)
from app.flags.models import (
    Feature,
    FeatureCreate,
    FeatureState,
    FeatureStateCreate,
    FeatureStateUpdate,
    FeatureUpdate,
)

logger = logging.getLogger(__name__)


def _feature(row: dict[str, Any]) -> Feature:
    return Feature.model_validate(row)


def _feature_state(row: dict[str, Any]) -> FeatureState:
    return FeatureState.model_validate(row)


class PostgresFlagStore:
    """
    Реализация FlagStore поверх asyncpg.

    Пул передаётся явно при создании; уникальность и внешние ключи
    обеспечивает база, нарушения переводятся в ошибки хранилища.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def list_features(self) -> list[Feature]:
        rows = await queries.fetch_features(self._pool)
        return [_feature(row) for row in rows]

    async def list_feature_states(self) -> list[FeatureState]:
        rows = await queries.fetch_feature_states(self._pool)
        return [_feature_state(row) for row in rows]

    async def get_feature(self, feature_id: str) -> Feature | None:
        row = await queries.fetch_feature(self._pool, feature_id=feature_id)
        return _feature(row) if row else None

    async def get_feature_by_key(self, key: str) -> Feature | None:
        row = await queries.fetch_feature_by_key(self._pool, key=key)
        return _feature(row) if row else None

    async def create_feature(self, payload: FeatureCreate) -> Feature:
        try:
            row = await queries.insert_feature(
                self._pool,
                feature_id=generate_id("feature"),
                key=payload.key,
                name=payload.name,
                description=payload.description,
            )
        except asyncpg.UniqueViolationError as exc:
            raise FeatureKeyConflictError(payload.key) from exc
        logger.info("Feature created", extra={"feature_key": payload.key})
        return _feature(row)

    async def update_feature(self, feature_id: str, payload: FeatureUpdate) -> Feature:
        changes = payload.model_dump(exclude_unset=True)
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                current = await queries.fetch_feature_for_update(conn, feature_id=feature_id)
                if current is None:
                    raise FeatureNotFoundError()
                key = changes.get("key") or current["key"]
                if key != current["key"]:
                    if await queries.count_feature_states(conn, feature_id=feature_id):
                        raise FeatureKeyLockedError(current["key"])
                try:
                    row = await queries.update_feature(
                        conn,
                        feature_id=feature_id,
                        key=key,
                        name=changes.get("name") or current["name"],
                        description=changes.get("description", current["description"]),
                    )
                except asyncpg.UniqueViolationError as exc:
                    raise FeatureKeyConflictError(key) from exc
        if row is None:
            raise FeatureNotFoundError()
        return _feature(row)

    async def delete_feature(self, feature_id: str) -> Feature:
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                if await queries.fetch_feature_for_update(conn, feature_id=feature_id) is None:
                    raise FeatureNotFoundError()
                if await queries.count_feature_states(conn, feature_id=feature_id):
                    raise FeatureInUseError(feature_id)
                try:
                    row = await queries.delete_feature(conn, feature_id=feature_id)
                except asyncpg.ForeignKeyViolationError as exc:
                    raise FeatureInUseError(feature_id) from exc
        if row is None:
            raise FeatureNotFoundError()
        return _feature(row)

    async def create_feature_state(self, payload: FeatureStateCreate) -> FeatureState:
        feature = await self._resolve_feature(payload.feature_id, payload.feature_key)
        state_id = generate_id("feature_state")
        try:
            await queries.insert_feature_state(
                self._pool,
                state_id=state_id,
                feature_id=feature.id,
                context_type=payload.context_type.value,
                context_id=payload.context_id,
                state=payload.state,
            )
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateFeatureStateError() from exc
        except asyncpg.ForeignKeyViolationError as exc:
            raise FeatureNotFoundError() from exc
        return await self._joined_state(state_id)

    async def update_feature_state(
        self, state_id: str, payload: FeatureStateUpdate
    ) -> FeatureState:
        try:
            updated = await queries.update_feature_state(
                self._pool,
                state_id=state_id,
                feature_id=payload.feature_id,
                context_type=payload.context_type.value,
                context_id=payload.context_id,
                state=payload.state,
            )
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateFeatureStateError() from exc
        except asyncpg.ForeignKeyViolationError as exc:
            raise FeatureNotFoundError() from exc
        if not updated:
            raise FeatureStateNotFoundError()
        return await self._joined_state(state_id)

    async def delete_feature_state(self, state_id: str) -> FeatureState:
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                row = await queries.fetch_feature_state(conn, state_id=state_id)
                if row is None:
                    raise FeatureStateNotFoundError()
                await queries.delete_feature_state(conn, state_id=state_id)
        return _feature_state(row)

    async def _resolve_feature(self, feature_id: str | None, feature_key: str | None) -> Feature:
        feature = None
        if feature_id:
            feature = await self.get_feature(feature_id)
        elif feature_key:
            feature = await self.get_feature_by_key(feature_key)
        if feature is None:
            raise FeatureNotFoundError()
        return feature

    async def _joined_state(self, state_id: str) -> FeatureState:
        row = await queries.fetch_feature_state(self._pool, state_id=state_id)
        if row is None:
            raise FeatureStateNotFoundError()
        return _feature_state(row)


__all__ = ["PostgresFlagStore"]
