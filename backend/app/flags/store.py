"""Хранилище флагов: протокол и in-memory реализация."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Protocol

from app.core.ids import generate_id
from app.flags.errors import (
    DuplicateFeatureStateError,
    FeatureInUseError,
    FeatureKeyConflictError,
    FeatureKeyLockedError,
    FeatureNotFoundError,
    FeatureStateNotFoundError,
)
from app.flags.models import (
    ContextType,
    Feature,
    FeatureCreate,
    FeatureState,
    FeatureStateCreate,
    FeatureStateUpdate,
    FeatureUpdate,
)


class FlagStore(Protocol):
    async def list_features(self) -> list[Feature]: ...

    async def list_feature_states(self) -> list[FeatureState]: ...

    async def get_feature(self, feature_id: str) -> Feature | None: ...

    async def get_feature_by_key(self, key: str) -> Feature | None: ...

    async def create_feature(self, payload: FeatureCreate) -> Feature: ...

    async def update_feature(self, feature_id: str, payload: FeatureUpdate) -> Feature: ...

    async def delete_feature(self, feature_id: str) -> Feature: ...

    async def create_feature_state(self, payload: FeatureStateCreate) -> FeatureState: ...

    async def update_feature_state(
        self, state_id: str, payload: FeatureStateUpdate
    ) -> FeatureState: ...

    async def delete_feature_state(self, state_id: str) -> FeatureState: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


_StateTuple = tuple[str, ContextType, str | None]


class InMemoryFlagStore:
    """In-memory хранилище флагов для тестов и локального запуска."""

    def __init__(self) -> None:
        self._features: dict[str, Feature] = {}
        self._states: dict[str, FeatureState] = {}
        self._lock = asyncio.Lock()

    # --- чтение ---
    async def list_features(self) -> list[Feature]:
        return sorted(self._features.values(), key=lambda f: f.key)

    async def list_feature_states(self) -> list[FeatureState]:
        return [self._joined(state) for state in self._states.values()]

    async def get_feature(self, feature_id: str) -> Feature | None:
        return self._features.get(feature_id)

    async def get_feature_by_key(self, key: str) -> Feature | None:
        for feature in self._features.values():
            if feature.key == key:
                return feature
        return None

    # --- флаги ---
    async def create_feature(self, payload: FeatureCreate) -> Feature:
        async with self._lock:
            if await self.get_feature_by_key(payload.key) is not None:
                raise FeatureKeyConflictError(payload.key)
            now = _now()
            feature = Feature(
                id=generate_id("feature"),
                key=payload.key,
                name=payload.name,
                description=payload.description,
                created_at=now,
                updated_at=now,
            )
            self._features[feature.id] = feature
            return feature

    async def update_feature(self, feature_id: str, payload: FeatureUpdate) -> Feature:
        async with self._lock:
            current = self._features.get(feature_id)
            if current is None:
                raise FeatureNotFoundError()
            changes = payload.model_dump(exclude_unset=True)
            new_key = changes.get("key")
            if new_key is not None and new_key != current.key:
                if self._is_referenced(feature_id):
                    raise FeatureKeyLockedError(current.key)
                if await self.get_feature_by_key(new_key) is not None:
                    raise FeatureKeyConflictError(new_key)
            changes = {k: v for k, v in changes.items() if v is not None or k == "description"}
            updated = current.model_copy(update={**changes, "updated_at": _now()})
            self._features[feature_id] = updated
            return updated

    async def delete_feature(self, feature_id: str) -> Feature:
        async with self._lock:
            feature = self._features.get(feature_id)
            if feature is None:
                raise FeatureNotFoundError()
            if self._is_referenced(feature_id):
                raise FeatureInUseError(feature_id)
            return self._features.pop(feature_id)

    # --- состояния ---
    async def create_feature_state(self, payload: FeatureStateCreate) -> FeatureState:
        async with self._lock:
            feature = await self._resolve_feature(payload.feature_id, payload.feature_key)
            identity = (feature.id, payload.context_type, payload.context_id)
            self._ensure_unique(identity)
            now = _now()
            state = FeatureState(
                id=generate_id("feature_state"),
                feature_id=feature.id,
                context_type=payload.context_type,
                context_id=payload.context_id,
                state=payload.state,
                created_at=now,
                updated_at=now,
            )
            self._states[state.id] = state
            return self._joined(state)

    async def update_feature_state(
        self, state_id: str, payload: FeatureStateUpdate
    ) -> FeatureState:
        async with self._lock:
            current = self._states.get(state_id)
            if current is None:
                raise FeatureStateNotFoundError()
            feature_id = payload.feature_id or current.feature_id
            if feature_id not in self._features:
                raise FeatureNotFoundError()
            self._ensure_unique(
                (feature_id, payload.context_type, payload.context_id), exclude=state_id
            )
            updated = current.model_copy(
                update={
                    "feature_id": feature_id,
                    "context_type": payload.context_type,
                    "context_id": payload.context_id,
                    "state": payload.state,
                    "updated_at": _now(),
                }
            )
            self._states[state_id] = updated
            return self._joined(updated)

    async def delete_feature_state(self, state_id: str) -> FeatureState:
        async with self._lock:
            state = self._states.pop(state_id, None)
            if state is None:
                raise FeatureStateNotFoundError()
            return self._joined(state)

    # --- вспомогательное ---
    async def _resolve_feature(self, feature_id: str | None, feature_key: str | None) -> Feature:
        feature = None
        if feature_id:
            feature = self._features.get(feature_id)
        elif feature_key:
            feature = await self.get_feature_by_key(feature_key)
        if feature is None:
            raise FeatureNotFoundError()
        return feature

    def _is_referenced(self, feature_id: str) -> bool:
        return any(s.feature_id == feature_id for s in self._states.values())

    def _ensure_unique(self, identity: _StateTuple, *, exclude: str | None = None) -> None:
        for state_id, state in self._states.items():
            if state_id == exclude:
                continue
            if (state.feature_id, state.context_type, state.context_id) == identity:
                raise DuplicateFeatureStateError()

    def _joined(self, state: FeatureState) -> FeatureState:
        feature = self._features.get(state.feature_id or "")
        return state.model_copy(update={"feature_key": feature.key if feature else None})


__all__ = ["FlagStore", "InMemoryFlagStore"]
