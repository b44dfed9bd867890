"""Вспомогательные функции для тестирования."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from app.flags.models import ContextType, Feature, FeatureState


def make_feature(key: str, feature_id: str | None = None, name: str | None = None) -> Feature:
    return Feature(id=feature_id or f"ftr_{key}", key=key, name=name or key.title())


def make_state(
    context_type: str,
    context_id: str | None,
    state: bool,
    *,
    feature_id: str | None = None,
    feature_key: str | None = None,
    state_id: str | None = None,
) -> FeatureState:
    return FeatureState(
        id=state_id,
        feature_id=feature_id,
        feature_key=feature_key,
        context_type=ContextType(context_type),
        context_id=context_id,
        state=state,
    )


def evaluate(entry: dict[str, Any], context: dict[str, str]) -> str:
    """Эталонное вычисление варианта: первое совпавшее правило, иначе default."""
    for rule in entry.get("targeting", {}).get("rules", []):
        condition = rule.get("condition")
        if condition is None or context.get(condition["attribute"]) == condition["equals"]:
            return rule["variant"]
    return entry["defaultVariant"]


class FakeConnection:
    """Минималистичная имитация asyncpg: ответы задаются по методу."""

    def __init__(self) -> None:
        self.responses: dict[str, list[Any]] = {}
        self.calls: list[tuple[str, str, tuple]] = []

    def respond(self, method: str, *values: Any) -> None:
        self.responses.setdefault(method, []).extend(values)

    async def _answer(self, method: str, sql: str, args: tuple) -> Any:
        self.calls.append((method, " ".join(sql.split()), args))
        queue = self.responses.get(method)
        value = queue.pop(0) if queue else None
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch(self, sql: str, *args: Any) -> Any:
        return await self._answer("fetch", sql, args) or []

    async def fetchrow(self, sql: str, *args: Any) -> Any:
        return await self._answer("fetchrow", sql, args)

    async def fetchval(self, sql: str, *args: Any) -> Any:
        return await self._answer("fetchval", sql, args)

    async def execute(self, sql: str, *args: Any) -> Any:
        return await self._answer("execute", sql, args)

    @asynccontextmanager
    async def transaction(self):
        yield


class FakePool(FakeConnection):
    @asynccontextmanager
    async def acquire(self):
        yield self
