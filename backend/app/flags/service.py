"""Сборка конфигурации flagd из данных хранилища."""

from __future__ import annotations

import asyncio
import logging

import asyncpg

from app.flags.compiler import compile_targeting
from app.flags.errors import ConfigurationUnavailableError, FlagStoreError
from app.flags.models import TargetingConfig
from app.flags.store import FlagStore

logger = logging.getLogger(__name__)

# Сбои чтения, после которых конфигурация считается недоступной
STORE_READ_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
    FlagStoreError,
)


async def build_flagd_config(store: FlagStore) -> TargetingConfig:
    """
    Читает флаги и состояния из хранилища и компилирует их.

    При сбое чтения поднимает ConfigurationUnavailableError: частичная или
    пустая конфигурация в этом случае не возвращается.
    """
    try:
        features = await store.list_features()
        states = await store.list_feature_states()
    except STORE_READ_ERRORS as exc:
        logger.error("Flag store read failed: %s", exc)
        raise ConfigurationUnavailableError() from exc

    config = compile_targeting(features, states)
    logger.info(
        "Flagd config compiled",
        extra={"flags_count": len(config.flags), "rules_count": _count_rules(config)},
    )
    return config


def _count_rules(config: TargetingConfig) -> int:
    return sum(len(entry.targeting.rules) for entry in config.flags.values() if entry.targeting)


__all__ = ["STORE_READ_ERRORS", "build_flagd_config"]
