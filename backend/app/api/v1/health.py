from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.api.deps import get_flag_store
from app.flags.service import STORE_READ_ERRORS
from app.flags.store import FlagStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def ready() -> str:
    return "Ready"


@router.get("/health")
async def health(store: FlagStore = Depends(get_flag_store)) -> dict[str, bool | str]:
    """Проверка здоровья сервиса с проверкой хранилища."""
    store_ok = False
    try:
        await store.list_features()
        store_ok = True
    except STORE_READ_ERRORS as exc:
        logger.warning("Health check: flag store unavailable: %s", exc)

    return {
        "ok": store_ok,
        "store": "✓" if store_ok else "✗",
    }


__all__ = ["router"]
