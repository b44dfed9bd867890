from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_flag_store
from app.flags.service import build_flagd_config
from app.flags.store import FlagStore

router = APIRouter(tags=["flagd"])


@router.get("/flagd.json")
async def flagd_config(store: FlagStore = Depends(get_flag_store)) -> JSONResponse:
    """
    Конфигурация для flagd, собранная заново на каждый запрос.

    Если хранилище недоступно, отвечает 503 вместо пустой конфигурации.
    """
    config = await build_flagd_config(store)
    return JSONResponse(config.to_json())


__all__ = ["router"]
