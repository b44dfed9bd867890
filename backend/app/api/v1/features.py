from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_flag_store
from app.flags.models import Feature, FeatureCreate, FeatureUpdate
from app.flags.store import FlagStore

router = APIRouter(prefix="/features", tags=["features"])


@router.get("", response_model=list[Feature])
async def list_features(store: FlagStore = Depends(get_flag_store)) -> list[Feature]:
    return await store.list_features()


@router.post("", response_model=Feature, status_code=201)
async def create_feature(
    payload: FeatureCreate,
    store: FlagStore = Depends(get_flag_store),
) -> Feature:
    return await store.create_feature(payload)


@router.put("/{feature_id}", response_model=Feature)
async def update_feature(
    feature_id: str,
    payload: FeatureUpdate,
    store: FlagStore = Depends(get_flag_store),
) -> Feature:
    """Обновляет флаг; ключ нельзя менять, пока на флаг ссылаются состояния."""
    return await store.update_feature(feature_id, payload)


@router.delete("/{feature_id}")
async def delete_feature(
    feature_id: str,
    store: FlagStore = Depends(get_flag_store),
) -> dict[str, str]:
    await store.delete_feature(feature_id)
    return {"message": "Feature deleted successfully"}


__all__ = ["router"]
