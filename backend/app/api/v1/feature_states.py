from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_flag_store
from app.flags.models import FeatureState, FeatureStateCreate, FeatureStateUpdate
from app.flags.store import FlagStore

router = APIRouter(prefix="/feature-states", tags=["feature-states"])


@router.get("", response_model=list[FeatureState])
async def list_feature_states(store: FlagStore = Depends(get_flag_store)) -> list[FeatureState]:
    return await store.list_feature_states()


@router.post("", response_model=FeatureState, status_code=201)
async def create_feature_state(
    payload: FeatureStateCreate,
    store: FlagStore = Depends(get_flag_store),
) -> FeatureState:
    """Создаёт переопределение; флаг можно указать через featureId или featureKey."""
    return await store.create_feature_state(payload)


@router.put("/{state_id}", response_model=FeatureState)
async def update_feature_state(
    state_id: str,
    payload: FeatureStateUpdate,
    store: FlagStore = Depends(get_flag_store),
) -> FeatureState:
    return await store.update_feature_state(state_id, payload)


@router.delete("/{state_id}")
async def delete_feature_state(
    state_id: str,
    store: FlagStore = Depends(get_flag_store),
) -> dict[str, str]:
    await store.delete_feature_state(state_id)
    return {"message": "Feature state deleted successfully"}


__all__ = ["router"]
