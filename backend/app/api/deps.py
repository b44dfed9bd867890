from __future__ import annotations

from fastapi import Request

from app.flags.store import FlagStore


def get_flag_store(request: Request) -> FlagStore:
    """Хранилище текущего приложения; создаётся в lifespan."""
    return request.app.state.flag_store


__all__ = ["get_flag_store"]
