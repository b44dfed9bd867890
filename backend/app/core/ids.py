"""Генерация префиксных идентификаторов записей."""

from __future__ import annotations

import secrets
import string
from typing import Literal

ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase

PREFIXES: dict[str, str] = {
    "feature": "ftr",
    "feature_state": "fst",
}

Entity = Literal["feature", "feature_state"]


def generate_id(entity: Entity, *, length: int = 12, separator: str = "_") -> str:
    """
    Генерирует случайный идентификатор с префиксом сущности.

    Примеры:
        generate_id("feature") -> "ftr_a1B2c3D4e5F6"
        generate_id("feature_state", length=8) -> "fst_a1B2c3D4"
    """
    prefix = PREFIXES[entity]
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(length))
    return f"{prefix}{separator}{suffix}"


__all__ = ["ALPHABET", "PREFIXES", "Entity", "generate_id"]
