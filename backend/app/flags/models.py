"""
Модели данных сервиса флагов.

Записи хранилища (Feature, FeatureState) намеренно не валидируют форму
контекста: проверка выполняется на входе API (модели *Create/*Update),
а компилятор сам отбрасывает некорректные состояния.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

FLAGD_SCHEMA_URL = "https://flagd.dev/schema/v0/flags.json"


class ContextType(str, Enum):
    GLOBAL = "global"
    ORGANIZATION = "organization"
    WORKSPACE = "workspace"


class _RecordModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Feature(_RecordModel):
    """Флаг: независимо переключаемая возможность."""

    id: str
    key: str
    name: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FeatureState(_RecordModel):
    """Переопределение состояния флага для контекста."""

    id: str | None = None
    feature_id: str | None = None
    # Ключ владельца; заполняется при join или вместо feature_id
    feature_key: str | None = None
    context_type: ContextType
    context_id: str | None = None
    state: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


# === Входные модели API ===


class _PayloadModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class FeatureCreate(_PayloadModel):
    key: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class FeatureUpdate(_PayloadModel):
    """Частичное обновление: меняются только переданные поля."""

    key: str | None = Field(None, min_length=1, max_length=255)
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None


def normalize_context_id(context_type: ContextType, context_id: str | None) -> str | None:
    """Глобальное состояние не имеет context_id; остальные обязаны его иметь."""
    if context_type is ContextType.GLOBAL:
        return None
    if not context_id:
        raise ValueError(f"contextId is required for {context_type.value} context")
    return context_id


class FeatureStateCreate(_PayloadModel):
    feature_id: str | None = None
    feature_key: str | None = None
    context_type: ContextType
    context_id: str | None = Field(None, max_length=255)
    state: bool

    @model_validator(mode="after")
    def _check_shape(self) -> "FeatureStateCreate":
        if not self.feature_id and not self.feature_key:
            raise ValueError("featureId or featureKey is required")
        self.context_id = normalize_context_id(self.context_type, self.context_id)
        return self


class FeatureStateUpdate(_PayloadModel):
    feature_id: str | None = None
    context_type: ContextType
    context_id: str | None = Field(None, max_length=255)
    state: bool

    @model_validator(mode="after")
    def _check_shape(self) -> "FeatureStateUpdate":
        self.context_id = normalize_context_id(self.context_type, self.context_id)
        return self


# === Выходной формат flagd ===


class Variant(str, Enum):
    ON = "on"
    OFF = "off"

    @classmethod
    def from_state(cls, state: bool) -> "Variant":
        return cls.ON if state else cls.OFF


class FlagState(str, Enum):
    ENABLED = "ENABLED"


class _OutputModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Condition(_OutputModel):
    attribute: Literal["organizationId", "workspaceId"]
    equals: str


class Rule(_OutputModel):
    """Правило таргетинга; без condition срабатывает всегда."""

    condition: Condition | None = None
    variant: Variant


class Targeting(_OutputModel):
    rules: list[Rule]


class Variants(_OutputModel):
    on: bool = True
    off: bool = False


class FlagEntry(_OutputModel):
    state: FlagState = FlagState.ENABLED
    variants: Variants = Field(default_factory=Variants)
    default_variant: Variant = Field(Variant.OFF, alias="defaultVariant")
    targeting: Targeting | None = None


class TargetingConfig(_OutputModel):
    schema_url: str = Field(FLAGD_SCHEMA_URL, alias="$schema")
    flags: dict[str, FlagEntry] = Field(default_factory=dict)

    @field_validator("schema_url")
    @classmethod
    def _fixed_schema(cls, value: str) -> str:
        if value != FLAGD_SCHEMA_URL:
            raise ValueError("unsupported flagd schema")
        return value

    def to_json(self) -> dict:
        """Документ flagd: camelCase ключи, без пустого targeting."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "FLAGD_SCHEMA_URL",
    "Condition",
    "ContextType",
    "Feature",
    "FeatureCreate",
    "FeatureState",
    "FeatureStateCreate",
    "FeatureStateUpdate",
    "FeatureUpdate",
    "FlagEntry",
    "FlagState",
    "Rule",
    "Targeting",
    "TargetingConfig",
    "Variant",
    "Variants",
    "normalize_context_id",
]
