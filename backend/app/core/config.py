from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Конфигурация сервиса флагов на основе переменных окружения."""

    database_url: str = Field(..., alias="DATABASE_URL")

    app_env: Literal["dev", "prod", "test"] = Field("dev", alias="APP_ENV")
    api_prefix: str = Field("", alias="API_PREFIX")

    allowed_origins: str = Field(
        "*",
        alias="ALLOWED_ORIGINS",
        description="Разрешённые домены для CORS через запятую",
    )

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(
        True,
        alias="LOG_JSON",
        description="Писать логи в JSON (иначе обычный текст)",
    )

    run_migrations: bool = Field(
        True,
        alias="RUN_MIGRATIONS",
        description="Применять миграции схемы при старте",
    )
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    db_command_timeout: float = Field(10.0, alias="DB_COMMAND_TIMEOUT")

    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = (value or "").strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
