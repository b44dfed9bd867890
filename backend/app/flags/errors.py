"""Ошибки сервиса флагов."""

from __future__ import annotations


class FlagServiceError(Exception):
    """Базовая ошибка сервиса флагов."""

    status_code = 500


class FlagStoreError(FlagServiceError):
    """Ошибка операции хранилища, отображаемая клиенту."""


class FeatureNotFoundError(FlagStoreError):
    status_code = 404

    def __init__(self, message: str = "Feature not found") -> None:
        super().__init__(message)


class FeatureStateNotFoundError(FlagStoreError):
    status_code = 404

    def __init__(self, message: str = "Feature state not found") -> None:
        super().__init__(message)


class FeatureKeyConflictError(FlagStoreError):
    status_code = 409

    def __init__(self, key: str) -> None:
        super().__init__(f"Feature key '{key}' already exists")
        self.key = key


class FeatureKeyLockedError(FlagStoreError):
    """Ключ нельзя менять, пока на флаг ссылаются состояния."""

    status_code = 409

    def __init__(self, key: str) -> None:
        super().__init__(f"Feature key '{key}' is referenced by feature states and cannot change")
        self.key = key


class FeatureInUseError(FlagStoreError):
    status_code = 409

    def __init__(self, feature_id: str) -> None:
        super().__init__(f"Feature '{feature_id}' has feature states")
        self.feature_id = feature_id


class DuplicateFeatureStateError(FlagStoreError):
    status_code = 409

    def __init__(self, message: str = "Feature state for this context already exists") -> None:
        super().__init__(message)


class ConfigurationUnavailableError(FlagServiceError):
    """Не удалось прочитать данные для сборки конфигурации."""

    status_code = 503

    def __init__(self, message: str = "Failed to generate flagd config") -> None:
        super().__init__(message)


__all__ = [
    "ConfigurationUnavailableError",
    "DuplicateFeatureStateError",
    "FeatureInUseError",
    "FeatureKeyConflictError",
    "FeatureKeyLockedError",
    "FeatureNotFoundError",
    "FeatureStateNotFoundError",
    "FlagServiceError",
    "FlagStoreError",
]
