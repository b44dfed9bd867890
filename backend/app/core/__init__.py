"""
Модуль ядра приложения.

Содержит:
- Конфигурацию приложения (Settings)
- Логирование
- Генерацию идентификаторов
"""

from app.core.config import Settings, get_settings
from app.core.ids import generate_id
from app.core.logging import setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "generate_id",
    "setup_logging",
]
