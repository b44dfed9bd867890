"""
Настройка логирования сервиса.

Все записи получают ``deployment_id`` текущего процесса, чтобы логи
разных инстансов можно было разделить при агрегации.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid

DEPLOYMENT_ID = str(uuid.uuid4())

# Структурные поля, которые попадают в JSON, если переданы через extra=
_EXTRA_FIELDS = (
    "feature_key",
    "feature_id",
    "feature_state_id",
    "flags_count",
    "rules_count",
    "migration",
    "path",
    "status_code",
)


class DeploymentFilter(logging.Filter):
    """Добавляет deployment_id в каждую запись."""

    def __init__(self, deployment_id: str = DEPLOYMENT_ID) -> None:
        super().__init__()
        self._deployment_id = deployment_id

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "deployment_id"):
            record.deployment_id = self._deployment_id
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "deployment_id": getattr(record, "deployment_id", DEPLOYMENT_ID),
        }
        for attr in _EXTRA_FIELDS:
            if hasattr(record, attr):
                data[attr] = getattr(record, attr)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(deployment_id)s] %(message)s"


def setup_logging(level: str = "INFO", *, json_output: bool = True) -> None:
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(DeploymentFilter())
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root.handlers = [handler]


__all__ = ["DEPLOYMENT_ID", "DeploymentFilter", "JsonFormatter", "setup_logging"]
