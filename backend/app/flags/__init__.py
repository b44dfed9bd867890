"""
Флаги функций и компиляция их в конфигурацию flagd.

Содержит:
- Модели флагов и переопределений по контекстам
- Компилятор правил таргетинга
- Хранилища (in-memory и PostgreSQL)
"""

from app.flags.compiler import compile_targeting
from app.flags.errors import ConfigurationUnavailableError, FlagServiceError, FlagStoreError
from app.flags.models import ContextType, Feature, FeatureState, TargetingConfig
from app.flags.service import build_flagd_config
from app.flags.store import FlagStore, InMemoryFlagStore

__all__ = [
    "ConfigurationUnavailableError",
    "ContextType",
    "Feature",
    "FeatureState",
    "FlagServiceError",
    "FlagStore",
    "FlagStoreError",
    "InMemoryFlagStore",
    "TargetingConfig",
    "build_flagd_config",
    "compile_targeting",
]
