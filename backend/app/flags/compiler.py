"""
Компилятор конфигурации таргетинга для flagd.

Превращает набор флагов и их переопределений по контекстам в декларативный
набор правил. Семантика вычисления для потребителя:

- правила проверяются по порядку, побеждает первое совпавшее;
- правило без condition совпадает всегда;
- правило с condition совпадает, если атрибут контекста запроса равен equals;
- если ничего не совпало, применяется defaultVariant ("off").

Порядок правил задаётся здесь, а не порядком выборки из хранилища:
workspace, затем organization, затем global; внутри одного типа контекста
по возрастанию context_id.

Функция чистая: без I/O, часов и случайности, входные данные не меняются.
"""

from __future__ import annotations

from typing import Iterable

from app.flags.models import (
    Condition,
    ContextType,
    Feature,
    FeatureState,
    FlagEntry,
    Rule,
    Targeting,
    TargetingConfig,
    Variant,
)

# Чем меньше число, тем специфичнее контекст и тем раньше правило
CONTEXT_PRECEDENCE: dict[ContextType, int] = {
    ContextType.WORKSPACE: 0,
    ContextType.ORGANIZATION: 1,
    ContextType.GLOBAL: 2,
}

CONTEXT_ATTRIBUTES: dict[ContextType, str] = {
    ContextType.ORGANIZATION: "organizationId",
    ContextType.WORKSPACE: "workspaceId",
}

_ContextKey = tuple[ContextType, str]


def _resolve_feature(
    state: FeatureState,
    by_id: dict[str, Feature],
    by_key: dict[str, Feature],
) -> Feature | None:
    """Находит владельца состояния: по feature_id, а без него по feature_key."""
    if state.feature_id:
        return by_id.get(state.feature_id)
    if state.feature_key:
        return by_key.get(state.feature_key)
    return None


def _context_key(state: FeatureState) -> _ContextKey | None:
    """Ключ контекста или None, если состояние некорректно по форме."""
    if state.context_type is ContextType.GLOBAL:
        return ContextType.GLOBAL, ""
    if not (state.context_id or "").strip():
        return None
    return state.context_type, state.context_id


def _rule_order(item: tuple[_ContextKey, bool]) -> tuple[int, str]:
    (context_type, context_id), _ = item
    return CONTEXT_PRECEDENCE[context_type], context_id


def build_rule(context_type: ContextType, context_id: str, state: bool) -> Rule:
    variant = Variant.from_state(state)
    if context_type is ContextType.GLOBAL:
        return Rule(variant=variant)
    return Rule(
        condition=Condition(attribute=CONTEXT_ATTRIBUTES[context_type], equals=context_id),
        variant=variant,
    )


def group_states(
    features: Iterable[Feature],
    states: Iterable[FeatureState],
) -> dict[str, dict[_ContextKey, bool]]:
    """
    Раскладывает состояния по ключам флагов.

    Осиротевшие состояния и состояния без context_id (кроме global)
    отбрасываются. Для повторяющегося контекста побеждает последнее.
    """
    by_id: dict[str, Feature] = {}
    by_key: dict[str, Feature] = {}
    for feature in features:
        by_id[feature.id] = feature
        by_key[feature.key] = feature

    grouped: dict[str, dict[_ContextKey, bool]] = {}
    for state in states:
        feature = _resolve_feature(state, by_id, by_key)
        if feature is None:
            continue
        context = _context_key(state)
        if context is None:
            continue
        grouped.setdefault(feature.key, {})[context] = state.state
    return grouped


def compile_targeting(
    features: Iterable[Feature],
    states: Iterable[FeatureState],
) -> TargetingConfig:
    """Собирает TargetingConfig для всех переданных флагов."""
    features = list(features)
    grouped = group_states(features, states)

    flags: dict[str, FlagEntry] = {}
    for feature in features:
        overrides = grouped.get(feature.key)
        if not overrides:
            flags[feature.key] = FlagEntry()
            continue
        rules = [
            build_rule(context_type, context_id, state)
            for (context_type, context_id), state in sorted(overrides.items(), key=_rule_order)
        ]
        flags[feature.key] = FlagEntry(targeting=Targeting(rules=rules))

    return TargetingConfig(flags=flags)


__all__ = [
    "CONTEXT_ATTRIBUTES",
    "CONTEXT_PRECEDENCE",
    "build_rule",
    "compile_targeting",
    "group_states",
]
