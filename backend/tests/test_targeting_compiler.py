from __future__ import annotations

import itertools

from app.flags.compiler import compile_targeting
from app.flags.models import FLAGD_SCHEMA_URL

from _helpers import evaluate, make_feature, make_state


def _rules(config: dict, key: str) -> list[dict]:
    return config["flags"][key]["targeting"]["rules"]


def test_feature_without_overrides_defaults_to_off():
    config = compile_targeting([make_feature("f1"), make_feature("f2")], []).to_json()

    assert config["$schema"] == FLAGD_SCHEMA_URL
    assert config["flags"]["f1"] == {
        "state": "ENABLED",
        "variants": {"on": True, "off": False},
        "defaultVariant": "off",
    }
    assert "targeting" not in config["flags"]["f2"]


def test_empty_inputs_compile_to_empty_flags():
    assert compile_targeting([], []).to_json() == {"$schema": FLAGD_SCHEMA_URL, "flags": {}}


def test_workspace_rule_precedes_organization_rule():
    features = [make_feature("f1")]
    states = [
        make_state("organization", "org1", True, feature_key="f1"),
        make_state("workspace", "ws1", False, feature_key="f1"),
    ]

    entry = compile_targeting(features, states).to_json()["flags"]["f1"]

    assert entry["defaultVariant"] == "off"
    assert entry["targeting"]["rules"] == [
        {"condition": {"attribute": "workspaceId", "equals": "ws1"}, "variant": "off"},
        {"condition": {"attribute": "organizationId", "equals": "org1"}, "variant": "on"},
    ]


def test_global_rule_is_unconditional_and_last():
    features = [make_feature("f1")]
    states = [
        make_state("global", None, False, feature_id="ftr_f1"),
        make_state("workspace", "workspace1", True, feature_id="ftr_f1"),
    ]

    config = compile_targeting(features, states).to_json()
    rules = _rules(config, "f1")

    assert rules[-1] == {"variant": "off"}
    entry = config["flags"]["f1"]
    assert evaluate(entry, {"workspaceId": "workspace1"}) == "on"
    assert evaluate(entry, {}) == "off"
    assert evaluate(entry, {"workspaceId": "workspace2"}) == "off"


def test_global_on_applies_when_nothing_more_specific_matches():
    features = [make_feature("f1")]
    states = [
        make_state("global", None, True, feature_key="f1"),
        make_state("organization", "org1", False, feature_key="f1"),
    ]

    entry = compile_targeting(features, states).to_json()["flags"]["f1"]

    assert evaluate(entry, {"organizationId": "org1"}) == "off"
    assert evaluate(entry, {"organizationId": "org2"}) == "on"
    assert entry["defaultVariant"] == "off"


def test_ties_within_context_type_sorted_by_context_id():
    features = [make_feature("f1")]
    states = [
        make_state("workspace", "ws-b", True, feature_key="f1"),
        make_state("organization", "org-2", True, feature_key="f1"),
        make_state("workspace", "ws-a", False, feature_key="f1"),
        make_state("organization", "org-1", False, feature_key="f1"),
    ]

    rules = _rules(compile_targeting(features, states).to_json(), "f1")

    assert [r["condition"]["equals"] for r in rules] == ["ws-a", "ws-b", "org-1", "org-2"]


def test_rule_order_independent_of_input_order():
    features = [make_feature("f1")]
    states = [
        make_state("global", None, True, feature_key="f1"),
        make_state("organization", "org1", True, feature_key="f1"),
        make_state("workspace", "ws1", False, feature_key="f1"),
        make_state("workspace", "ws2", True, feature_key="f1"),
    ]

    expected = compile_targeting(features, states).to_json()
    for permutation in itertools.permutations(states):
        assert compile_targeting(features, list(permutation)).to_json() == expected


def test_compile_is_deterministic():
    features = [make_feature("f1"), make_feature("f2")]
    states = [
        make_state("workspace", "ws1", True, feature_key="f1"),
        make_state("global", None, True, feature_key="f2"),
    ]

    assert compile_targeting(features, states) == compile_targeting(features, states)


def test_orphaned_states_are_ignored():
    features = [make_feature("f1")]
    states = [
        make_state("workspace", "ws1", True, feature_key="missing"),
        make_state("global", None, True, feature_id="ftr_missing"),
    ]

    config = compile_targeting(features, states).to_json()

    assert list(config["flags"]) == ["f1"]
    assert "targeting" not in config["flags"]["f1"]


def test_orphan_does_not_alter_existing_entry():
    features = [make_feature("f1")]
    valid = [make_state("workspace", "ws1", True, feature_key="f1")]
    orphan = make_state("workspace", "ws2", False, feature_id="ftr_gone", feature_key="f1")

    # feature_id задан, поэтому ключ не используется для поиска владельца
    assert compile_targeting(features, valid + [orphan]) == compile_targeting(features, valid)


def test_non_global_state_without_context_id_is_dropped():
    features = [make_feature("f1")]
    states = [
        make_state("workspace", None, True, feature_key="f1"),
        make_state("organization", "   ", True, feature_key="f1"),
        make_state("organization", "org1", True, feature_key="f1"),
    ]

    rules = _rules(compile_targeting(features, states).to_json(), "f1")

    assert rules == [
        {"condition": {"attribute": "organizationId", "equals": "org1"}, "variant": "on"},
    ]


def test_context_id_emitted_as_stored():
    features = [make_feature("f1")]
    states = [
        make_state("workspace", " ws1", True, feature_key="f1"),
        make_state("workspace", "ws1", False, feature_key="f1"),
    ]

    rules = _rules(compile_targeting(features, states).to_json(), "f1")

    assert rules == [
        {"condition": {"attribute": "workspaceId", "equals": " ws1"}, "variant": "on"},
        {"condition": {"attribute": "workspaceId", "equals": "ws1"}, "variant": "off"},
    ]


def test_only_malformed_states_leave_no_targeting():
    features = [make_feature("f1")]
    states = [make_state("workspace", "", True, feature_key="f1")]

    assert "targeting" not in compile_targeting(features, states).to_json()["flags"]["f1"]


def test_duplicate_context_last_one_wins():
    features = [make_feature("f1")]
    states = [
        make_state("workspace", "ws1", True, feature_key="f1"),
        make_state("workspace", "ws1", False, feature_key="f1"),
        make_state("global", None, True, feature_key="f1"),
        make_state("global", "ignored", False, feature_key="f1"),
    ]

    rules = _rules(compile_targeting(features, states).to_json(), "f1")

    assert rules == [
        {"condition": {"attribute": "workspaceId", "equals": "ws1"}, "variant": "off"},
        {"variant": "off"},
    ]


def test_states_resolve_by_id_or_key():
    features = [make_feature("f1", feature_id="ftr_abc"), make_feature("f2", feature_id="ftr_def")]
    states = [
        make_state("workspace", "ws1", True, feature_id="ftr_abc"),
        make_state("workspace", "ws2", True, feature_key="f2"),
    ]

    config = compile_targeting(features, states).to_json()

    assert _rules(config, "f1")[0]["condition"]["equals"] == "ws1"
    assert _rules(config, "f2")[0]["condition"]["equals"] == "ws2"


def test_inputs_are_not_mutated():
    features = [make_feature("f1")]
    states = [
        make_state("organization", "org1", True, feature_key="f1"),
        make_state("workspace", "ws1", False, feature_key="f1"),
    ]
    features_before = [f.model_copy() for f in features]
    states_before = list(states)

    compile_targeting(features, states)

    assert features == features_before
    assert states == states_before


def test_accepts_generators():
    features = (make_feature(k) for k in ("a", "b"))
    states = (s for s in [make_state("global", None, True, feature_key="b")])

    config = compile_targeting(features, states).to_json()

    assert set(config["flags"]) == {"a", "b"}
    assert _rules(config, "b") == [{"variant": "on"}]
