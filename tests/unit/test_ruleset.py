"""Unit tests for rule configuration loading."""

from decimal import Decimal
from pathlib import Path

import pytest

from src.domains.fraud.errors import ConfigurationError
from src.domains.fraud.models import ComparisonCondition, MembershipCondition
from src.domains.fraud.ruleset import (
    DEFAULT_RULESET_CONFIG,
    load_ruleset,
    ruleset_from_mapping,
)

VALID_YAML = """
rules:
  - id: big_charge
    label: Big charge
    condition: {kind: comparison, field: amount, op: ">=", value: 2500}
    weight: 0.4
  - id: huge_charge
    label: Huge charge
    condition: {kind: comparison, field: amount, op: ">=", value: 9000}
    weight: 0.7
  - id: odd_source
    label: Odd source
    condition:
      kind: membership
      field: source
      values: [stripe]
      negate: true
    weight: 0.25
exclusions:
  big_charge: huge_charge
"""


def _rule(rule_id: str, weight="0.1") -> dict:
    return {
        "id": rule_id,
        "label": rule_id.replace("_", " "),
        "condition": {"kind": "comparison", "field": "amount", "op": ">", "value": "1"},
        "weight": weight,
    }


class TestDefaultRuleset:
    def test_loads_default_rules_in_order(self):
        rules = load_ruleset()
        assert rules.ids == [
            "high_amount",
            "very_high_amount",
            "non_standard_currency",
            "suspicious_email",
            "non_standard_source",
        ]
        assert rules.exclusions == {"high_amount": "very_high_amount"}

    def test_default_weights(self):
        rules = load_ruleset()
        assert rules.get("high_amount").weight == Decimal("0.3")
        assert rules.get("very_high_amount").weight == Decimal("0.5")

    def test_conditions_are_typed(self):
        rules = load_ruleset()
        assert isinstance(rules.get("high_amount").condition, ComparisonCondition)
        assert isinstance(rules.get("non_standard_source").condition, MembershipCondition)

    def test_default_mapping_untouched(self):
        ruleset_from_mapping(DEFAULT_RULESET_CONFIG)
        assert "id" in DEFAULT_RULESET_CONFIG["rules"][0]


class TestYamlLoading:
    def test_load_from_file(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(VALID_YAML)

        rules = load_ruleset(path)

        assert len(rules) == 3
        assert rules.get("big_charge").weight == Decimal("0.4")
        assert rules.get("odd_source").weight == Decimal("0.25")
        assert rules.exclusions == {"big_charge": "huge_charge"}

    def test_mapping_layout_with_score_alias(self):
        rules = ruleset_from_mapping(
            {
                "rules": {
                    "high_amount": {
                        "label": "High amount",
                        "condition": {"kind": "comparison", "op": ">", "value": 5000},
                        "score": 0.3,
                    }
                }
            }
        )
        assert rules.ids == ["high_amount"]
        assert rules.get("high_amount").weight == Decimal("0.3")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_ruleset(tmp_path / "missing.yaml")

    def test_example_file_matches_defaults(self):
        path = Path(__file__).parents[2] / "config" / "rules.example.yaml"
        assert load_ruleset(path) == load_ruleset()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("rules: [unclosed")
        with pytest.raises(ConfigurationError):
            load_ruleset(path)


class TestValidation:
    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping(["rules"])

    def test_no_rules(self):
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping({"rules": []})

    def test_duplicate_ids(self):
        with pytest.raises(ConfigurationError, match="duplicate"):
            ruleset_from_mapping({"rules": [_rule("a"), _rule("a")]})

    @pytest.mark.parametrize("weight", ["-0.1", "1.5"])
    def test_weight_out_of_range(self, weight):
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping({"rules": [_rule("a", weight)]})

    def test_unknown_condition_kind(self):
        rule = _rule("a")
        rule["condition"] = {"kind": "regex", "field": "email", "pattern": ".*"}
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping({"rules": [rule]})

    def test_unknown_condition_field(self):
        rule = _rule("a")
        rule["condition"] = {"kind": "comparison", "field": "email", "op": ">", "value": 1}
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping({"rules": [rule]})

    def test_unknown_operator(self):
        rule = _rule("a")
        rule["condition"]["op"] = "=="
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping({"rules": [rule]})

    def test_unresolved_exclusion(self):
        with pytest.raises(ConfigurationError, match="unknown rule"):
            ruleset_from_mapping({"rules": [_rule("a")], "exclusions": {"a": "b"}})

    def test_self_exclusion(self):
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping({"rules": [_rule("a")], "exclusions": {"a": "a"}})

    def test_exclusion_cycle(self):
        with pytest.raises(ConfigurationError, match="cycle"):
            ruleset_from_mapping(
                {
                    "rules": [_rule("a"), _rule("b"), _rule("c")],
                    "exclusions": {"a": "b", "b": "c", "c": "a"},
                }
            )

    def test_exclusion_chain_allowed(self):
        rules = ruleset_from_mapping(
            {
                "rules": [_rule("a"), _rule("b"), _rule("c")],
                "exclusions": {"a": "b", "b": "c"},
            }
        )
        assert rules.exclusions == {"a": "b", "b": "c"}

    @pytest.mark.parametrize("rule_id", ["", "a,b", "a|b", "high amount", "a/b"])
    def test_rule_id_charset(self, rule_id):
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping({"rules": [_rule(rule_id)]})

    def test_separator_in_id_cannot_alias_another_profile(self):
        combined = _rule("a,b")
        combined["condition"]["value"] = "1000"
        rules = [combined, _rule("a"), _rule("b")]
        with pytest.raises(ConfigurationError):
            ruleset_from_mapping(
                {"rules": rules, "exclusions": {"a": "a,b", "b": "a,b"}}
            )

    def test_rule_id_allowed_characters(self):
        rules = ruleset_from_mapping({"rules": [_rule("Tier-2.high_amount")]})
        assert rules.ids == ["Tier-2.high_amount"]
