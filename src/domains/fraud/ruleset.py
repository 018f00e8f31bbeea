"""Loading and validation of the fraud rule configuration.

Rules come either from a YAML file or from DEFAULT_RULESET_CONFIG. Two
layouts are accepted for the ``rules`` key:

- a list of records ``{id, label, condition, weight}``
- a mapping ``{rule_id: {label, condition, weight}}``

``score`` is accepted as a synonym for ``weight``. Any malformed entry raises
ConfigurationError so a bad file stops startup instead of a request.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from .errors import ConfigurationError
from .models import RuleSet

logger = structlog.get_logger()

DEFAULT_RULESET_CONFIG: dict[str, Any] = {
    "rules": [
        {
            "id": "high_amount",
            "label": "High transaction amount (over 5,000)",
            "condition": {"kind": "comparison", "field": "amount", "op": ">", "value": "5000"},
            "weight": "0.3",
        },
        {
            "id": "very_high_amount",
            "label": "Very high transaction amount (over 10,000)",
            "condition": {"kind": "comparison", "field": "amount", "op": ">", "value": "10000"},
            "weight": "0.5",
        },
        {
            "id": "non_standard_currency",
            "label": "Currency outside the commonly processed set",
            "condition": {
                "kind": "membership",
                "field": "currency",
                "values": ["USD", "EUR", "GBP", "CAD", "AUD", "JPY"],
                "negate": True,
            },
            "weight": "0.2",
        },
        {
            "id": "suspicious_email",
            "label": "Email address on a disposable mail domain",
            "condition": {
                "kind": "string_match",
                "field": "email",
                "op": "ends_with",
                "value": [
                    "@temp.com",
                    "@tempmail.com",
                    "@mailinator.com",
                    "@guerrillamail.com",
                    "@10minutemail.com",
                ],
            },
            "weight": "0.1",
        },
        {
            "id": "non_standard_source",
            "label": "Payment source outside the supported channels",
            "condition": {
                "kind": "membership",
                "field": "source",
                "values": ["stripe", "paypal", "square"],
                "negate": True,
            },
            "weight": "0.3",
        },
    ],
    "exclusions": {"high_amount": "very_high_amount"},
}


def _normalize_rules(raw: Any) -> list[dict[str, Any]]:
    if isinstance(raw, dict):
        records = []
        for rule_id, body in raw.items():
            if not isinstance(body, dict):
                raise ConfigurationError(f"rule '{rule_id}' must be a mapping")
            records.append({"id": rule_id, **body})
    elif isinstance(raw, list):
        records = list(raw)
    else:
        raise ConfigurationError("'rules' must be a list or a mapping")

    normalized = []
    for idx, record in enumerate(records):
        if not isinstance(record, dict):
            raise ConfigurationError(f"rule #{idx} must be a mapping")
        record = dict(record)
        if "score" in record and "weight" not in record:
            record["weight"] = record.pop("score")
        normalized.append(record)
    return normalized


def ruleset_from_mapping(data: Any) -> RuleSet:
    """Build a validated RuleSet from already-parsed configuration."""
    if not isinstance(data, dict) or "rules" not in data:
        raise ConfigurationError("rule configuration must be a mapping with a 'rules' key")

    rules = _normalize_rules(data["rules"])
    if not rules:
        raise ConfigurationError("rule configuration defines no rules")

    exclusions = data.get("exclusions") or {}
    try:
        return RuleSet(rules=rules, exclusions=exclusions)
    except ValidationError as e:
        raise ConfigurationError(f"invalid rule configuration: {e}") from e


def load_ruleset(path: str | Path | None = None) -> RuleSet:
    """Load rules from a YAML file, or the built-in defaults when no path is given."""
    if path is None:
        ruleset = ruleset_from_mapping(DEFAULT_RULESET_CONFIG)
        logger.info("ruleset_loaded", source="default", rule_count=len(ruleset))
        return ruleset

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read rule file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"rule file {path} is not valid YAML: {e}") from e

    ruleset = ruleset_from_mapping(data)
    logger.info(
        "ruleset_loaded",
        source=str(path),
        rule_count=len(ruleset),
        exclusion_count=len(ruleset.exclusions),
    )
    return ruleset
