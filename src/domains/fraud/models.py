"""Pydantic models for the fraud domain."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator


def _as_decimal(value):
    # YAML hands weights over as floats; go through str so 0.3 stays 0.3
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class Decision(StrEnum):
    ACCEPTED = "accepted"
    DECLINED = "declined"


class ChargeContext(BaseModel):
    """The charge as seen by rule conditions. Trusted to be well-formed."""

    amount: Decimal = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)
    source: str
    email: str

    model_config = {"frozen": True}

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, v):
        return _as_decimal(v)


# ---------------------------------------------------------------------------
# Declarative conditions
# ---------------------------------------------------------------------------


class ComparisonCondition(BaseModel):
    kind: Literal["comparison"] = "comparison"
    field: Literal["amount"] = "amount"
    op: Literal[">", ">=", "<", "<="]
    value: Decimal

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v):
        return _as_decimal(v)


class StringMatchCondition(BaseModel):
    kind: Literal["string_match"] = "string_match"
    field: Literal["email", "currency"]
    op: Literal["equals", "starts_with", "ends_with"]
    value: tuple[str, ...]
    case_sensitive: bool = False
    negate: bool = False

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("value", mode="before")
    @classmethod
    def _wrap_single(cls, v):
        if isinstance(v, str):
            return (v,)
        return v

    @field_validator("value")
    @classmethod
    def _not_empty(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not v or any(not item for item in v):
            raise ValueError("string_match needs at least one non-empty value")
        return v


class MembershipCondition(BaseModel):
    kind: Literal["membership"] = "membership"
    field: Literal["source", "currency"]
    values: frozenset[str] = Field(min_length=1)
    case_sensitive: bool = False
    negate: bool = False

    model_config = {"frozen": True, "extra": "forbid"}


Condition = Annotated[
    ComparisonCondition | StringMatchCondition | MembershipCondition,
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


# Ids are joined with "," and "|" in explanation cache keys
RULE_ID_PATTERN = r"^[A-Za-z0-9_.-]+$"


class FraudRule(BaseModel):
    id: str = Field(pattern=RULE_ID_PATTERN)
    label: str = Field(min_length=1)
    condition: Condition
    weight: Decimal = Field(ge=0, le=1)

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("weight", mode="before")
    @classmethod
    def _coerce_weight(cls, v):
        return _as_decimal(v)


class RuleSet(BaseModel):
    """Ordered rules plus the loser -> winner exclusion table."""

    rules: tuple[FraudRule, ...]
    exclusions: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_references(self) -> "RuleSet":
        seen: set[str] = set()
        for rule in self.rules:
            if rule.id in seen:
                raise ValueError(f"duplicate rule id '{rule.id}'")
            seen.add(rule.id)

        for loser, winner in self.exclusions.items():
            if loser not in seen:
                raise ValueError(f"exclusion references unknown rule '{loser}'")
            if winner not in seen:
                raise ValueError(f"exclusion references unknown rule '{winner}'")
            if loser == winner:
                raise ValueError(f"rule '{loser}' cannot exclude itself")

        # A cycle would make every rule in it cancel the others out
        for start in self.exclusions:
            node = start
            visited = {start}
            while node in self.exclusions:
                node = self.exclusions[node]
                if node in visited:
                    raise ValueError(f"exclusion cycle involving rule '{start}'")
                visited.add(node)
        return self

    @property
    def ids(self) -> list[str]:
        return [rule.id for rule in self.rules]

    def get(self, rule_id: str) -> FraudRule | None:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def __len__(self) -> int:
        return len(self.rules)


# ---------------------------------------------------------------------------
# Scoring output
# ---------------------------------------------------------------------------


class ScoreResult(BaseModel):
    score: Decimal = Field(ge=0, le=1)
    triggered_rule_ids: tuple[str, ...] = ()
    decision: Decision

    model_config = {"frozen": True}


class ChargeAssessment(BaseModel):
    """Scoring output handed to the ledger and the HTTP layer."""

    score: Decimal = Field(ge=0, le=1)
    triggered_rule_ids: tuple[str, ...] = ()
    decision: Decision
    explanation: str

    model_config = {"frozen": True}

    @field_serializer("score")
    def _score_as_float(self, score: Decimal) -> float:
        return float(score)


# ---------------------------------------------------------------------------
# Explanation cache
# ---------------------------------------------------------------------------


class CacheEntry(BaseModel):
    key: str
    explanation: str
    created_at: datetime

    model_config = {"frozen": True}


class CacheClearReport(BaseModel):
    previous_size: int
    current_size: int


class CacheStats(BaseModel):
    size: int
    status: str = "active"
    hits: int = 0
    misses: int = 0
    in_flight: int = 0
    coalesced: int = 0


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class LedgerEntry(BaseModel):
    transaction_id: str
    charge: ChargeContext
    assessment: ChargeAssessment
    recorded_at: datetime

    model_config = {"frozen": True}
