"""Evaluation of declarative rule conditions against a charge.

Conditions are data, never code: each shape is interpreted here by a fixed
evaluator, so rule files cannot execute anything.
"""

import operator

from .errors import EvaluationError
from .models import (
    ChargeContext,
    ComparisonCondition,
    MembershipCondition,
    StringMatchCondition,
)

_COMPARATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


def _fold(value: str, case_sensitive: bool) -> str:
    return value if case_sensitive else value.casefold()


def _compare(condition: ComparisonCondition, context: ChargeContext) -> bool:
    actual = getattr(context, condition.field)
    return _COMPARATORS[condition.op](actual, condition.value)


def _string_match(condition: StringMatchCondition, context: ChargeContext) -> bool:
    actual = _fold(getattr(context, condition.field), condition.case_sensitive)
    expected = [_fold(v, condition.case_sensitive) for v in condition.value]

    if condition.op == "equals":
        matched = actual in expected
    elif condition.op == "starts_with":
        matched = actual.startswith(tuple(expected))
    else:
        matched = actual.endswith(tuple(expected))

    return matched != condition.negate


def _membership(condition: MembershipCondition, context: ChargeContext) -> bool:
    actual = _fold(getattr(context, condition.field), condition.case_sensitive)
    members = {_fold(v, condition.case_sensitive) for v in condition.values}
    return (actual in members) != condition.negate


def evaluate_condition(condition, context: ChargeContext, rule_id: str | None = None) -> bool:
    """Return True when the condition holds for the charge.

    Raises EvaluationError for condition objects that are not one of the
    supported shapes.
    """
    if isinstance(condition, ComparisonCondition):
        return _compare(condition, context)
    if isinstance(condition, StringMatchCondition):
        return _string_match(condition, context)
    if isinstance(condition, MembershipCondition):
        return _membership(condition, context)
    raise EvaluationError(rule_id, f"unsupported condition type {type(condition).__name__}")
