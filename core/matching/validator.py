"""Candidate value validation used before a field value becomes a substitution rule."""

from __future__ import annotations

from core.matching.models import MatchingPolicy, ValueType
from core.matching.policy_loader import get_default_policy
from core.matching.value_types import fold_width, get_value_type_spec

REASON_LABEL_SEPARATOR = "label_separator"
REASON_TOO_LONG = "too_long"


def find_rejection_reason(
    candidate_value: str,
    ocr_value: str,
    value_type: ValueType | str,
    *,
    policy: MatchingPolicy | None = None,
) -> str | None:
    """Return the reason code rejecting ``candidate_value``, or None when it is acceptable.

    Rules, checked in order:
    - a label separator (``:`` or ``：`` by default, also after width folding, so ``﹕`` counts)
      means a label was captured with the value;
    - more than ``max_value_length`` characters means the match ran across field boundaries;
    - phone, amount and vin values must pass their structural check.

    ``ocr_value`` is accepted for symmetry with the rule generator. A candidate equal to the
    OCR value is never rejected for that reason alone.
    """

    active_policy = policy or get_default_policy()

    folded = fold_width(candidate_value)
    if any(
        separator in candidate_value or separator in folded
        for separator in active_policy.label_separators
    ):
        return REASON_LABEL_SEPARATOR
    if len(candidate_value) > active_policy.max_value_length:
        return REASON_TOO_LONG

    spec = get_value_type_spec(value_type)
    if spec.check is not None and not spec.check(candidate_value, active_policy):
        return spec.invalid_reason
    return None


def is_valid_field_value(
    candidate_value: str,
    ocr_value: str,
    value_type: ValueType | str,
    *,
    policy: MatchingPolicy | None = None,
) -> bool:
    """Pure predicate form of :func:`find_rejection_reason`."""

    return find_rejection_reason(candidate_value, ocr_value, value_type, policy=policy) is None
