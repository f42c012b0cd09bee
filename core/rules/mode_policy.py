"""Match mode selection for generated substitution rules."""

from __future__ import annotations

from core.matching.char_classes import contains_cjk
from core.matching.models import MatchingPolicy, MatchMode, ValueType
from core.matching.policy_loader import get_default_policy
from core.matching.value_types import get_value_type_spec


def decide_match_mode(
    search_text: str,
    value_type: ValueType | str,
    *,
    policy: MatchingPolicy | None = None,
) -> MatchMode:
    """Pick whole-word or substring matching for a search text.

    Any CJK ideograph forces substring matching. Otherwise a policy override for the value
    type wins over the type's default mode.
    """

    if contains_cjk(search_text):
        return MatchMode.SUBSTRING

    active_policy = policy or get_default_policy()
    try:
        override = active_policy.match_mode_overrides.get(ValueType(value_type))
    except ValueError:
        override = None
    if override is not None:
        return override
    return get_value_type_spec(value_type).default_mode
