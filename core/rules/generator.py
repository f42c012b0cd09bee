"""Substitution rule generation from OCR field mappings."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import cast

from core.matching.models import MatchingPolicy, ValueType
from core.matching.policy_loader import get_default_policy
from core.matching.validator import find_rejection_reason
from core.matching.value_types import canonical_form, get_value_type_spec
from core.rules.mode_policy import decide_match_mode
from core.rules.models import (
    FieldMapping,
    RuleGenerationResult,
    SkippedMapping,
    SkipReason,
    SubstitutionRule,
)
from core.utils.events import log_event

logger = logging.getLogger("ocrfix.rules")


def generate_rules(
    mappings: Sequence[FieldMapping], *, policy: MatchingPolicy | None = None
) -> list[SubstitutionRule]:
    """Build ordered substitution rules for the mappings that need a correction."""

    return generate_rules_with_report(mappings, policy=policy).rules


def generate_rules_with_report(
    mappings: Sequence[FieldMapping], *, policy: MatchingPolicy | None = None
) -> RuleGenerationResult:
    """Build rules and record why every other mapping was skipped.

    Rules:
    - Rules keep the input mapping order; they are never sorted by length or specificity.
    - A mapping without an original value, with an empty OCR value, or whose original
      value fails validation produces a skip record instead of a rule.
    - For phone, amount and vin the OCR value must pass the same structural check, and its
      canonical form must not be empty; otherwise the mapping is skipped and the document
      text is left alone.
    - A rule is emitted when the original value differs from the OCR value, or when the
      value type has a canonical form and the original value is not already canonical.
    - For phone, amount and vin the replacement is the canonical OCR value; for other
      types it is the OCR value as given.
    """

    active_policy = policy or get_default_policy()
    result = RuleGenerationResult()

    for mapping in mappings:
        built = _build_rule(mapping, active_policy)
        if isinstance(built, str):
            result.skipped.append(
                SkippedMapping(
                    field_name=mapping.field_name,
                    value_type=mapping.value_type,
                    reason=built,
                )
            )
            log_event(
                logger,
                logging.DEBUG,
                "mapping_skipped",
                field_name=mapping.field_name,
                value_type=mapping.value_type.value,
                reason=built,
            )
            continue

        result.rules.append(built)
        log_event(
            logger,
            logging.DEBUG,
            "rule_generated",
            field_name=mapping.field_name,
            value_type=mapping.value_type.value,
            match_mode=built.match_mode.value,
            noop=built.is_noop,
        )

    return result


def force_replacement(original_value: str, ocr_value: str, value_type: ValueType | str) -> bool:
    """True when the document text is not in the value type's canonical format."""

    canonical_original = canonical_form(original_value, value_type)
    return canonical_original is not None and canonical_original != original_value


def _build_rule(mapping: FieldMapping, policy: MatchingPolicy) -> SubstitutionRule | SkipReason:
    original = mapping.original_value
    if original is None or not original.strip():
        return "missing_original_value"
    if not mapping.ocr_value.strip():
        return "empty_ocr_value"

    rejection = find_rejection_reason(
        original, mapping.ocr_value, mapping.value_type, policy=policy
    )
    if rejection is not None:
        return cast(SkipReason, rejection)

    canonical_ocr = canonical_form(mapping.ocr_value, mapping.value_type)
    replacement = canonical_ocr if canonical_ocr is not None else mapping.ocr_value
    if not replacement.strip():
        return "empty_ocr_value"
    check = get_value_type_spec(mapping.value_type).check
    if check is not None and not check(mapping.ocr_value, policy):
        return "invalid_ocr_value"

    needs_replacement = original != mapping.ocr_value or force_replacement(
        original, mapping.ocr_value, mapping.value_type
    )
    if not needs_replacement:
        return "unchanged"

    return SubstitutionRule(
        search_text=original,
        replacement_text=replacement,
        match_mode=decide_match_mode(original, mapping.value_type, policy=policy),
        value_type=mapping.value_type,
        source_field=mapping.field_name,
    )
