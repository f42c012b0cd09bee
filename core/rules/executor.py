"""Sequential rule application with whole-word to substring fallback."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.matching.models import MatchingPolicy, MatchMode, MatchSpan
from core.matching.policy_loader import get_default_policy
from core.matching.text_matcher import search
from core.rules.models import ReplacementOutcome, SubstitutionRule
from core.utils.errors import MalformedInputError
from core.utils.events import log_event

logger = logging.getLogger("ocrfix.rules")


def apply_rules(
    document: str,
    rules: Sequence[SubstitutionRule],
    *,
    policy: MatchingPolicy | None = None,
) -> tuple[str, list[ReplacementOutcome]]:
    """Apply rules in order and return the corrected text with one outcome per rule.

    Each rule runs against the text produced by the previous rule. A rule that matches
    nothing is reported with ``applied=False`` and never stops the remaining rules.

    Raises:
        MalformedInputError: document is not a string or a rule has an empty search text.
            Inputs are checked before any rule is applied.
    """

    _check_inputs(document, rules)
    active_policy = policy or get_default_policy()

    current = document
    outcomes: list[ReplacementOutcome] = []
    for index, rule in enumerate(rules):
        current, outcome = apply_rule(current, rule, policy=active_policy)
        outcomes.append(outcome)
        _log_outcome(index, outcome)

    return current, outcomes


def apply_rule(
    document: str, rule: SubstitutionRule, *, policy: MatchingPolicy | None = None
) -> tuple[str, ReplacementOutcome]:
    """Apply one rule and return the new text plus its outcome.

    Matches whose text is already identical to the replacement are left alone and are not
    counted; when every match is such a span the outcome reason is ``already_corrected``.
    """

    if rule.is_noop:
        return document, ReplacementOutcome(rule=rule, reason="noop_rule")

    active_policy = policy or get_default_policy()
    found, used_fallback = find_rule_spans(document, rule, policy=active_policy)
    if not found:
        return document, ReplacementOutcome(
            rule=rule, used_fallback=used_fallback, reason="no_match"
        )

    # Case-insensitive search also finds text that already reads as the replacement.
    spans = [span for span in found if span.matched_text != rule.replacement_text]
    if not spans:
        return document, ReplacementOutcome(
            rule=rule, used_fallback=used_fallback, reason="already_corrected"
        )

    return replace_spans(document, spans, rule.replacement_text), ReplacementOutcome(
        rule=rule,
        match_count=len(spans),
        applied=True,
        used_fallback=used_fallback,
        spans=spans,
    )


def find_rule_spans(
    document: str, rule: SubstitutionRule, *, policy: MatchingPolicy | None = None
) -> tuple[list[MatchSpan], bool]:
    """Search with the rule's mode, then once more as substring when whole-word found nothing.

    Returns:
        The spans found and whether the substring fallback produced the result.
    """

    active_policy = policy or get_default_policy()
    spans = search(document, rule.search_text, rule.match_mode, policy=active_policy)
    if spans or rule.match_mode is not MatchMode.WHOLE_WORD:
        return spans, False
    if not active_policy.fallback_to_substring:
        return spans, False
    return search(document, rule.search_text, MatchMode.SUBSTRING, policy=active_policy), True


def replace_spans(document: str, spans: Sequence[MatchSpan], replacement: str) -> str:
    """Replace ordered, non-overlapping spans left to right."""

    text = document
    delta = 0
    for span in spans:
        start = span.start + delta
        end = span.end + delta
        text = text[:start] + replacement + text[end:]
        delta += len(replacement) - (span.end - span.start)
    return text


def _check_inputs(document: object, rules: Sequence[SubstitutionRule]) -> None:
    if not isinstance(document, str):
        raise MalformedInputError(f"document must be a string, got {type(document).__name__}")
    for index, rule in enumerate(rules):
        if not rule.search_text:
            raise MalformedInputError(
                f"rule {index} has an empty search text",
                rule=rule,
                rule_index=index,
                field_name=rule.source_field,
            )


def _log_outcome(index: int, outcome: ReplacementOutcome) -> None:
    if outcome.applied:
        event = "rule_applied"
    elif outcome.reason == "noop_rule":
        event = "rule_noop"
    elif outcome.reason == "already_corrected":
        event = "rule_already_corrected"
    else:
        event = "rule_unmatched"
    log_event(
        logger,
        logging.INFO if event == "rule_unmatched" else logging.DEBUG,
        event,
        rule_index=index,
        field_name=outcome.rule.source_field,
        match_mode=outcome.rule.match_mode.value,
        match_count=outcome.match_count,
        used_fallback=outcome.used_fallback,
    )
