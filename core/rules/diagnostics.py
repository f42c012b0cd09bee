"""Rule outcome diagnostics for failure triage."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from core.matching.models import MatchingPolicy, MatchMode
from core.matching.policy_loader import get_default_policy
from core.matching.text_matcher import search
from core.rules.models import ReplacementOutcome

_WHITESPACE_RE = re.compile(r"\s+")


def build_rule_diagnostics(
    document: str,
    outcomes: Sequence[ReplacementOutcome],
    *,
    policy: MatchingPolicy | None = None,
    max_examples: int = 5,
) -> dict[str, Any]:
    """Group unapplied and fallback outcomes by code with examples and suggestions.

    ``document`` is searched again for every example, so passing the original document
    shows what each rule would have found before earlier rules changed the text.
    """

    active_policy = policy or get_default_policy()
    by_code: dict[str, dict[str, Any]] = {}

    for index, outcome in enumerate(outcomes):
        code = _code_for_outcome(outcome)
        if code is None:
            continue
        if code not in by_code:
            by_code[code] = {
                "count": 0,
                "examples": [],
                "suggestions": _suggestions_for_code(code),
            }
        bucket = by_code[code]
        bucket["count"] += 1
        if len(bucket["examples"]) < max_examples:
            bucket["examples"].append(_build_example(document, index, outcome, active_policy))

    return {
        "rule_count": len(outcomes),
        "flagged_count": sum(bucket["count"] for bucket in by_code.values()),
        "codes": sorted(by_code.keys()),
        "by_code": {code: by_code[code] for code in sorted(by_code.keys())},
    }


def _code_for_outcome(outcome: ReplacementOutcome) -> str | None:
    if outcome.reason == "no_match":
        return "RULE_UNMATCHED"
    if outcome.reason == "noop_rule":
        return "RULE_NOOP"
    if outcome.used_fallback:
        return "FALLBACK_USED"
    return None


def _build_example(
    document: str,
    index: int,
    outcome: ReplacementOutcome,
    policy: MatchingPolicy,
) -> dict[str, Any]:
    rule = outcome.rule
    example: dict[str, Any] = {
        "rule_index": index,
        "source_field": rule.source_field,
        "search_text": rule.search_text,
        "match_mode": rule.match_mode.value,
        "whole_word_hits": len(
            search(document, rule.search_text, MatchMode.WHOLE_WORD, policy=policy)
        ),
        "substring_hits": len(
            search(document, rule.search_text, MatchMode.SUBSTRING, policy=policy)
        ),
    }
    if outcome.reason == "no_match":
        needle = _strip_whitespace(rule.search_text).lower()
        example["whitespace_insensitive_hit"] = needle in _strip_whitespace(document).lower()
    return example


def _strip_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub("", text)


def _suggestions_for_code(code: str) -> list[str]:
    if code == "RULE_UNMATCHED":
        return [
            "Check whether an earlier rule already rewrote this text (rules apply in order).",
            "If whitespace_insensitive_hit is true, the OCR original value differs from the "
            "document only in spacing or line breaks.",
        ]
    if code == "RULE_NOOP":
        return ["The original value is already in the expected form; no change is needed."]
    if code == "FALLBACK_USED":
        return [
            "The value is glued to neighbouring letters, digits or ideographs; "
            "review the replaced span for partial-token collisions.",
        ]
    return ["Review this rule in out.outcomes.json."]
