"""Literal text search with CJK-aware whole-word boundaries."""

from __future__ import annotations

import re
from functools import lru_cache

from core.matching.char_classes import CharPredicate, build_word_char_predicate
from core.matching.models import MatchingPolicy, MatchMode, MatchSpan
from core.matching.policy_loader import get_default_policy
from core.utils.errors import MalformedInputError


def search(
    document: str,
    search_text: str,
    mode: MatchMode,
    *,
    policy: MatchingPolicy | None = None,
) -> list[MatchSpan]:
    """Find all non-overlapping occurrences of ``search_text`` in ``document``.

    Rules:
    - ``search_text`` is always a literal; regex metacharacters carry no meaning.
    - Matching is case-insensitive and scans left to right. After an accepted match the
      scan resumes at its end offset.
    - In whole-word mode the characters directly before and after a candidate must not be
      word characters (the union of the policy's enabled character classes). A rejected
      candidate does not consume text; the scan resumes one character after its start.

    Returns:
        Spans in document order; an empty list when nothing matches.
    """

    if not isinstance(document, str):
        raise MalformedInputError(f"document must be a string, got {type(document).__name__}")
    if not isinstance(search_text, str) or not search_text:
        raise MalformedInputError("search text must be a non-empty string")

    mode = MatchMode(mode)
    active_policy = policy or get_default_policy()
    pattern = _compile_literal(search_text)
    is_word_char = (
        _word_char_predicate(tuple(active_policy.word_char_classes))
        if mode is MatchMode.WHOLE_WORD
        else None
    )

    spans: list[MatchSpan] = []
    position = 0
    while position <= len(document):
        match = pattern.search(document, position)
        if match is None:
            break

        start, end = match.span()
        if is_word_char is not None and not _has_boundaries(document, start, end, is_word_char):
            position = start + 1
            continue

        spans.append(MatchSpan(start=start, end=end, matched_text=match.group(0)))
        position = end

    return spans


def _has_boundaries(document: str, start: int, end: int, is_word_char: CharPredicate) -> bool:
    if start > 0 and is_word_char(document[start - 1]):
        return False
    if end < len(document) and is_word_char(document[end]):
        return False
    return True


@lru_cache(maxsize=256)
def _compile_literal(search_text: str) -> re.Pattern[str]:
    return re.compile(re.escape(search_text), re.IGNORECASE)


@lru_cache(maxsize=16)
def _word_char_predicate(class_names: tuple[str, ...]) -> CharPredicate:
    return build_word_char_predicate(class_names)
