"""Named character classes used for word-boundary detection.

A character counts as a word character when it belongs to any enabled class. New scripts are
supported by registering another predicate here and enabling it in the matching policy.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

CharPredicate = Callable[[str], bool]

_CJK_RANGES: tuple[tuple[int, int], ...] = (
    (0x3400, 0x4DBF),  # Extension A
    (0x4E00, 0x9FFF),  # Unified Ideographs
    (0xF900, 0xFAFF),  # Compatibility Ideographs
    (0x20000, 0x2EBEF),  # Extensions B-F
)


def _in_ranges(char: str, ranges: Iterable[tuple[int, int]]) -> bool:
    code = ord(char)
    return any(start <= code <= end for start, end in ranges)


def is_cjk_ideograph(char: str) -> bool:
    return _in_ranges(char, _CJK_RANGES)


def is_ascii_letter(char: str) -> bool:
    return ("a" <= char <= "z") or ("A" <= char <= "Z")


def is_ascii_digit(char: str) -> bool:
    return "0" <= char <= "9"


def is_underscore(char: str) -> bool:
    return char == "_"


def is_kana(char: str) -> bool:
    return _in_ranges(char, ((0x3040, 0x309F), (0x30A0, 0x30FF)))


def is_hangul(char: str) -> bool:
    return _in_ranges(char, ((0xAC00, 0xD7AF), (0x1100, 0x11FF)))


def is_fullwidth_alnum(char: str) -> bool:
    return _in_ranges(char, ((0xFF10, 0xFF19), (0xFF21, 0xFF3A), (0xFF41, 0xFF5A)))


CHAR_CLASSES: Mapping[str, CharPredicate] = MappingProxyType(
    {
        "cjk": is_cjk_ideograph,
        "ascii_letter": is_ascii_letter,
        "ascii_digit": is_ascii_digit,
        "underscore": is_underscore,
        "kana": is_kana,
        "hangul": is_hangul,
        "fullwidth_alnum": is_fullwidth_alnum,
    }
)

DEFAULT_WORD_CHAR_CLASSES: tuple[str, ...] = ("cjk", "ascii_letter", "ascii_digit", "underscore")


def build_word_char_predicate(class_names: Iterable[str]) -> CharPredicate:
    """Combine named classes into a single word-character predicate."""

    predicates: list[CharPredicate] = []
    for name in class_names:
        try:
            predicates.append(CHAR_CLASSES[name])
        except KeyError as exc:
            raise ValueError(f"Unknown character class: {name}") from exc

    def _is_word_char(char: str) -> bool:
        return any(predicate(char) for predicate in predicates)

    return _is_word_char


def contains_cjk(text: str) -> bool:
    return any(is_cjk_ideograph(char) for char in text)
