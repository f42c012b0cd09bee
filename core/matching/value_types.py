"""Per value-type contracts: structural checks, canonical forms and default match modes."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from core.matching.models import MatchingPolicy, MatchMode, ValueType

_PHONE_RE = re.compile(r"\+?\d+(?:[ -]\d+)*", re.ASCII)
_AMOUNT_RE = re.compile(
    r"(?:[¥$€£]\s*)?-?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?(?:\s*元)?", re.ASCII
)
_VIN_RE = re.compile(r"[A-HJ-NPR-Z0-9]{17}", re.ASCII | re.IGNORECASE)

_CURRENCY_CHARS = "¥$€£元"


@dataclass(frozen=True)
class ValueTypeSpec:
    """Contract for one value type."""

    default_mode: MatchMode
    check: Callable[[str, MatchingPolicy], bool] | None = None
    canonicalize: Callable[[str], str] | None = None
    invalid_reason: str | None = None


def fold_width(value: str) -> str:
    """Fold full-width digits, letters and punctuation to their ASCII forms."""

    return unicodedata.normalize("NFKC", value)


def _check_phone(value: str, policy: MatchingPolicy) -> bool:
    folded = fold_width(value).strip()
    if not _PHONE_RE.fullmatch(folded):
        return False
    digit_count = sum(1 for char in folded if char.isdigit())
    return policy.phone_min_digits <= digit_count <= policy.phone_max_digits


def _check_amount(value: str, policy: MatchingPolicy) -> bool:
    return _AMOUNT_RE.fullmatch(fold_width(value).strip()) is not None


def _check_vin(value: str, policy: MatchingPolicy) -> bool:
    return _VIN_RE.fullmatch(fold_width(value).strip()) is not None


def canonical_phone(value: str) -> str:
    folded = fold_width(value).strip()
    digits = "".join(char for char in folded if char.isascii() and char.isdigit())
    return f"+{digits}" if folded.startswith("+") else digits


def canonical_amount(value: str) -> str:
    folded = fold_width(value)
    return "".join(
        char
        for char in folded
        if char not in _CURRENCY_CHARS and char != "," and not char.isspace()
    )


def canonical_vin(value: str) -> str:
    folded = fold_width(value)
    return "".join(char for char in folded if char != "-" and not char.isspace()).upper()


VALUE_TYPE_SPECS: Mapping[ValueType, ValueTypeSpec] = MappingProxyType(
    {
        ValueType.COMPANY: ValueTypeSpec(default_mode=MatchMode.SUBSTRING),
        ValueType.CONTACT: ValueTypeSpec(default_mode=MatchMode.SUBSTRING),
        ValueType.PHONE: ValueTypeSpec(
            default_mode=MatchMode.WHOLE_WORD,
            check=_check_phone,
            canonicalize=canonical_phone,
            invalid_reason="invalid_phone",
        ),
        ValueType.AMOUNT: ValueTypeSpec(
            default_mode=MatchMode.WHOLE_WORD,
            check=_check_amount,
            canonicalize=canonical_amount,
            invalid_reason="invalid_amount",
        ),
        ValueType.VIN: ValueTypeSpec(
            default_mode=MatchMode.SUBSTRING,
            check=_check_vin,
            canonicalize=canonical_vin,
            invalid_reason="invalid_vin",
        ),
        ValueType.GENERIC: ValueTypeSpec(default_mode=MatchMode.SUBSTRING),
    }
)


def get_value_type_spec(value_type: ValueType | str) -> ValueTypeSpec:
    """Resolve a value type to its contract; unknown strings fall back to ``generic``."""

    try:
        return VALUE_TYPE_SPECS[ValueType(value_type)]
    except ValueError:
        return VALUE_TYPE_SPECS[ValueType.GENERIC]


def canonical_form(value: str, value_type: ValueType | str) -> str | None:
    """Return the canonical form of ``value``, or None when the type has none."""

    canonicalize = get_value_type_spec(value_type).canonicalize
    if canonicalize is None:
        return None
    return canonicalize(value)


def _assert_table_complete() -> None:
    missing = set(ValueType) - set(VALUE_TYPE_SPECS)
    if missing:
        names = sorted(item.value for item in missing)
        raise RuntimeError(f"Value type specs missing for: {names}")


_assert_table_complete()
