from __future__ import annotations

from core.matching.models import MatchMode, ValueType
from core.matching.value_types import (
    VALUE_TYPE_SPECS,
    canonical_amount,
    canonical_form,
    canonical_phone,
    canonical_vin,
    get_value_type_spec,
)


def test_every_value_type_has_a_spec() -> None:
    assert set(VALUE_TYPE_SPECS) == set(ValueType)


def test_canonical_phone_keeps_digits_and_leading_plus() -> None:
    assert canonical_phone("138 1234 5678") == "13812345678"
    assert canonical_phone("+86 138-1234-5678") == "+8613812345678"
    assert canonical_phone("１３８１２３４５６７８") == "13812345678"


def test_canonical_amount_drops_currency_and_grouping() -> None:
    assert canonical_amount("¥1,000.00") == "1000.00"
    assert canonical_amount("￥ 3,500元") == "3500"
    assert canonical_amount("-20.5") == "-20.5"


def test_canonical_vin_is_uppercase_without_separators() -> None:
    assert canonical_vin("lsvau2180n2183294") == "LSVAU2180N2183294"
    assert canonical_vin("LSVAU-2180N 2183294") == "LSVAU2180N2183294"


def test_free_text_types_have_no_canonical_form() -> None:
    assert canonical_form("上海某某有限公司", ValueType.COMPANY) is None
    assert canonical_form("张三", "contact") is None
    assert canonical_form("x", "not_a_type") is None


def test_default_modes() -> None:
    assert get_value_type_spec(ValueType.PHONE).default_mode is MatchMode.WHOLE_WORD
    assert get_value_type_spec(ValueType.AMOUNT).default_mode is MatchMode.WHOLE_WORD
    assert get_value_type_spec(ValueType.COMPANY).default_mode is MatchMode.SUBSTRING
    assert get_value_type_spec("not_a_type").default_mode is MatchMode.SUBSTRING
