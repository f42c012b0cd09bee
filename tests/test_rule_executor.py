from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from core.matching.models import MatchingPolicy, MatchMode, ValueType
from core.rules.executor import apply_rule, apply_rules, replace_spans
from core.rules.models import ExecutionSummary, SubstitutionRule
from core.utils.errors import MalformedInputError


def _rule(
    search_text: str,
    replacement_text: str,
    match_mode: MatchMode = MatchMode.SUBSTRING,
    value_type: ValueType = ValueType.GENERIC,
    source_field: str = "field",
) -> SubstitutionRule:
    return SubstitutionRule(
        search_text=search_text,
        replacement_text=replacement_text,
        match_mode=match_mode,
        value_type=value_type,
        source_field=source_field,
    )


def test_company_rule_replaces_exact_span() -> None:
    document = "甲方：上海某某有限公司（盖章），乙方：..."
    rule = _rule("上海某某有限公司（盖章）", "上海某某有限公司", value_type=ValueType.COMPANY)

    corrected, outcomes = apply_rules(document, [rule])

    assert corrected == "甲方：上海某某有限公司，乙方：..."
    assert len(outcomes) == 1
    assert outcomes[0].applied is True
    assert outcomes[0].match_count == 1
    assert outcomes[0].used_fallback is False
    assert outcomes[0].reason is None


def test_whole_word_miss_falls_back_to_substring() -> None:
    rule = _rule("ABC", "XYZ", match_mode=MatchMode.WHOLE_WORD)

    corrected, outcomes = apply_rules("公司ABC测试", [rule])

    assert corrected == "公司XYZ测试"
    assert outcomes[0].used_fallback is True
    assert outcomes[0].applied is True
    assert outcomes[0].match_count >= 1


def test_whole_word_hit_does_not_use_fallback() -> None:
    rule = _rule("13812345678", "13812345679", match_mode=MatchMode.WHOLE_WORD)

    corrected, outcomes = apply_rules("电话 13812345678 传真 138123456789", [rule])

    assert corrected == "电话 13812345679 传真 138123456789"
    assert outcomes[0].match_count == 1
    assert outcomes[0].used_fallback is False


def test_fallback_can_be_disabled_by_policy() -> None:
    rule = _rule("ABC", "XYZ", match_mode=MatchMode.WHOLE_WORD)
    policy = MatchingPolicy(fallback_to_substring=False)

    corrected, outcomes = apply_rules("公司ABC测试", [rule], policy=policy)

    assert corrected == "公司ABC测试"
    assert outcomes[0].applied is False
    assert outcomes[0].used_fallback is False
    assert outcomes[0].reason == "no_match"


def test_unmatched_rule_does_not_stop_later_rules() -> None:
    rules = [
        _rule("不存在的文本", "替换", source_field="missing"),
        _rule("李 四", "李四", source_field="contact"),
    ]

    corrected, outcomes = apply_rules("联系人：李 四", rules)

    assert corrected == "联系人：李四"
    assert [item.applied for item in outcomes] == [False, True]
    assert outcomes[0].match_count == 0
    assert outcomes[0].reason == "no_match"
    assert outcomes[0].used_fallback is False


def test_failed_fallback_is_still_recorded() -> None:
    rule = _rule("999", "000", match_mode=MatchMode.WHOLE_WORD)

    _, outcomes = apply_rules("金额 100 元", [rule])

    assert outcomes[0].applied is False
    assert outcomes[0].used_fallback is True
    assert outcomes[0].reason == "no_match"


def test_rules_compose_sequentially() -> None:
    rules = [_rule("A公司", "B公司"), _rule("B公司", "C公司")]

    corrected, outcomes = apply_rules("甲方A公司", rules)

    assert corrected == "甲方C公司"
    assert [item.applied for item in outcomes] == [True, True]


def test_multiple_spans_adjust_for_length_delta() -> None:
    rule = _rule("AB", "ABCD")

    corrected, outcomes = apply_rules("x AB y AB z", [rule])

    assert corrected == "x ABCD y ABCD z"
    assert outcomes[0].match_count == 2
    assert [(span.start, span.end) for span in outcomes[0].spans] == [(2, 4), (7, 9)]


def test_noop_rule_is_skipped() -> None:
    rule = _rule("1000.00", "1000.00", match_mode=MatchMode.WHOLE_WORD)

    corrected, outcomes = apply_rules("金额 1000.00 元", [rule])

    assert corrected == "金额 1000.00 元"
    assert outcomes[0].applied is False
    assert outcomes[0].reason == "noop_rule"


def test_second_pass_is_a_fixed_point() -> None:
    document = "甲方：上海某某有限公司（盖章），电话 138 1234 5678。"
    rules = [
        _rule("上海某某有限公司（盖章）", "上海某某有限公司", value_type=ValueType.COMPANY),
        _rule(
            "138 1234 5678",
            "13812345678",
            match_mode=MatchMode.WHOLE_WORD,
            value_type=ValueType.PHONE,
        ),
    ]

    first, _ = apply_rules(document, rules)
    second, outcomes = apply_rules(first, rules)

    assert first == "甲方：上海某某有限公司，电话 13812345678。"
    assert second == first
    assert not any(item.applied for item in outcomes)


def test_case_insensitive_match_is_replaced() -> None:
    rule = _rule("LSVAU2180N2183294", "LSVAU2180N2183295", value_type=ValueType.VIN)

    corrected, _ = apply_rules("车架号 lsvau2180n2183294", [rule])

    assert corrected == "车架号 LSVAU2180N2183295"


def test_apply_rule_returns_new_text_without_touching_input() -> None:
    document = "乙方：ACME Ltd."
    rule = _rule("ACME Ltd.", "ACME Ltd", value_type=ValueType.COMPANY)

    corrected, outcome = apply_rule(document, rule)

    assert document == "乙方：ACME Ltd."
    assert corrected == "乙方：ACME Ltd"
    assert outcome.applied is True


def test_replace_spans_with_no_spans_returns_document() -> None:
    assert replace_spans("abc", [], "x") == "abc"


def test_document_must_be_a_string() -> None:
    with pytest.raises(MalformedInputError):
        apply_rules(None, [_rule("a", "b")])  # type: ignore[arg-type]


def test_empty_search_text_fails_before_any_rule_runs() -> None:
    broken = SubstitutionRule.model_construct(
        search_text="",
        replacement_text="x",
        match_mode=MatchMode.SUBSTRING,
        value_type=ValueType.GENERIC,
        source_field="broken",
    )

    with pytest.raises(MalformedInputError) as exc_info:
        apply_rules("abc", [_rule("a", "b"), broken])

    assert exc_info.value.rule_index == 1
    assert exc_info.value.field_name == "broken"


def test_rule_model_enforces_search_text_bounds() -> None:
    with pytest.raises(ValidationError):
        _rule("", "x")
    with pytest.raises(ValidationError):
        _rule("a" * 201, "x")


def test_rules_are_immutable() -> None:
    rule = _rule("a", "b")

    with pytest.raises(ValidationError):
        rule.search_text = "c"  # type: ignore[misc]


def test_unmatched_rule_is_logged_at_info(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="ocrfix.rules")

    apply_rules("合同", [_rule("不存在", "x", source_field="partyA")])

    payloads = [
        json.loads(record.message) for record in caplog.records if record.name == "ocrfix.rules"
    ]
    assert payloads == [
        {
            "event": "rule_unmatched",
            "field_name": "partyA",
            "match_count": 0,
            "match_mode": "substring",
            "rule_index": 0,
            "used_fallback": False,
        }
    ]


def test_case_only_vin_rule_is_a_fixed_point() -> None:
    rules = [_rule("lsvau2180n2183294", "LSVAU2180N2183294", value_type=ValueType.VIN)]

    first, first_outcomes = apply_rules("车架号 lsvau2180n2183294", rules)
    second, second_outcomes = apply_rules(first, rules)

    assert first == "车架号 LSVAU2180N2183294"
    assert first_outcomes[0].applied is True
    assert second == first
    assert second_outcomes[0].applied is False
    assert second_outcomes[0].match_count == 0
    assert second_outcomes[0].reason == "already_corrected"


def test_only_spans_differing_from_replacement_are_replaced() -> None:
    rule = _rule("lsvau2180n2183294", "LSVAU2180N2183294", value_type=ValueType.VIN)
    document = "LSVAU2180N2183294 / lsvau2180n2183294"

    corrected, outcome = apply_rule(document, rule)

    assert corrected == "LSVAU2180N2183294 / LSVAU2180N2183294"
    assert outcome.match_count == 1
    assert [(span.start, span.end) for span in outcome.spans] == [(20, 37)]


def test_already_corrected_rule_is_not_counted_as_unmatched() -> None:
    rule = _rule("lsvau2180n2183294", "LSVAU2180N2183294", value_type=ValueType.VIN)

    _, outcomes = apply_rules("LSVAU2180N2183294", [rule])
    summary = ExecutionSummary.from_outcomes(outcomes)

    assert summary.applied_count == 0
    assert summary.unmatched_count == 0
    assert summary.replaced_spans == 0
