"""Rule generation and execution report models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.matching.models import MAX_SEARCH_TEXT_LENGTH, MatchMode, MatchSpan, ValueType

SkipReason = Literal[
    "missing_original_value",
    "empty_ocr_value",
    "label_separator",
    "too_long",
    "invalid_phone",
    "invalid_amount",
    "invalid_vin",
    "invalid_ocr_value",
    "unchanged",
]
OutcomeReason = Literal["no_match", "noop_rule", "already_corrected"]


class FieldMapping(BaseModel):
    """One OCR-extracted field and the value found in the document text."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field_name: str
    value_type: ValueType = ValueType.GENERIC
    ocr_value: str
    original_value: str | None = None


class SubstitutionRule(BaseModel):
    """A literal search/replace instruction derived from one field mapping."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    search_text: str = Field(min_length=1, max_length=MAX_SEARCH_TEXT_LENGTH)
    replacement_text: str
    match_mode: MatchMode
    value_type: ValueType
    source_field: str

    @property
    def is_noop(self) -> bool:
        return self.search_text == self.replacement_text


class SkippedMapping(BaseModel):
    """Mapping that produced no rule, with the reason code."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field_name: str
    value_type: ValueType
    reason: SkipReason


class RuleGenerationResult(BaseModel):
    """Ordered rules plus the skip records collected while generating them."""

    model_config = ConfigDict(extra="forbid")

    rules: list[SubstitutionRule] = Field(default_factory=list)
    skipped: list[SkippedMapping] = Field(default_factory=list)


class ReplacementOutcome(BaseModel):
    """Execution result of one rule.

    ``spans`` are offsets into the document text the rule ran against, which is the output
    of the previous rule rather than the original document.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    rule: SubstitutionRule
    match_count: int = 0
    applied: bool = False
    used_fallback: bool = False
    reason: OutcomeReason | None = None
    spans: list[MatchSpan] = Field(default_factory=list)


class ExecutionSummary(BaseModel):
    """Aggregate counts over one execution pass."""

    model_config = ConfigDict(extra="forbid")

    total_rules: int
    applied_count: int
    unmatched_count: int
    noop_count: int
    fallback_count: int
    replaced_spans: int

    @classmethod
    def from_outcomes(cls, outcomes: list[ReplacementOutcome]) -> ExecutionSummary:
        return cls(
            total_rules=len(outcomes),
            applied_count=sum(1 for item in outcomes if item.applied),
            unmatched_count=sum(1 for item in outcomes if item.reason == "no_match"),
            noop_count=sum(1 for item in outcomes if item.reason == "noop_rule"),
            fallback_count=sum(1 for item in outcomes if item.used_fallback),
            replaced_spans=sum(item.match_count for item in outcomes),
        )


class CorrectionOutput(BaseModel):
    """In-memory result of one document correction run."""

    model_config = ConfigDict(extra="forbid")

    original_document: str
    corrected_document: str
    rules: list[SubstitutionRule] = Field(default_factory=list)
    skipped: list[SkippedMapping] = Field(default_factory=list)
    outcomes: list[ReplacementOutcome] = Field(default_factory=list)
    summary: ExecutionSummary
