"""Data models for text matching and the matching policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.matching.char_classes import CHAR_CLASSES, DEFAULT_WORD_CHAR_CLASSES

MAX_SEARCH_TEXT_LENGTH = 200


class ValueType(str, Enum):
    """Closed set of field value types produced by the OCR collaborator."""

    COMPANY = "company"
    CONTACT = "contact"
    PHONE = "phone"
    AMOUNT = "amount"
    VIN = "vin"
    GENERIC = "generic"


class MatchMode(str, Enum):
    """How a search text is located inside a document."""

    WHOLE_WORD = "whole_word"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class MatchSpan:
    """One occurrence of a search text inside a document string."""

    start: int
    end: int
    matched_text: str


class MatchingPolicy(BaseModel):
    """Matching and validation policy loaded from YAML."""

    model_config = ConfigDict(extra="forbid")

    max_value_length: int = Field(
        default=MAX_SEARCH_TEXT_LENGTH, gt=0, le=MAX_SEARCH_TEXT_LENGTH
    )
    label_separators: list[str] = Field(default_factory=lambda: [":", "："])
    phone_min_digits: int = Field(default=7, gt=0)
    phone_max_digits: int = Field(default=15, gt=0)
    word_char_classes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_WORD_CHAR_CLASSES)
    )
    match_mode_overrides: dict[ValueType, MatchMode] = Field(default_factory=dict)
    fallback_to_substring: bool = True

    @field_validator("word_char_classes")
    @classmethod
    def _known_char_classes(cls, value: list[str]) -> list[str]:
        unknown = sorted(set(value) - set(CHAR_CLASSES))
        if unknown:
            raise ValueError(f"unknown character classes: {unknown}")
        return value

    @field_validator("label_separators")
    @classmethod
    def _non_empty_separators(cls, value: list[str]) -> list[str]:
        if any(not item for item in value):
            raise ValueError("label separators must be non-empty strings")
        return value
