"""Custom exceptions for core logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.rules.models import SubstitutionRule


class MalformedInputError(ValueError):
    """Raised when a caller violates the input contract of the correction core.

    Missing matches and skipped mappings are never reported through this error; they are
    returned as structured records instead.
    """

    def __init__(
        self,
        message: str,
        *,
        rule: SubstitutionRule | None = None,
        rule_index: int | None = None,
        field_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.rule = rule
        self.rule_index = rule_index
        self.field_name = field_name
