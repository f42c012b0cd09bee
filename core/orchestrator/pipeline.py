"""Orchestration pipeline for one document correction run."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.matching.models import MatchingPolicy
from core.matching.policy_loader import get_default_policy
from core.rules.executor import apply_rules
from core.rules.generator import generate_rules_with_report
from core.rules.models import CorrectionOutput, ExecutionSummary, FieldMapping
from core.utils.errors import MalformedInputError
from core.utils.events import log_event

logger = logging.getLogger("ocrfix.pipeline")


def run_correction(
    document: str,
    mappings: Sequence[FieldMapping],
    *,
    policy: MatchingPolicy | None = None,
) -> CorrectionOutput:
    """Execute generate -> apply for one document.

    The run returns a (possibly partially) corrected document whenever the inputs satisfy
    the contract; skipped mappings and unmatched rules are reported, not raised.
    """

    if not isinstance(document, str):
        raise MalformedInputError(f"document must be a string, got {type(document).__name__}")

    active_policy = policy or get_default_policy()
    generation = generate_rules_with_report(mappings, policy=active_policy)
    corrected, outcomes = apply_rules(document, generation.rules, policy=active_policy)
    summary = ExecutionSummary.from_outcomes(outcomes)

    log_event(
        logger,
        logging.INFO,
        "run_done",
        mapping_count=len(mappings),
        skipped_count=len(generation.skipped),
        **summary.model_dump(),
    )

    return CorrectionOutput(
        original_document=document,
        corrected_document=corrected,
        rules=generation.rules,
        skipped=generation.skipped,
        outcomes=outcomes,
        summary=summary,
    )
