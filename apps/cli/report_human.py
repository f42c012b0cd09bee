"""Human-readable correction summary rendering for CLI output."""

from __future__ import annotations

from collections import Counter

from core.rules.models import CorrectionOutput


def render_correction_summary(output: CorrectionOutput, *, max_items: int = 5) -> str:
    """Render one-screen human-readable correction summary."""

    summary = output.summary
    lines: list[str] = ["correction_summary:"]
    lines.append(
        f"rules={summary.total_rules} applied={summary.applied_count} "
        f"unmatched={summary.unmatched_count} noop={summary.noop_count} "
        f"fallback={summary.fallback_count} replaced_spans={summary.replaced_spans}"
    )

    skip_counter: Counter[str] = Counter(item.reason for item in output.skipped)
    if skip_counter:
        top_items = sorted(skip_counter.items(), key=lambda item: (-item[1], item[0]))[:max_items]
        lines.append("skipped: " + ", ".join(f"{reason}={count}" for reason, count in top_items))
    else:
        lines.append("skipped: none")

    unmatched = [item for item in output.outcomes if item.reason == "no_match"]
    if unmatched:
        lines.append("unmatched_fields:")
        for outcome in unmatched[:max_items]:
            lines.append(
                f"- {outcome.rule.source_field}: {_clip(outcome.rule.search_text)} "
                f"({outcome.rule.match_mode.value})"
            )
        if len(unmatched) > max_items:
            lines.append(f"- ... {len(unmatched) - max_items} more")

    fallback = [item for item in output.outcomes if item.used_fallback and item.applied]
    if fallback:
        names = ", ".join(item.rule.source_field for item in fallback[:max_items])
        lines.append(f"fallback_fields: {names}")

    return "\n".join(lines)


def _clip(text: str, limit: int = 40) -> str:
    if len(text) <= limit:
        return repr(text)
    return repr(text[: limit - 3] + "...")
