#!/usr/bin/env python3
"""Summarize out.outcomes.json reports across correction runs."""

from __future__ import annotations

import argparse
import json
from collections import Counter
from pathlib import Path
from typing import Any


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize OCR correction outcome reports.")
    parser.add_argument("files", nargs="+", help="One or more out.outcomes.json files.")
    parser.add_argument("--json", action="store_true", help="Output JSON.")
    return parser.parse_args()


def summarize_outcome_files(paths: list[Path]) -> dict[str, Any]:
    reason_counts: Counter[str] = Counter()
    mode_counts: Counter[str] = Counter()
    rules_total = 0
    applied = 0
    fallback = 0
    errored_runs = 0
    parse_errors = 0

    for path in paths:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except Exception:  # noqa: BLE001
            parse_errors += 1
            continue

        if not isinstance(payload, dict):
            parse_errors += 1
            continue
        if payload.get("error") is not None:
            errored_runs += 1

        outcomes = payload.get("outcomes")
        if not isinstance(outcomes, list):
            continue

        for outcome in outcomes:
            if not isinstance(outcome, dict):
                parse_errors += 1
                continue
            rules_total += 1
            if outcome.get("applied") is True:
                applied += 1
            if outcome.get("used_fallback") is True:
                fallback += 1
            reason = outcome.get("reason")
            if isinstance(reason, str):
                reason_counts[reason] += 1
            rule = outcome.get("rule")
            if isinstance(rule, dict) and isinstance(rule.get("match_mode"), str):
                mode_counts[rule["match_mode"]] += 1

    return {
        "files": [str(path) for path in paths],
        "parse_errors": parse_errors,
        "errored_runs": errored_runs,
        "rules_total": rules_total,
        "applied_count": applied,
        "fallback_count": fallback,
        "applied_ratio": round(applied / rules_total, 4) if rules_total else None,
        "reason_counts": dict(sorted(reason_counts.items())),
        "match_mode_counts": dict(sorted(mode_counts.items())),
    }


def main() -> None:
    args = _parse_args()
    paths = [Path(item).expanduser() for item in args.files]
    summary = summarize_outcome_files(paths)

    if args.json:
        print(json.dumps(summary, ensure_ascii=False, indent=2, sort_keys=True))
        return

    print("OCR Correction Outcome Summary")
    print(f"files={len(summary['files'])}")
    print(f"parse_errors={summary['parse_errors']}")
    print(f"errored_runs={summary['errored_runs']}")
    print(f"rules_total={summary['rules_total']}")
    print(f"applied_count={summary['applied_count']}")
    print(f"fallback_count={summary['fallback_count']}")
    print(f"applied_ratio={summary['applied_ratio']}")
    print(f"reason_counts={summary['reason_counts']}")
    print(f"match_mode_counts={summary['match_mode_counts']}")


if __name__ == "__main__":
    main()
