"""Policy loading utilities for matching and validation."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from core.matching.models import MatchingPolicy


def load_policy(path: Path | None = None) -> MatchingPolicy:
    """Load and validate matching policy from YAML."""

    policy_path = path or Path(__file__).with_name("policy.yaml")

    try:
        raw = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Policy file not found: {policy_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in policy file: {policy_path}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Policy file must contain a mapping: {policy_path}")

    try:
        policy = MatchingPolicy.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid policy schema: {policy_path}") from exc

    if policy.phone_min_digits > policy.phone_max_digits:
        raise ValueError(
            f"Invalid phone digit range in {policy_path}: "
            f"{policy.phone_min_digits} > {policy.phone_max_digits}"
        )
    return policy


@lru_cache(maxsize=1)
def get_default_policy() -> MatchingPolicy:
    """Return the packaged policy, loaded once per process."""

    return load_policy()
