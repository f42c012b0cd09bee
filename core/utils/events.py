"""Structured JSON-line logging helpers."""

from __future__ import annotations

import json
import logging
from typing import Any


def dump_event(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit one structured event; payload is serialized only when the level is enabled."""

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, dump_event(payload))
