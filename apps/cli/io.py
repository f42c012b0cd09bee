"""CLI I/O helpers for input loading and atomic output writing."""

from __future__ import annotations

import json
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from docx import Document
from pydantic import TypeAdapter

from core.rules.models import CorrectionOutput, FieldMapping

_MAPPINGS_ADAPTER = TypeAdapter(list[FieldMapping])


@dataclass(frozen=True)
class OutputPaths:
    """Fixed output artifact paths for a single run."""

    text: Path
    rules: Path
    outcomes: Path


def build_output_paths(out_dir: Path) -> OutputPaths:
    """Build fixed output file paths under out_dir."""

    return OutputPaths(
        text=out_dir / "out.txt",
        rules=out_dir / "out.rules.json",
        outcomes=out_dir / "out.outcomes.json",
    )


def existing_output_files(paths: OutputPaths) -> list[Path]:
    """Return existing output files among fixed artifact paths."""

    return [path for path in (paths.text, paths.rules, paths.outcomes) if path.exists()]


def load_document_text(path: Path) -> str:
    """Load document text from a UTF-8 text file or a .docx file.

    For .docx, body paragraphs come first, then table cell paragraphs row by row, all
    joined with newlines.
    """

    if path.suffix.lower() != ".docx":
        return path.read_text(encoding="utf-8")

    document = Document(str(path))
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            for cell in row.cells:
                lines.extend(paragraph.text for paragraph in cell.paragraphs)
    return "\n".join(lines)


def load_mappings(path: Path) -> list[FieldMapping]:
    """Load field mappings from a JSON list or an object with a ``mappings`` list."""

    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("mappings")
    if not isinstance(raw, list):
        raise ValueError("Mappings JSON must be a list or an object with a 'mappings' list")
    return _MAPPINGS_ADAPTER.validate_python(raw)


def write_correction_output_atomic(
    paths: OutputPaths,
    output: CorrectionOutput,
    diagnostics: dict[str, Any] | None = None,
) -> None:
    """Write corrected text, rules and outcomes using temporary files + replace."""

    paths.text.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_text(paths.text, output.corrected_document)
    _atomic_write_json(
        paths.rules,
        {
            "rules": [rule.model_dump(mode="json") for rule in output.rules],
            "skipped": [item.model_dump(mode="json") for item in output.skipped],
        },
    )
    outcomes_payload: dict[str, Any] = {
        "outcomes": [item.model_dump(mode="json") for item in output.outcomes],
        "summary": output.summary.model_dump(mode="json"),
    }
    if diagnostics is not None:
        outcomes_payload["diagnostics"] = diagnostics
    _atomic_write_json(paths.outcomes, outcomes_payload)


def write_error_report_atomic(
    paths: OutputPaths,
    *,
    error_type: str,
    error_message: str,
    stage: str,
) -> None:
    """Write an outcomes report carrying only the error metadata."""

    payload = {
        "outcomes": [],
        "summary": None,
        "error": {
            "error_type": error_type,
            "error_message": error_message,
            "stage": stage,
        },
    }
    paths.outcomes.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_json(paths.outcomes, payload)


def _atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.name}.",
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        json.dump(payload, tmp, ensure_ascii=False, sort_keys=True, indent=2)

    tmp_path.replace(path)


def _atomic_write_text(path: Path, text: str) -> None:
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.name}.",
        suffix=".tmp",
        newline="",
    ) as tmp:
        tmp_path = Path(tmp.name)
        tmp.write(text)

    tmp_path.replace(path)
