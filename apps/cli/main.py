"""Typer CLI entrypoint for OCR field correction."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any, Literal, cast

import typer

from apps.cli.io import (
    OutputPaths,
    build_output_paths,
    existing_output_files,
    load_document_text,
    load_mappings,
    write_correction_output_atomic,
    write_error_report_atomic,
)
from apps.cli.report_human import render_correction_summary
from core.matching.models import MatchMode
from core.matching.policy_loader import load_policy
from core.matching.text_matcher import search
from core.orchestrator.pipeline import run_correction
from core.rules.diagnostics import build_rule_diagnostics
from core.rules.generator import generate_rules_with_report
from core.rules.models import CorrectionOutput
from core.utils.errors import MalformedInputError

app = typer.Typer(help="OCR field correction CLI", rich_markup_mode=None)
ReportMode = Literal["human", "json", "both"]


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep `ocrfix run` as explicit command form."""


@app.command("run")
def run_command(
    document: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    mappings: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    out_dir: Annotated[Path, typer.Option()] = Path("."),
    policy: Annotated[Path | None, typer.Option()] = None,
    report: Annotated[str, typer.Option()] = "human",
    force: Annotated[
        bool, typer.Option("--force", help="Overwrite outputs when they already exist.")
    ] = False,
    no_overwrite: Annotated[
        bool,
        typer.Option(
            "--no-overwrite",
            help="Fail when outputs already exist.",
        ),
    ] = False,
) -> None:
    """Correct one document and write out.txt, out.rules.json and out.outcomes.json."""

    paths = build_output_paths(out_dir)
    normalized_report = report.lower().strip()
    if normalized_report not in {"human", "json", "both"}:
        typer.echo("ERROR: --report must be one of: human, json, both.")
        raise typer.Exit(code=1)
    report_mode = cast(ReportMode, normalized_report)

    if force and no_overwrite:
        typer.echo("ERROR: --force and --no-overwrite cannot be used together.")
        raise typer.Exit(code=1)

    existing = existing_output_files(paths)
    if existing and no_overwrite:
        typer.echo("ERROR: outputs already exist and --no-overwrite is enabled.")
        raise typer.Exit(code=1)
    if existing:
        names = ", ".join(path.name for path in existing)
        typer.echo(f"INFO: overwriting existing outputs: {names}")

    output: CorrectionOutput | None = None
    diagnostics: dict[str, Any] | None = None
    failure_stage = "unknown"

    try:
        failure_stage = "load_policy"
        policy_model = load_policy(policy)
        failure_stage = "load_document"
        document_text = load_document_text(document)
        failure_stage = "load_mappings"
        mapping_models = load_mappings(mappings)
        failure_stage = "pipeline"
        output = run_correction(document_text, mapping_models, policy=policy_model)
        diagnostics = build_rule_diagnostics(document_text, output.outcomes, policy=policy_model)
    except MalformedInputError as exc:
        typer.echo(f"ERROR: malformed input: {exc}")
        _safe_write_error_report(paths, type(exc).__name__, str(exc), failure_stage)
        raise typer.Exit(code=2) from exc
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}")
        _safe_write_error_report(paths, type(exc).__name__, str(exc), failure_stage)
        raise typer.Exit(code=1) from exc

    try:
        write_correction_output_atomic(paths, output, diagnostics)
    except OSError as exc:
        typer.echo(f"ERROR: write output failed: {exc}")
        raise typer.Exit(code=1) from exc

    if report_mode in {"human", "both"}:
        typer.echo(render_correction_summary(output))
    if report_mode in {"json", "both"}:
        typer.echo(_dump_json(output.summary.model_dump(mode="json")))

    if output.summary.unmatched_count:
        typer.echo(
            "WARNING(unmatched): some rules found no occurrence "
            f"(count={output.summary.unmatched_count})."
        )
    typer.echo("INFO: success")


@app.command("rules")
def rules_command(
    mappings: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    policy: Annotated[Path | None, typer.Option()] = None,
) -> None:
    """Print the rules and skip records generated for a mappings file."""

    try:
        policy_model = load_policy(policy)
        result = generate_rules_with_report(load_mappings(mappings), policy=policy_model)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1) from exc

    typer.echo(_dump_json(result.model_dump(mode="json")))


@app.command("search")
def search_command(
    document: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    text: Annotated[str, typer.Option(...)],
    mode: Annotated[str, typer.Option()] = MatchMode.WHOLE_WORD.value,
    policy: Annotated[Path | None, typer.Option()] = None,
) -> None:
    """Print every match of one search text, for triaging a single rule."""

    normalized_mode = mode.lower().strip()
    if normalized_mode not in {item.value for item in MatchMode}:
        typer.echo("ERROR: --mode must be one of: whole_word, substring.")
        raise typer.Exit(code=1)

    try:
        policy_model = load_policy(policy)
        matches = search(
            load_document_text(document), text, MatchMode(normalized_mode), policy=policy_model
        )
    except MalformedInputError as exc:
        typer.echo(f"ERROR: malformed input: {exc}")
        raise typer.Exit(code=2) from exc
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1) from exc

    typer.echo(
        _dump_json(
            {
                "mode": normalized_mode,
                "count": len(matches),
                "matches": [asdict(item) for item in matches],
            }
        )
    )


def _safe_write_error_report(
    paths: OutputPaths, error_type: str, error_message: str, stage: str
) -> None:
    try:
        write_error_report_atomic(
            paths,
            error_type=error_type,
            error_message=error_message,
            stage=stage,
        )
    except OSError:
        pass


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
