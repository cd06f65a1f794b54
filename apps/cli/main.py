
"""Typer CLI entrypoint for mcpsec assessments."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from packages.exporters.jsonl import write_jsonl
from packages.exporters.sarif import to_sarif
from packages.orchestrator.pipeline import run_assessment
from packages.schema.models import AssessmentResult
from packages.settings.loader import load_settings

app = typer.Typer(add_completion=False)
console = Console()

TOOL_VERSION = "0.1.0"

_VALID_FORMATS = {"sarif", "json", "jsonl", "table"}
_SEVERITY_STYLES = {
    "Critical": "bold red",
    "High": "red",
    "Medium": "yellow",
    "Low": "cyan",
}


def _normalize_formats(values: Sequence[str]) -> List[str]:
    if not values:
        return ["sarif"]
    normalized = []
    for value in values:
        fmt = value.lower()
        if fmt not in _VALID_FORMATS:
            raise typer.BadParameter(
                f"Unsupported format '{value}'. Choose from {sorted(_VALID_FORMATS)}"
            )
        if fmt not in normalized:
            normalized.append(fmt)
    return normalized


def _configure_logging(verbose: bool) -> None:
    level = (os.environ.get("MCPSEC_LOG_LEVEL") or ("DEBUG" if verbose else "INFO")).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise typer.BadParameter(
            f"Unknown log level '{level}' in MCPSEC_LOG_LEVEL. "
            "Choose from DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def assess(
    url: str = typer.Option(..., "--url", help="URL of the MCP server to assess"),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", envvar="MCPSEC_API_KEY", help="Bearer token for the target server"
    ),
    model: Optional[str] = typer.Option(None, "--model", help="Analysis model for the inspection service"),
    format: List[str] = typer.Option(
        ["sarif"], "--format", help="Repeatable option: sarif, json, jsonl, table"
    ),
    out: Path = typer.Option(Path("artifacts/mcpsec.sarif"), "--out", help="Output path for SARIF"),
    fail_under: Optional[int] = typer.Option(
        None,
        "--fail-under",
        min=0,
        max=100,
        help="Exit 1 when the security score is below this value",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run the inspection pipeline against an MCP server and export findings."""

    formats = _normalize_formats(format)
    _configure_logging(verbose)

    settings = load_settings()
    effective_model = model or settings.assessment.default_model
    console.log(
        f"Starting assessment: url={url} model={effective_model} "
        f"api_key={'yes' if api_key else 'no'} formats={formats}"
    )

    result = run_assessment(url, effective_model, api_key, settings=settings)

    _export_results(result, formats=formats, out=out, target_url=url, model=effective_model)

    if not result.success:
        console.print(f"[red]Assessment failed ({result.error_kind}): {result.error}[/]")
        raise typer.Exit(code=2)

    counts = result.summary.severity_counts
    console.print(
        f"Security score [bold]{result.security_score}/100[/] ({result.summary.posture}); "
        f"{len(result.findings)} finding(s): "
        + ", ".join(f"{counts[level]} {level.lower()}" for level in counts)
    )
    if result.warnings:
        console.print(f"[yellow]{len(result.warnings)} malformed upstream entries skipped[/]")

    if fail_under is not None and result.security_score < fail_under:
        console.print(f"[red]Security score below threshold {fail_under}[/]")
        raise typer.Exit(code=1)

    console.print("[green]Assessment passed[/]")
    raise typer.Exit(code=0)


def _export_results(
    result: AssessmentResult,
    *,
    formats: Sequence[str],
    out: Path,
    target_url: str,
    model: str,
) -> dict[str, Path]:
    fmt_set = set(formats)
    outputs: dict[str, Path] = {}

    if "sarif" in fmt_set:
        sarif_obj = to_sarif(result, target_url, tool_name="mcpsec", tool_version=TOOL_VERSION)
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", encoding="utf-8") as handle:
            json.dump(sarif_obj, handle, indent=2)
            handle.write("\n")
        outputs["sarif"] = out

    if "json" in fmt_set:
        json_path = out if out.suffix == ".json" and fmt_set == {"json"} else out.with_suffix(".json")
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(result.model_dump_json(by_alias=True, indent=2) + "\n", encoding="utf-8")
        outputs["json"] = json_path

    if "jsonl" in fmt_set:
        jsonl_path = out if out.suffix == ".jsonl" and fmt_set == {"jsonl"} else out.with_suffix(".jsonl")
        write_jsonl(jsonl_path, result, target_url, model)
        outputs["jsonl"] = jsonl_path

    if "table" in fmt_set:
        table = Table(title="mcpsec findings")
        table.add_column("ID", no_wrap=True)
        table.add_column("Tool")
        table.add_column("Severity")
        table.add_column("Type")
        table.add_column("Description")
        for finding in result.findings:
            style = _SEVERITY_STYLES.get(finding.severity, "")
            table.add_row(
                finding.id,
                finding.tool_name,
                f"[{style}]{finding.severity}[/]",
                finding.type,
                finding.description,
            )
        console.print(table)

    return outputs

if __name__ == "__main__":  # pragma: no cover - manual execution
    app()
