"""Shape gate between repaired upstream JSON and the normalizer.

The payload as a whole must be an array of tool entries; anything else is a
SchemaValidationError. Inside a valid array, a malformed tool entry or finding
is skipped and reported as a PartialDataError diagnostic instead of failing
the run. A tool with no analysis, or with an empty findings list, is a clean
tool and is kept.
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import ValidationError

from packages.schema.errors import PartialDataError, SchemaValidationError
from packages.schema.models import (
    ANALYSIS_LABELS,
    AnalysisType,
    RawFinding,
    ToolVulnerabilityRecord,
    VulnerabilityAnalysis,
)

_ANALYSIS_KEYS = ("vulnerability_analysis", "vulnerabilityAnalysis")


def validate(
    payload: Any,
    analysis_type: Optional[AnalysisType] = None,
    diagnostics: Optional[List[PartialDataError]] = None,
) -> List[ToolVulnerabilityRecord]:
    """Check ``payload`` against the tool-array shape and return typed records.

    Skipped entries are appended to ``diagnostics`` when a list is supplied.
    """

    if not isinstance(payload, list):
        label = ANALYSIS_LABELS.get(analysis_type or "", "Inspection")
        raise SchemaValidationError(
            f"Invalid response from {label.lower()} endpoint: expected a JSON array "
            f"of tools, got {_type_name(payload)}",
            analysis_type=analysis_type,
        )

    sink: List[PartialDataError] = diagnostics if diagnostics is not None else []
    records: List[ToolVulnerabilityRecord] = []
    for index, element in enumerate(payload):
        record = _validate_tool(element, f"tools[{index}]", sink)
        if record is not None:
            records.append(record)
    return records


def _validate_tool(
    element: Any,
    location: str,
    sink: List[PartialDataError],
) -> Optional[ToolVulnerabilityRecord]:
    if not isinstance(element, dict):
        sink.append(PartialDataError(f"expected an object, got {_type_name(element)}", location))
        return None

    name = element.get("name")
    if not isinstance(name, str) or not name.strip():
        sink.append(PartialDataError("missing string 'name'", location))
        return None

    description = element.get("description")
    raw_analysis = next((element[key] for key in _ANALYSIS_KEYS if key in element), None)

    return ToolVulnerabilityRecord(
        name=name,
        description=description if isinstance(description, str) else None,
        vulnerability_analysis=_validate_analysis(raw_analysis, f"{location}({name})", sink),
    )


def _validate_analysis(
    raw: Any,
    location: str,
    sink: List[PartialDataError],
) -> Optional[VulnerabilityAnalysis]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        sink.append(
            PartialDataError(
                f"vulnerability_analysis is {_type_name(raw)}, not an object; no findings taken",
                location,
            )
        )
        return None

    findings: List[RawFinding] = []
    raw_findings = raw.get("findings")
    if isinstance(raw_findings, list):
        for index, item in enumerate(raw_findings):
            try:
                findings.append(RawFinding.model_validate(item))
            except ValidationError as exc:
                sink.append(
                    PartialDataError(
                        f"finding skipped ({_first_error(exc)})",
                        f"{location}.findings[{index}]",
                    )
                )
    elif raw_findings is not None:
        sink.append(
            PartialDataError(
                f"findings is {_type_name(raw_findings)}, not an array; no findings taken",
                location,
            )
        )

    summary = raw.get("summary")
    return VulnerabilityAnalysis(
        findings=findings,
        summary=summary if isinstance(summary, str) else None,
    )


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "value"
    return f"{field}: {first.get('msg', 'invalid')}"


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "a boolean"
    if isinstance(value, dict):
        return "an object"
    if isinstance(value, list):
        return "an array"
    if isinstance(value, str):
        return "a string"
    if isinstance(value, (int, float)):
        return "a number"
    return type(value).__name__


__all__ = ["validate"]
