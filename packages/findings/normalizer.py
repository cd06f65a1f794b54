"""Flatten validated tool records into canonical findings."""
from typing import Dict, List, Optional

from packages.findings.severity import map_severity
from packages.schema.models import Finding, ToolVulnerabilityRecord

STAGE_PREFIXES: Dict[str, str] = {
    "tool_injection": "ti",
    "prompt_injection": "pi",
}

DEFAULT_TYPES: Dict[str, str] = {
    "ti": "Tool Injection",
    "pi": "Prompt Injection",
}


def normalize(
    records: List[ToolVulnerabilityRecord],
    stage_prefix: str,
    default_type: Optional[str] = None,
) -> List[Finding]:
    """Emit findings in tool order, then finding order, with ids ``{prefix}-{i}-{j}``."""

    fallback_type = default_type or DEFAULT_TYPES.get(stage_prefix, "Vulnerability")
    findings: List[Finding] = []
    for tool_index, record in enumerate(records):
        analysis = record.vulnerability_analysis
        if analysis is None:
            continue
        for finding_index, raw in enumerate(analysis.findings):
            findings.append(
                Finding(
                    id=f"{stage_prefix}-{tool_index}-{finding_index}",
                    tool_name=record.name,
                    severity=map_severity(raw.severity),
                    type=_first_text(raw.category) or fallback_type,
                    description=_first_text(raw.description, raw.evidence)
                    or f"Vulnerability in {record.name}",
                )
            )
    return findings


def _first_text(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value and value.strip():
            return value
    return None


__all__ = ["DEFAULT_TYPES", "STAGE_PREFIXES", "normalize"]
