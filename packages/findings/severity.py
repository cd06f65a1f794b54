"""Canonical severity mapping and the weights used for scoring."""
from typing import Dict, Optional

from packages.schema.models import Severity

SEVERITY_WEIGHTS: Dict[Severity, int] = {
    "Critical": 4,
    "High": 3,
    "Medium": 2,
    "Low": 1,
}

# Unknown severities count as moderate risk: neither dropped nor escalated.
DEFAULT_SEVERITY: Severity = "Medium"

_BY_LOWER: Dict[str, Severity] = {level.lower(): level for level in SEVERITY_WEIGHTS}


def map_severity(raw: Optional[str]) -> Severity:
    """Map free-form upstream severity text onto a canonical level."""

    if not isinstance(raw, str):
        return DEFAULT_SEVERITY
    return _BY_LOWER.get(raw.strip().lower(), DEFAULT_SEVERITY)


def severity_weight(severity: Severity) -> int:
    return SEVERITY_WEIGHTS[severity]


__all__ = ["DEFAULT_SEVERITY", "SEVERITY_WEIGHTS", "map_severity", "severity_weight"]
