# SARIF 2.1.0 export: one rule per finding type, one result per finding.
import re
from typing import Any, Dict, List

from packages.schema.models import AssessmentResult, Finding

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"

_LEVELS = {
    "Critical": "error",
    "High": "error",
    "Medium": "warning",
    "Low": "note",
}


def rule_id(finding_type: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", finding_type.lower()).strip("-")
    return slug or "vulnerability"


def to_sarif(
    result: AssessmentResult,
    target_url: str,
    tool_name: str = "mcpsec",
    tool_version: str = "0.0.0",
) -> Dict[str, Any]:
    rules: Dict[str, Dict[str, Any]] = {}
    results: List[Dict[str, Any]] = []

    for finding in result.findings:
        rid = rule_id(finding.type)
        rules.setdefault(
            rid,
            {"id": rid, "name": finding.type, "shortDescription": {"text": finding.type}},
        )
        results.append(_result(finding, rid))

    return {
        "version": "2.1.0",
        "$schema": SARIF_SCHEMA,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": tool_name,
                        "version": tool_version,
                        "rules": list(rules.values()),
                    }
                },
                "results": results,
                "properties": {
                    "target": target_url,
                    "securityScore": result.security_score,
                    "success": result.success,
                },
            }
        ],
    }


def _result(finding: Finding, rid: str) -> Dict[str, Any]:
    return {
        "ruleId": rid,
        "level": _LEVELS[finding.severity],
        "message": {"text": finding.description},
        "locations": [
            {"logicalLocations": [{"name": finding.tool_name, "kind": "function"}]}
        ],
        "partialFingerprints": {"findingId": finding.id},
        "properties": {"severity": finding.severity},
    }
