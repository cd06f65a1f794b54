"""Aggregate security score and the result summary built around it."""
from typing import Iterable, List

from packages.findings.severity import severity_weight
from packages.schema.models import SEVERITY_LEVELS, AssessmentSummary, Finding, Posture

BASE_SCORE = 100
PENALTY_PER_FINDING = 5
PENALTY_PER_SEVERITY_POINT = 5


def score(findings: Iterable[Finding]) -> int:
    """Score from finding count and worst severity; order does not matter."""

    items = list(findings)
    max_impact = max((severity_weight(f.severity) for f in items), default=0)
    raw = (
        BASE_SCORE
        - len(items) * PENALTY_PER_FINDING
        - max_impact * PENALTY_PER_SEVERITY_POINT
    )
    return max(0, min(BASE_SCORE, raw))


def posture(security_score: int) -> Posture:
    if security_score >= 70:
        return "good"
    if security_score >= 40:
        return "needs_improvement"
    return "critical"


def summarize(findings: List[Finding], tools_assessed: int, security_score: int) -> AssessmentSummary:
    counts = {level: 0 for level in SEVERITY_LEVELS}
    for finding in findings:
        counts[finding.severity] += 1
    return AssessmentSummary(
        severity_counts=counts,
        tools_assessed=tools_assessed,
        vulnerable_tools=sorted({f.tool_name for f in findings}),
        posture=posture(security_score),
    )


def empty_summary() -> AssessmentSummary:
    return summarize([], tools_assessed=0, security_score=0)


__all__ = ["empty_summary", "posture", "score", "summarize"]
