# Contract-only models. Keep names/fields stable.
import urllib.parse
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


Severity = Literal["Critical", "High", "Medium", "Low"]
AnalysisType = Literal["tool_injection", "prompt_injection"]
CheckStatus = Literal["connected", "error"]
Posture = Literal["good", "needs_improvement", "critical"]

SEVERITY_LEVELS: List[Severity] = ["Critical", "High", "Medium", "Low"]
ANALYSIS_TYPES: List[AnalysisType] = ["tool_injection", "prompt_injection"]
ANALYSIS_LABELS: Dict[str, str] = {
    "tool_injection": "Tool injection",
    "prompt_injection": "Prompt injection",
}


class WireModel(BaseModel):
    """Serializes with camelCase keys, accepts snake_case names in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AssessmentRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    bearer: Optional[str] = Field(default=None, repr=False)
    model: Optional[str] = None

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        parsed = urllib.parse.urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"target URL must be an absolute http(s) URL, got {value!r}")
        return value


class InspectorRequest(WireModel):
    """Body shared by the upstream check and analysis endpoints."""

    url: str
    analysis_type: AnalysisType
    bearer: Optional[str] = None
    model: Optional[str] = None


class InspectorCheckResponse(BaseModel):
    status: str
    message: Optional[str] = None
    error: Optional[str] = None


class ConnectionCheckResult(BaseModel):
    status: CheckStatus
    message: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.status == "connected"


class RawFinding(BaseModel):
    category: Optional[str] = None
    severity: str
    description: Optional[str] = None
    evidence: Optional[str] = None


class VulnerabilityAnalysis(BaseModel):
    findings: List[RawFinding] = Field(default_factory=list)
    summary: Optional[str] = None


class ToolVulnerabilityRecord(BaseModel):
    name: str
    description: Optional[str] = None
    vulnerability_analysis: Optional[VulnerabilityAnalysis] = Field(
        default=None,
        validation_alias=AliasChoices("vulnerability_analysis", "vulnerabilityAnalysis"),
    )


class Finding(WireModel):
    id: str
    tool_name: str
    severity: Severity
    type: str
    description: str = Field(min_length=1)


class AssessmentSummary(WireModel):
    severity_counts: Dict[str, int]
    tools_assessed: int = 0
    vulnerable_tools: List[str] = Field(default_factory=list)
    posture: Posture


class AssessmentResult(WireModel):
    success: bool
    message: str
    error: Optional[str] = None
    error_kind: Optional[str] = None
    security_score: int = Field(ge=0, le=100)
    findings: List[Finding] = Field(default_factory=list)
    summary: AssessmentSummary
    warnings: List[str] = Field(default_factory=list)


class ConnectionTestResult(WireModel):
    success: bool
    message: str
    error: Optional[str] = None
