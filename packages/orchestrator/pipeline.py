"""Assessment run: probe, two inspections, repair, validate, normalize, score.

Any fatal error ends the run with a well-formed failure result; callers never
see an exception. The two inspection stages share no data and may run in
parallel, but their findings are always merged in stage order.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError

from packages.findings.normalizer import STAGE_PREFIXES, normalize
from packages.findings.scoring import empty_summary, score, summarize
from packages.findings.validator import validate
from packages.inspector_adapter.client import InspectorClient
from packages.orchestrator.probe import probe
from packages.repair_llm.engine import JSONRepairer
from packages.schema.errors import (
    AssessmentError,
    JSONRepairError,
    PartialDataError,
    TargetConnectionError,
    UpstreamHTTPError,
)
from packages.schema.models import (
    ANALYSIS_LABELS,
    ANALYSIS_TYPES,
    AnalysisType,
    AssessmentRequest,
    AssessmentResult,
    Finding,
    ToolVulnerabilityRecord,
)
from packages.settings.loader import Settings, load_settings

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Assessment completed successfully"
FAILURE_MESSAGE = "Failed to complete security assessment"
_RAW_LOG_LIMIT = 500


@dataclass
class StageOutcome:
    analysis_type: AnalysisType
    records: List[ToolVulnerabilityRecord] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class InspectionOrchestrator:
    def __init__(self, client: InspectorClient, repairer: JSONRepairer, *, concurrent: bool = True) -> None:
        self.client = client
        self.repairer = repairer
        self.concurrent = concurrent

    def run(self, request: AssessmentRequest) -> AssessmentResult:
        logger.info("=== MCP security assessment started: %s ===", request.url)
        try:
            logger.info("Probing target connection...")
            check = probe(request, self.client)
            if not check.connected:
                message = check.message or "Failed to connect to MCP server"
                if check.error_kind == UpstreamHTTPError.kind:
                    raise UpstreamHTTPError(message)
                raise TargetConnectionError(message)
            outcomes = self._inspect_all(request)
        except AssessmentError as exc:
            logger.error("=== Assessment failed (%s): %s ===", exc.kind, exc)
            return failed_result(str(exc), exc.kind)
        except Exception as exc:
            logger.exception("=== Assessment failed unexpectedly ===")
            return failed_result(f"Unexpected error: {exc}", "UnexpectedError")

        logger.info("Scoring assessment results...")
        findings = [finding for outcome in outcomes for finding in outcome.findings]
        tools_assessed = len({record.name for outcome in outcomes for record in outcome.records})
        security_score = score(findings)
        logger.info(
            "=== Assessment completed: %d findings, security score %d ===",
            len(findings),
            security_score,
        )
        return AssessmentResult(
            success=True,
            message=SUCCESS_MESSAGE,
            security_score=security_score,
            findings=findings,
            summary=summarize(findings, tools_assessed, security_score),
            warnings=[warning for outcome in outcomes for warning in outcome.warnings],
        )

    def _inspect_all(self, request: AssessmentRequest) -> List[StageOutcome]:
        if not self.concurrent:
            return [self._inspect(request, analysis_type) for analysis_type in ANALYSIS_TYPES]

        with ThreadPoolExecutor(max_workers=len(ANALYSIS_TYPES), thread_name_prefix="mcpsec-inspect") as pool:
            futures = [pool.submit(self._inspect, request, analysis_type) for analysis_type in ANALYSIS_TYPES]
        # Join in stage order, not completion order; the first failing stage wins.
        return [future.result() for future in futures]

    def _inspect(self, request: AssessmentRequest, analysis_type: AnalysisType) -> StageOutcome:
        label = ANALYSIS_LABELS[analysis_type]
        logger.info("Running %s inspection...", label.lower())

        raw_text = self.client.analyze(request, analysis_type)
        logger.debug("Raw %s result: %s", label.lower(), raw_text[:_RAW_LOG_LIMIT])

        try:
            payload = self.repairer.repair(raw_text)
        except JSONRepairError as exc:
            raise JSONRepairError(f"{label} response could not be repaired: {exc}") from exc

        diagnostics: List[PartialDataError] = []
        records = validate(payload, analysis_type=analysis_type, diagnostics=diagnostics)
        for diagnostic in diagnostics:
            logger.warning("%s: skipped %s", label, diagnostic)

        findings = normalize(records, STAGE_PREFIXES[analysis_type])
        logger.info("%s inspection completed: %d tools, %d findings", label, len(records), len(findings))
        return StageOutcome(
            analysis_type=analysis_type,
            records=records,
            findings=findings,
            warnings=[f"{analysis_type} {diagnostic}" for diagnostic in diagnostics],
        )


def failed_result(error: str, kind: str) -> AssessmentResult:
    return AssessmentResult(
        success=False,
        message=FAILURE_MESSAGE,
        error=error,
        error_kind=kind,
        security_score=0,
        findings=[],
        summary=empty_summary(),
    )


def run_assessment(
    server_url: str,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
    client: Optional[InspectorClient] = None,
    repairer: Optional[JSONRepairer] = None,
) -> AssessmentResult:
    """Assess ``server_url`` and return a complete result, successful or not."""

    settings = settings or load_settings()
    try:
        request = AssessmentRequest(
            url=server_url,
            bearer=api_key or None,
            model=model or settings.assessment.default_model,
        )
    except ValidationError:
        return failed_result(f"Invalid target URL: {server_url!r}", TargetConnectionError.kind)

    owns_client = client is None
    client = client or InspectorClient(settings.inspector)
    try:
        orchestrator = InspectionOrchestrator(
            client,
            repairer or JSONRepairer(settings.repair),
            concurrent=settings.assessment.concurrent,
        )
        return orchestrator.run(request)
    finally:
        if owns_client:
            client.close()


__all__ = ["InspectionOrchestrator", "StageOutcome", "failed_result", "run_assessment"]
