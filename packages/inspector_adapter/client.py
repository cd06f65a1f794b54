# Adapter boundary: POST to the upstream inspection service, never interpret bodies here.
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from packages.schema.errors import UpstreamHTTPError
from packages.schema.models import ANALYSIS_LABELS, AnalysisType, AssessmentRequest, InspectorRequest
from packages.settings.loader import InspectorSettings

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"


def redact_bearer(body: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a request body that is safe to log."""

    if body.get("bearer"):
        return {**body, "bearer": REDACTED}
    return dict(body)


def build_body(request: AssessmentRequest, analysis_type: AnalysisType) -> Dict[str, Any]:
    return InspectorRequest(
        url=request.url,
        analysis_type=analysis_type,
        bearer=request.bearer or None,
        model=request.model,
    ).model_dump(by_alias=True, exclude_none=True)


class InspectorClient:
    """Thin httpx wrapper around the check and analysis endpoints."""

    def __init__(self, settings: InspectorSettings, http: Optional[httpx.Client] = None) -> None:
        self.settings = settings
        self._owns_http = http is None
        self._http = http or httpx.Client(timeout=settings.timeout_seconds)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "InspectorClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def check(self, request: AssessmentRequest) -> httpx.Response:
        """Send the reachability/auth check; status handling is left to the caller."""

        return self._post(self.settings.check_url, build_body(request, "tool_injection"), "Check")

    def analyze(self, request: AssessmentRequest, analysis_type: AnalysisType) -> str:
        """Request one analysis and return the body as raw text."""

        label = ANALYSIS_LABELS[analysis_type]
        response = self._post(self.settings.analysis_url, build_body(request, analysis_type), label)
        if not response.is_success:
            raise UpstreamHTTPError(
                f"{label} inspection error! status: {response.status_code}",
                status_code=response.status_code,
            )
        return response.text

    def _post(self, url: str, body: Dict[str, Any], label: str) -> httpx.Response:
        logger.info("Sending %s request to %s: %s", label.lower(), url, json.dumps(redact_bearer(body)))
        try:
            response = self._http.post(url, json=body)
        except httpx.HTTPError as exc:
            raise UpstreamHTTPError(f"{label} request failed: {exc}") from exc
        logger.info("%s response status: %s %s", label, response.status_code, response.reason_phrase)
        return response


__all__ = ["InspectorClient", "REDACTED", "build_body", "redact_bearer"]
