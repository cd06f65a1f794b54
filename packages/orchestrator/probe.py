"""Fast precondition check: is the target reachable and authenticated?"""
from __future__ import annotations

import logging

from pydantic import ValidationError

from packages.inspector_adapter.client import InspectorClient
from packages.schema.errors import TargetConnectionError, UpstreamHTTPError
from packages.schema.models import AssessmentRequest, ConnectionCheckResult, InspectorCheckResponse

logger = logging.getLogger(__name__)


def probe(request: AssessmentRequest, client: InspectorClient) -> ConnectionCheckResult:
    """Single attempt, no retries. Never raises for upstream problems."""

    try:
        response = client.check(request)
    except UpstreamHTTPError as exc:
        return _error(str(exc))

    if not response.is_success:
        return _error(
            f"Check endpoint error! status: {response.status_code}", kind=UpstreamHTTPError.kind
        )

    # Both ends of the check endpoint are under our control; parse strictly, no repair.
    try:
        parsed = InspectorCheckResponse.model_validate_json(response.text)
    except ValidationError as exc:
        return _error(f"Invalid response from check endpoint ({exc.error_count()} error(s))")

    if parsed.status != "connected":
        detail = parsed.error or parsed.message or f"status {parsed.status!r}"
        return _error(f"Target not connected: {detail}")

    logger.info("Connection check passed for %s", request.url)
    return ConnectionCheckResult(
        status="connected",
        message=parsed.message or "Successfully connected to MCP server",
    )


def _error(message: str, kind: str = TargetConnectionError.kind) -> ConnectionCheckResult:
    logger.error("Connection check failed: %s", message)
    return ConnectionCheckResult(status="error", message=message, error_kind=kind)


__all__ = ["probe"]
