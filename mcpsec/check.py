"""CLI helper to test connectivity to an MCP server before a full assessment."""
from __future__ import annotations

import argparse
import sys
from typing import Optional

from pydantic import ValidationError

from packages.inspector_adapter.client import InspectorClient
from packages.orchestrator.probe import probe
from packages.schema.models import AssessmentRequest, ConnectionTestResult
from packages.settings.loader import Settings, load_settings


def check_connection(
    server_url: str,
    api_key: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
    client: Optional[InspectorClient] = None,
) -> ConnectionTestResult:
    """Run only the connection probe and report it as a pass/fail result."""

    try:
        request = AssessmentRequest(url=server_url, bearer=api_key or None)
    except ValidationError:
        return ConnectionTestResult(
            success=False,
            message="Failed to connect to MCP server",
            error=f"Invalid target URL: {server_url!r}",
        )

    owns_client = client is None
    if client is None:
        client = InspectorClient((settings or load_settings()).inspector)
    try:
        check = probe(request, client)
    finally:
        if owns_client:
            client.close()

    if check.connected:
        return ConnectionTestResult(success=True, message="Successfully connected to MCP server")
    return ConnectionTestResult(
        success=False,
        message="Failed to connect to MCP server",
        error=check.message,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Test connectivity to an MCP server")
    parser.add_argument("url", help="URL of the MCP server")
    parser.add_argument("--api-key", default=None, help="Bearer token for the target server")
    args = parser.parse_args(argv)

    result = check_connection(args.url, args.api_key)
    if result.success:
        print(f"[mcpsec] {result.message}: {args.url}")
        return 0
    print(f"[mcpsec] {result.message}: {result.error}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
