# JSONL writer: one finding per line, tagged with the target and model.
from pathlib import Path
import json

from packages.schema.models import AssessmentResult


def write_jsonl(
    path: Path,
    result: AssessmentResult,
    target_url: str,
    model_name: str,
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for finding in result.findings:
            rec = {
                "finding": finding.model_dump(by_alias=True),
                "securityScore": result.security_score,
                "target": target_url,
                "model": model_name,
            }
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
