from packages.findings.scoring import empty_summary, posture, score, summarize
from packages.schema.models import Finding


def _dummy_finding(**overrides) -> Finding:
    data = {
        "id": "ti-0-0",
        "tool_name": "read_file",
        "severity": "Medium",
        "type": "Tool Injection",
        "description": "Tool description instructs the model to exfiltrate data",
    }
    data.update(overrides)
    return Finding(**data)


def test_empty_findings_score_100():
    assert score([]) == 100


def test_score_uses_count_and_worst_severity():
    findings = [
        _dummy_finding(id="ti-0-0", severity="Critical"),
        _dummy_finding(id="ti-0-1", severity="Medium"),
        _dummy_finding(id="pi-0-0", severity="Low"),
    ]
    assert score(findings) == 65


def test_score_is_order_independent():
    findings = [
        _dummy_finding(id="a", severity="Low"),
        _dummy_finding(id="b", severity="High"),
    ]
    assert score(findings) == score(list(reversed(findings))) == 100 - 10 - 15


def test_score_clamps_at_zero():
    findings = [_dummy_finding(id=f"ti-0-{i}", severity="Critical") for i in range(30)]
    assert score(findings) == 0


def test_summarize_counts_every_level_and_vulnerable_tools():
    findings = [
        _dummy_finding(id="ti-0-0", tool_name="write_file", severity="High"),
        _dummy_finding(id="ti-1-0", tool_name="read_file", severity="High"),
        _dummy_finding(id="pi-0-0", tool_name="read_file", severity="Low"),
    ]
    summary = summarize(findings, tools_assessed=4, security_score=score(findings))

    assert summary.severity_counts == {"Critical": 0, "High": 2, "Medium": 0, "Low": 1}
    assert summary.tools_assessed == 4
    assert summary.vulnerable_tools == ["read_file", "write_file"]
    assert summary.posture == "good"


def test_posture_bands():
    assert posture(100) == "good"
    assert posture(70) == "good"
    assert posture(69) == "needs_improvement"
    assert posture(40) == "needs_improvement"
    assert posture(39) == "critical"


def test_empty_summary_is_zeroed():
    summary = empty_summary()
    assert summary.severity_counts == {"Critical": 0, "High": 0, "Medium": 0, "Low": 0}
    assert summary.tools_assessed == 0
    assert summary.vulnerable_tools == []
    assert summary.posture == "critical"
