from packages.findings.normalizer import normalize
from packages.findings.validator import validate


def _tools(*finding_lists):
    return validate(
        [
            {"name": f"tool_{i}", "vulnerability_analysis": {"findings": findings}}
            for i, findings in enumerate(finding_lists)
        ]
    )


def test_ids_are_unique_across_stages():
    tool_injection = normalize(
        _tools([{"severity": "high"}, {"severity": "low"}], [{"severity": "critical"}]),
        "ti",
    )
    prompt_injection = normalize(_tools([{"severity": "medium"}]), "pi")

    ids = [f.id for f in tool_injection + prompt_injection]
    assert ids == ["ti-0-0", "ti-0-1", "ti-1-0", "pi-0-0"]
    assert len(set(ids)) == len(ids)


def test_type_falls_back_to_stage_label():
    findings = normalize(_tools([{"severity": "high"}, {"severity": "high", "category": ""}]), "pi")
    assert [f.type for f in findings] == ["Prompt Injection", "Prompt Injection"]

    findings = normalize(_tools([{"severity": "high", "category": "Context Leakage"}]), "ti")
    assert findings[0].type == "Context Leakage"


def test_description_falls_back_through_evidence_to_tool_name():
    findings = normalize(
        _tools(
            [
                {"severity": "low", "description": "Primary", "evidence": "ignored"},
                {"severity": "low", "description": "", "evidence": "Evidence text"},
                {"severity": "low"},
            ]
        ),
        "ti",
    )
    assert [f.description for f in findings] == ["Primary", "Evidence text", "Vulnerability in tool_0"]


def test_severity_is_canonicalized():
    findings = normalize(_tools([{"severity": "CRITICAL"}, {"severity": "bogus"}]), "ti")
    assert [f.severity for f in findings] == ["Critical", "Medium"]
    assert all(f.tool_name == "tool_0" for f in findings)


def test_tools_without_analysis_contribute_nothing():
    records = validate([{"name": "clean"}, {"name": "also_clean", "vulnerability_analysis": "no issues"}])
    assert normalize(records, "ti") == []
