import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from packages.repair_llm.engine import JSONRepairer, SYSTEM_PROMPT
from packages.schema.errors import JSONRepairError
from packages.settings.loader import RepairSettings


def _dummy_settings(**overrides) -> RepairSettings:
    data = {"model": "stub-repair", "temperature": 0.0, "base_url": None, "max_input_chars": 10_000}
    data.update(overrides)
    return RepairSettings(**data)


class DummyCompletions:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))])


class DummyLLM:
    def __init__(self, completions: DummyCompletions):
        self.chat = SimpleNamespace(completions=completions)


def _repairer(completions: DummyCompletions, **settings) -> JSONRepairer:
    return JSONRepairer(_dummy_settings(**settings), client=DummyLLM(completions))


def test_repair_is_noop_on_valid_json():
    raw = (
        '[\n  {"name": "run_shell", "vulnerability_analysis": {"findings": '
        '[{"severity": "high", "evidence": "{\\"cmd\\": \\"rm\\"}"}]}}\n]'
    )
    completions = DummyCompletions(
        reply='[{"name": "run_shell", "vulnerability_analysis": {"findings": [{"severity": "high", "evidence": {"cmd": "rm"}}]}}]'
    )

    repaired = _repairer(completions).repair(raw)

    assert repaired == json.loads(raw)
    assert repaired[0]["vulnerability_analysis"]["findings"][0]["evidence"] == '{"cmd": "rm"}'
    assert completions.calls == []


def test_repair_sends_one_deterministic_request():
    completions = DummyCompletions(reply='{"ok": true}')

    _repairer(completions).repair("ok: true, mostly")

    assert len(completions.calls) == 1
    call = completions.calls[0]
    assert call["model"] == "stub-repair"
    assert call["temperature"] == 0.0
    assert call["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert call["messages"][1]["content"].endswith("ok: true, mostly")


def test_repair_unwraps_single_code_fence():
    completions = DummyCompletions(reply='```json\n[{"name": "a"}]\n```')

    assert _repairer(completions).repair("Here you go: [{name: a}]") == [{"name": "a"}]


@pytest.mark.parametrize("reply", ["", "   ", None, "Sure! The JSON is [1, 2]", "[1, 2"])
def test_unusable_completion_raises(reply):
    with pytest.raises(JSONRepairError):
        _repairer(DummyCompletions(reply=reply)).repair("[1, 2")


def test_completion_service_error_raises():
    completions = DummyCompletions(error=OpenAIError("rate limited"))

    with pytest.raises(JSONRepairError, match="rate limited"):
        _repairer(completions).repair("[oops")


def test_empty_or_oversized_input_skips_completion():
    completions = DummyCompletions(reply="[]")

    with pytest.raises(JSONRepairError, match="empty"):
        _repairer(completions).repair("  \n")
    with pytest.raises(JSONRepairError, match="limit"):
        _repairer(completions, max_input_chars=5).repair("[1, 2, 3")
    assert completions.calls == []
