import pytest

from packages.settings.loader import load_settings


def test_packaged_defaults():
    settings = load_settings(environ={})

    assert settings.inspector.check_url == "https://server.rhinobase.workers.dev/inspector/check"
    assert settings.inspector.analysis_url == "https://server.rhinobase.workers.dev/inspector"
    assert settings.repair.model == "gpt-4-turbo-preview"
    assert settings.repair.temperature == 0
    assert settings.repair.base_url is None
    assert settings.assessment.concurrent is True


def test_override_file_is_deep_merged(tmp_path):
    override = tmp_path / "mcpsec.yaml"
    override.write_text("inspector:\n  base_url: http://localhost:8787/\nrepair:\n  model: local-fixer\n")

    settings = load_settings(environ={"MCPSEC_CONFIG": str(override)})

    assert settings.inspector.check_url == "http://localhost:8787/inspector/check"
    assert settings.inspector.timeout_seconds == 60
    assert settings.repair.model == "local-fixer"


def test_environment_wins_over_files(tmp_path):
    override = tmp_path / "mcpsec.yaml"
    override.write_text("repair:\n  model: from-file\n")

    settings = load_settings(
        path=override,
        environ={
            "MCPSEC_REPAIR_MODEL": "from-env",
            "MCPSEC_TIMEOUT": "2.5",
            "MCPSEC_CONCURRENT": "0",
            "MCPSEC_REPAIR_BASE_URL": "http://llm.local/v1",
        },
    )

    assert settings.repair.model == "from-env"
    assert settings.repair.base_url == "http://llm.local/v1"
    assert settings.inspector.timeout_seconds == 2.5
    assert settings.assessment.concurrent is False


def test_malformed_settings_are_rejected(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        load_settings(path=bad, environ={})

    with pytest.raises(ValueError, match="MCPSEC_TIMEOUT"):
        load_settings(environ={"MCPSEC_TIMEOUT": "soon"})

    with pytest.raises(FileNotFoundError):
        load_settings(path=tmp_path / "missing.yaml", environ={})
