"""Layered settings: packaged YAML defaults, optional override file, environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import yaml

_DEFAULTS_PATH = Path(__file__).resolve().with_name("defaults.yaml")
_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


_ENV_OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "MCPSEC_INSPECTOR_URL": ("inspector", "base_url", str),
    "MCPSEC_TIMEOUT": ("inspector", "timeout_seconds", float),
    "MCPSEC_REPAIR_MODEL": ("repair", "model", str),
    "MCPSEC_REPAIR_BASE_URL": ("repair", "base_url", str),
    "MCPSEC_CONCURRENT": ("assessment", "concurrent", _as_bool),
}


@dataclass(frozen=True)
class InspectorSettings:
    base_url: str
    check_path: str
    analysis_path: str
    timeout_seconds: float

    @property
    def check_url(self) -> str:
        return self.base_url.rstrip("/") + self.check_path

    @property
    def analysis_url(self) -> str:
        return self.base_url.rstrip("/") + self.analysis_path


@dataclass(frozen=True)
class RepairSettings:
    model: str
    temperature: float
    base_url: Optional[str]
    max_input_chars: int


@dataclass(frozen=True)
class AssessmentSettings:
    default_model: str
    concurrent: bool


@dataclass(frozen=True)
class Settings:
    inspector: InspectorSettings
    repair: RepairSettings
    assessment: AssessmentSettings


def load_settings(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Resolve settings from defaults, an override file, then the environment."""

    env = os.environ if environ is None else environ
    data = _read_yaml(_DEFAULTS_PATH)

    override = path or env.get("MCPSEC_CONFIG")
    if override:
        data = _deep_merge(data, _read_yaml(Path(override)))

    for var, (section, key, cast) in _ENV_OVERRIDES.items():
        raw = env.get(var)
        if raw:
            try:
                data.setdefault(section, {})[key] = cast(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {var}: {raw!r}") from exc

    return _build(data)


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Settings file missing: {path}")
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Settings file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping at the top level")
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _build(data: Dict[str, Any]) -> Settings:
    inspector = data.get("inspector", {})
    repair = data.get("repair", {})
    assessment = data.get("assessment", {})
    return Settings(
        inspector=InspectorSettings(
            base_url=str(inspector["base_url"]),
            check_path=str(inspector.get("check_path", "/inspector/check")),
            analysis_path=str(inspector.get("analysis_path", "/inspector")),
            timeout_seconds=float(inspector.get("timeout_seconds", 60)),
        ),
        repair=RepairSettings(
            model=str(repair["model"]),
            temperature=float(repair.get("temperature", 0)),
            base_url=repair.get("base_url") or None,
            max_input_chars=int(repair.get("max_input_chars", 200000)),
        ),
        assessment=AssessmentSettings(
            default_model=str(assessment["default_model"]),
            concurrent=bool(assessment.get("concurrent", True)),
        ),
    )


__all__ = [
    "AssessmentSettings",
    "InspectorSettings",
    "RepairSettings",
    "Settings",
    "load_settings",
]
