"""LLM-backed repair of non-strict JSON returned by the inspection service."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from packages.schema.errors import JSONRepairError
from packages.settings.loader import RepairSettings, load_settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that parses dirty JSON into clean, valid JSON. "
    "Return only the parsed JSON without any additional text. Deeply parse all nested "
    "JSON objects and arrays. Fix any syntax errors in the JSON or commentary and "
    "reasonably translate the data into valid JSON."
)
USER_PROMPT_TEMPLATE = (
    "Parse the following text into valid JSON. Remove any markdown formatting or "
    "newlines that aren't part of the JSON structure:\n\n{raw}"
)

_FENCE_RE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?(?P<body>.*?)\n?```$", re.DOTALL)


class JSONRepairer:
    """One-shot repair of non-strict text: a single zero-temperature completion, then a strict parse."""

    def __init__(self, settings: RepairSettings, client: Optional[Any] = None) -> None:
        self.settings = settings
        self._client = client

    def repair(self, raw_text: str) -> Any:
        if not raw_text or not raw_text.strip():
            raise JSONRepairError("Upstream response was empty; nothing to repair")

        # Strict JSON is returned as parsed; the completion only sees broken text.
        try:
            return json.loads(raw_text)
        except json.JSONDecodeError:
            pass

        if len(raw_text) > self.settings.max_input_chars:
            raise JSONRepairError(
                f"Upstream response is {len(raw_text)} characters, above the repair "
                f"limit of {self.settings.max_input_chars}"
            )

        logger.debug("Repairing %d characters with %s", len(raw_text), self.settings.model)
        try:
            response = self._get_client().chat.completions.create(
                model=self.settings.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": USER_PROMPT_TEMPLATE.format(raw=raw_text)},
                ],
                temperature=self.settings.temperature,
            )
        except OpenAIError as exc:
            raise JSONRepairError(f"Repair completion failed: {exc}") from exc

        content = _completion_text(response)
        if not content:
            raise JSONRepairError("Repair completion returned no text")

        try:
            return json.loads(_strip_fence(content))
        except json.JSONDecodeError as exc:
            raise JSONRepairError(
                f"Repair completion was not valid JSON: {exc.msg} at line {exc.lineno} column {exc.colno}"
            ) from exc

    def _get_client(self) -> Any:
        if self._client is None:
            if self.settings.base_url:
                self._client = OpenAI(base_url=self.settings.base_url)
            else:
                self._client = OpenAI()
        return self._client


def repair(raw_text: str, settings: Optional[RepairSettings] = None) -> Any:
    """Repair ``raw_text`` with a repairer built from the resolved settings."""

    return JSONRepairer(settings or load_settings().repair).repair(raw_text)


def _completion_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content.strip() if isinstance(content, str) else ""


def _strip_fence(content: str) -> str:
    match = _FENCE_RE.match(content)
    return match.group("body").strip() if match else content


__all__ = ["JSONRepairer", "SYSTEM_PROMPT", "USER_PROMPT_TEMPLATE", "repair"]
