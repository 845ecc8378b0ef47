"""Abstract base class for LLM providers and shared response parsing."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

RECOMMENDER_PROMPT = (
    "You are a career advisor for the job market of Kazakhstan and the CIS.\n\n"
    "Given a candidate profile, return ONLY a JSON object (no markdown, no explanation):\n"
    '{"professions": ["string", ...], "skillsToLearn": ["string", ...], '
    '"courses": [{"name": "string", "duration": "string"}, ...], "matchScore": 0}\n'
    "Where:\n"
    "- professions: 3-5 suitable roles\n"
    "- skillsToLearn: 4-8 key skills for growth\n"
    "- courses: 2-4 courses (name and duration only, no links)\n"
    "- matchScore: integer 0-100 for current market fit"
)

_LANGUAGE_HINTS = {
    "ru": "Answer in Russian.",
    "kk": "Answer in Kazakh.",
    "en": "Answer in English.",
}


def language_hint(language: str) -> str:
    return _LANGUAGE_HINTS.get(language, _LANGUAGE_HINTS["en"])


def parse_response(raw_text: str) -> dict[str, Any]:
    """Parse an LLM response text into a JSON object.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.
    """
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise ValueError(msg) from e

    if not isinstance(data, dict):
        msg = f"LLM response is not a JSON object: {type(data).__name__}"
        raise ValueError(msg)
    return data


class LLMProvider(ABC):
    """Base class that every LLM provider must implement.

    Generation settings are fixed per instance; ``complete`` only varies the
    prompt, model and system message.
    """

    def __init__(self, *, max_tokens: int = 1024, temperature: float = 0.2, timeout_s: float = 30.0) -> None:
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_s = timeout_s

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'anthropic')."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        """Send a prompt to the LLM and return raw response text.

        Args:
            prompt: User message (the serialised candidate profile).
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to RECOMMENDER_PROMPT.

        Returns:
            Raw text response from the LLM (expected to be JSON).
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""
