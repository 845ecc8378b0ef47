"""LLM provider registry with lazy loading.

Usage:
    from marketfit.profile.llm import get_provider, parse_response

    provider = get_provider("anthropic")
    raw = provider.complete(prompt, system=RECOMMENDER_PROMPT)
    data = parse_response(raw)
"""

import importlib
from typing import Any

from marketfit.profile.llm.base import LLMProvider, parse_response

__all__ = ["LLMProvider", "available_providers", "get_provider", "parse_response"]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("marketfit.profile.llm.anthropic", "AnthropicProvider"),
    "openai": ("marketfit.profile.llm.openai", "OpenAIProvider"),
}


def get_provider(name: str, **options: Any) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    ``options`` (max_tokens, temperature, timeout_s) go to the constructor.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls(**options)  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
