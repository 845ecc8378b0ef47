"""Anthropic Messages API provider for the external recommender tier."""

import logging
import os

from marketfit.profile.llm.base import RECOMMENDER_PROMPT, LLMProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """Claude via the Anthropic SDK. Text blocks of the reply are joined."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get(self.env_var)
        if not api_key:
            msg = f"{self.env_var} is not set; the anthropic recommender tier needs it"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = "Install the Anthropic SDK with: pip install 'market-fit-engine[anthropic]'"
            raise ImportError(msg) from None

        client = anthropic.Anthropic(api_key=api_key, timeout=self.timeout_s, max_retries=0)
        use_model = model or self.default_model

        logger.info("Asking %s for career recommendations", use_model)
        message = client.messages.create(
            model=use_model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system if system is not None else RECOMMENDER_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )

        usage = getattr(message, "usage", None)
        if usage is not None:
            logger.debug(
                "Anthropic usage: %s in / %s out tokens",
                getattr(usage, "input_tokens", "?"), getattr(usage, "output_tokens", "?"),
            )
        return "".join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        )
