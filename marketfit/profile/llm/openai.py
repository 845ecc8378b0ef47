"""OpenAI chat-completions provider for the external recommender tier.

The request sets JSON mode, so the reply is a bare JSON object.
"""

import logging
import os

from marketfit.profile.llm.base import RECOMMENDER_PROMPT, LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get(self.env_var)
        if not api_key:
            msg = f"{self.env_var} is not set; the openai recommender tier needs it"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = "Install the OpenAI SDK with: pip install 'market-fit-engine[openai]'"
            raise ImportError(msg) from None

        client = openai.OpenAI(api_key=api_key, timeout=self.timeout_s, max_retries=0)
        use_model = model or self.default_model

        logger.info("Asking %s for career recommendations", use_model)
        response = client.chat.completions.create(
            model=use_model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system if system is not None else RECOMMENDER_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )

        choice = response.choices[0]
        if getattr(choice, "finish_reason", None) == "length":
            logger.warning("OpenAI reply hit max_tokens=%d; JSON may be truncated", self.max_tokens)
        return choice.message.content or ""
