import logging

import openai
from openai import AsyncOpenAI

from shelfmate.domain.errors import InvocationError
from shelfmate.ports.llm import LLMPort

logger = logging.getLogger(__name__)


class OpenAILLMAdapter(LLMPort):
    """LLM adapter using OpenAI API (GPT-4o, GPT-4o-mini, etc.)."""

    def __init__(self, api_key: str, model: str, max_tokens: int) -> None:
        # Retries belong to the service layer.
        self._client = AsyncOpenAI(api_key=api_key, max_retries=0)
        self._model = model
        self._max_tokens = max_tokens

    async def invoke(self, prompt: str) -> str:
        """Send a chat completion request to OpenAI."""
        logger.info("OpenAI request: model=%s, max_tokens=%d", self._model, self._max_tokens)
        try:
            resp = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self._max_tokens,
                temperature=0.7,
            )
        except (openai.APIConnectionError, openai.RateLimitError) as e:
            raise InvocationError(f"OpenAI unavailable: {e}", transient=True) from e
        except openai.APIStatusError as e:
            raise InvocationError(
                f"OpenAI call failed: HTTP {e.status_code}",
                transient=e.status_code >= 500,
            ) from e

        try:
            result = resp.choices[0].message.content or ""
        except (IndexError, AttributeError) as e:
            raise InvocationError("Malformed OpenAI response: no choices") from e
        logger.info("OpenAI response: %d chars", len(result))
        return result

    async def aclose(self) -> None:
        await self._client.close()
