import logging

import httpx

from shelfmate.domain.errors import InvocationError
from shelfmate.ports.llm import LLMPort

logger = logging.getLogger(__name__)


class OllamaLLMAdapter(LLMPort):
    """LLM adapter using a local Ollama instance."""

    def __init__(
        self,
        base_url: str,
        model: str,
        max_tokens: int,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=180.0
        )

    async def invoke(self, prompt: str) -> str:
        """Send a chat completion request to Ollama."""
        payload = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {"num_predict": self._max_tokens},
        }
        logger.info("Ollama request: model=%s, max_tokens=%d", self._model, self._max_tokens)
        try:
            resp = await self._client.post("/api/chat", json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise InvocationError(
                f"Ollama call failed: HTTP {status}", transient=status >= 500
            ) from e
        except httpx.TransportError as e:
            raise InvocationError(f"Ollama unreachable: {e}", transient=True) from e

        try:
            result = resp.json()["message"]["content"]
        except (ValueError, KeyError, TypeError) as e:
            raise InvocationError(f"Malformed Ollama response envelope: {e}") from e
        if not isinstance(result, str):
            raise InvocationError("Malformed Ollama response envelope: content is not a string")
        logger.info("Ollama response: %d chars", len(result))
        return result

    async def aclose(self) -> None:
        await self._client.aclose()
