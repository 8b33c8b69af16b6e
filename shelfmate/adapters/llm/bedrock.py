"""AWS Bedrock adapter for Anthropic models (messages API envelope)."""

import asyncio
import json
import logging
from functools import partial
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
)

from shelfmate.domain.errors import InvocationError
from shelfmate.ports.llm import LLMPort

logger = logging.getLogger(__name__)

TRANSIENT_ERROR_CODES = frozenset(
    {
        "ThrottlingException",
        "ServiceUnavailableException",
        "InternalServerException",
        "ModelTimeoutException",
        "ModelNotReadyException",
    }
)


class BedrockLLMAdapter(LLMPort):
    """LLM adapter calling ``InvokeModel`` on the Bedrock runtime."""

    def __init__(
        self,
        model_id: str,
        region: str,
        max_tokens: int,
        anthropic_version: str = "bedrock-2023-05-31",
        read_timeout: float = 60.0,
        client: Any = None,
    ) -> None:
        # Retries belong to the service layer.
        self._client = client or boto3.client(
            "bedrock-runtime",
            region_name=region,
            config=Config(read_timeout=read_timeout, retries={"max_attempts": 1}),
        )
        self._model_id = model_id
        self._max_tokens = max_tokens
        self._anthropic_version = anthropic_version
        logger.info("Bedrock initialized: model=%s, region=%s", model_id, region)

    def build_request(self, prompt: str) -> dict[str, Any]:
        """Wrap the prompt in the InvokeModel request envelope."""
        body = {
            "anthropic_version": self._anthropic_version,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        return {
            "modelId": self._model_id,
            "contentType": "application/json",
            "accept": "application/json",
            "body": json.dumps(body),
        }

    @staticmethod
    def extract_text(payload: bytes | str) -> str:
        """Unwrap generated text from the response body. Raises InvocationError."""
        try:
            envelope = json.loads(payload)
            text = envelope["content"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise InvocationError(f"Malformed Bedrock response envelope: {e}") from e
        if not isinstance(text, str):
            raise InvocationError("Malformed Bedrock response envelope: text is not a string")
        return text

    def _call(self, request: dict[str, Any]) -> bytes:
        """Run InvokeModel and drain the streaming body. Blocking."""
        resp = self._client.invoke_model(**request)
        try:
            body = resp["body"]
        except (KeyError, TypeError) as e:
            raise InvocationError("Malformed Bedrock response: missing body") from e
        return body.read()

    async def invoke(self, prompt: str) -> str:
        """Send one InvokeModel request and return the generated text."""
        request = self.build_request(prompt)
        logger.info(
            "Bedrock request: model=%s, max_tokens=%d", self._model_id, self._max_tokens
        )
        loop = asyncio.get_running_loop()
        try:
            payload = await loop.run_in_executor(None, partial(self._call, request))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            raise InvocationError(
                f"Bedrock call failed: {code}",
                transient=code in TRANSIENT_ERROR_CODES,
            ) from e
        except (BotoConnectionError, HTTPClientError) as e:
            raise InvocationError(f"Bedrock unreachable: {e}", transient=True) from e
        except BotoCoreError as e:
            raise InvocationError(f"Bedrock call failed: {e}") from e

        result = self.extract_text(payload)
        logger.info("Bedrock response: %d chars", len(result))
        return result
