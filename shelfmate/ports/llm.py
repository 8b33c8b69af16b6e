"""LLM port — abstract interface for generative model backends."""

from abc import ABC, abstractmethod


class LLMPort(ABC):
    """Sends a rendered prompt to a model and returns its raw text reply."""

    @abstractmethod
    async def invoke(self, prompt: str) -> str:
        """
        Run one completion for ``prompt``.

        Raises InvocationError on transport, auth or envelope failures.
        """
        ...

    async def aclose(self) -> None:
        """Release any pooled connections held by the adapter."""
        return None
