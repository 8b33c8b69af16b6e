import asyncio
import json
import logging
import re

from shelfmate.ports.llm import LLMPort
from shelfmate.prompts.templates import estimate_tokens

logger = logging.getLogger(__name__)

_CATALOG_LINE = re.compile(r'^- ID: (?P<id>.+?), Title: "(?P<title>.*)", Author: "(?P<author>.*)", Genre: ', re.M)

_CLASSICS = [
    ("The Hobbit", "J.R.R. Tolkien", "A timeless adventure that suits almost any reader."),
    ("Dune", "Frank Herbert", "A landmark of world-building and political intrigue."),
    ("Pride and Prejudice", "Jane Austen", "Sharp, witty and endlessly re-readable."),
]


class MockLLMAdapter(LLMPort):
    """
    Mock LLM adapter for running without model access.

    Echoes up to three catalog books found in the prompt, topped up with
    well-known classics, as a strict JSON array. Output depends only on
    the prompt text.
    """

    def __init__(self, latency: float = 0.2) -> None:
        self._latency = latency

    async def invoke(self, prompt: str) -> str:
        """Return a deterministic recommendation array."""
        await asyncio.sleep(self._latency)  # simulate LLM latency
        logger.info("MockLLM: invoke called (%d estimated tokens)", estimate_tokens(prompt))

        items: list[dict] = []
        for match in _CATALOG_LINE.finditer(prompt):
            if len(items) == 3:
                break
            items.append(
                {
                    "bookId": match["id"],
                    "title": match["title"],
                    "author": match["author"],
                    "reason": "Available in the library catalog.",
                    "confidence": 0.8,
                }
            )
        for title, author, reason in _CLASSICS:
            if len(items) == 3:
                break
            if any(i["title"] == title for i in items):
                continue
            items.append(
                {"title": title, "author": author, "reason": reason, "confidence": 0.6}
            )
        return json.dumps(items)
