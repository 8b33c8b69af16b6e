"""
Structured, versioned prompt templates for model interactions.

Design Principles:
  1. Prompts are immutable dataclass objects — no inline strings in adapters.
  2. Each template is versioned for traceability.
  3. Templates are adapter-agnostic: the same prompt goes to Bedrock, OpenAI or Ollama.
  4. Rendering is a pure function of its inputs; identical inputs give identical bytes.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from shelfmate.domain.models import CatalogEntry


# ── Token Estimation ─────────────────────────────────────────────
# Rough estimate: 1 token ≈ 4 characters for English text.

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate token count from character length."""
    return len(text) // CHARS_PER_TOKEN


# ── Prompt Template ──────────────────────────────────────────────

@dataclass(frozen=True)
class PromptTemplate:
    """
    Immutable prompt template.

    Attributes:
        name:       Unique identifier for logging and tracking.
        version:    Semantic version for prompt iteration tracking.
        template:   Prompt body with {variable} placeholders.
        max_tokens: Default output token ceiling for this prompt.
        tags:       Metadata tags for categorization.
    """

    name: str
    version: str
    template: str
    max_tokens: int = 1000
    tags: tuple[str, ...] = field(default_factory=tuple)

    def render(self, **kwargs: str) -> str:
        """Render template with variables."""
        return self.template.format(**kwargs)


# ── Book Recommendation Prompt ───────────────────────────────────

RECOMMEND_BOOKS = PromptTemplate(
    name="recommend_books",
    version="2.0.0",
    template=(
        "You are an expert librarian AI. A user is looking for book recommendations.\n\n"
        'User Query: "{query}"\n\n'
        "Here is a list of books currently in our library catalog:\n"
        "{catalog}\n\n"
        "INSTRUCTIONS:\n"
        "1. Recommend exactly 3 books.\n"
        "2. If the user's query matches books in our catalog, PRIORITIZE recommending "
        'them and include their "bookId" (the ID from the list).\n'
        "3. If no catalog books match well, recommend famous real-world books instead "
        "(do not invent fake books).\n"
        '4. For books that are not in the catalog, do NOT include a "bookId".\n'
        "5. OUTPUT STRICT JSON ONLY. Do not include markdown formatting or chat text.\n\n"
        "Response Format:\n"
        "[\n"
        "  {{\n"
        '    "bookId": "string" (ONLY if from catalog),\n'
        '    "title": "string",\n'
        '    "author": "string",\n'
        '    "reason": "string",\n'
        '    "confidence": 0.95\n'
        "  }}\n"
        "]"
    ),
    max_tokens=1000,
    tags=("recommendation", "catalog", "grounding"),
)

EMPTY_CATALOG_LINE = "(no catalog books are available right now)"


# ── Rendering Helpers ────────────────────────────────────────────

def format_catalog_entry(entry: CatalogEntry) -> str:
    """Render one catalog line as shown to the model."""
    return (
        f'- ID: {entry.id}, Title: "{entry.title}", '
        f'Author: "{entry.author}", Genre: {entry.genre}'
    )


def render_recommendation_prompt(
    query: str,
    entries: Sequence[CatalogEntry],
) -> str:
    """
    Render the catalog-grounded recommendation prompt.

    Args:
        query: The normalized user query, interpolated verbatim.
        entries: Catalog sample, listed in the order given.

    Returns:
        The complete prompt text for a single user message.
    """
    catalog = "\n".join(format_catalog_entry(e) for e in entries)
    return RECOMMEND_BOOKS.render(
        query=query,
        catalog=catalog or EMPTY_CATALOG_LINE,
    )


# ── Prompt Registry ──────────────────────────────────────────────

PROMPT_REGISTRY: dict[str, PromptTemplate] = {
    RECOMMEND_BOOKS.name: RECOMMEND_BOOKS,
}


def get_prompt(name: str) -> PromptTemplate:
    """Retrieve a prompt template by name. Raises KeyError if not found."""
    if name not in PROMPT_REGISTRY:
        raise KeyError(
            f"Prompt '{name}' not found. Available: {list(PROMPT_REGISTRY.keys())}"
        )
    return PROMPT_REGISTRY[name]
