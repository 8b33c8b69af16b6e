"""Bounded catalog sampling used to ground the recommendation prompt."""

import logging
from typing import Any

from shelfmate.domain.errors import CatalogUnavailable
from shelfmate.domain.models import CatalogEntry
from shelfmate.ports.catalog import CatalogPort

logger = logging.getLogger(__name__)


def to_catalog_entry(record: dict[str, Any]) -> CatalogEntry | None:
    """Convert a raw store record. Returns None when id or title is missing."""
    book_id = record.get("id")
    title = record.get("title")
    if book_id in (None, "") or title in (None, ""):
        return None
    return CatalogEntry(
        id=str(book_id),
        title=str(title),
        author=str(record.get("author") or ""),
        genre=str(record.get("genre") or ""),
    )


class CatalogSampler:
    """Fetches up to N catalog entries; never fails the request."""

    def __init__(self, catalog: CatalogPort) -> None:
        self._catalog = catalog

    async def sample(self, max_count: int) -> list[CatalogEntry]:
        """Return at most ``max_count`` entries, or [] when the store is unavailable."""
        if max_count <= 0:
            raise ValueError(f"max_count must be positive, got {max_count}")

        try:
            records = await self._catalog.scan(max_count)
        except CatalogUnavailable as e:
            logger.warning("Catalog unavailable, continuing without grounding: %s", e)
            return []

        entries: list[CatalogEntry] = []
        for record in records[:max_count]:
            entry = to_catalog_entry(record)
            if entry is None:
                logger.debug("Skipping catalog record without id/title")
                continue
            entries.append(entry)
        logger.info("Sampled %d catalog entries", len(entries))
        return entries
