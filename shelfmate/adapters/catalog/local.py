"""Local JSON-file catalog adapter."""

import json
import logging
from pathlib import Path
from typing import Any

import aiofiles

from shelfmate.domain.errors import CatalogUnavailable
from shelfmate.ports.catalog import CatalogPort

logger = logging.getLogger(__name__)


class LocalCatalogAdapter(CatalogPort):
    """Serve catalog records from a JSON array on the local filesystem."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        logger.info("LocalCatalog initialized at: %s", self._path.resolve())

    async def scan(self, limit: int) -> list[dict[str, Any]]:
        """Read the file and return its first ``limit`` records."""
        try:
            async with aiofiles.open(self._path, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            raise CatalogUnavailable(f"Cannot read catalog file {self._path}: {e}") from e

        try:
            records = json.loads(content)
        except ValueError as e:
            raise CatalogUnavailable(f"Catalog file {self._path} is not valid JSON") from e
        if not isinstance(records, list):
            raise CatalogUnavailable(f"Catalog file {self._path} must hold a JSON array")

        return [r for r in records if isinstance(r, dict)][:limit]
