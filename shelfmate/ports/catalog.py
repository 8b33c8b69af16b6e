"""Catalog port — read-only access to the book catalog store."""

from abc import ABC, abstractmethod
from typing import Any


class CatalogPort(ABC):
    """Abstraction over the catalog storage backend."""

    @abstractmethod
    async def scan(self, limit: int) -> list[dict[str, Any]]:
        """
        Return up to ``limit`` raw catalog records.

        Records carry at least ``id``, ``title``, ``author`` and ``genre``
        keys; extra keys are ignored. Raises CatalogUnavailable when the
        store cannot be reached.
        """
        ...
