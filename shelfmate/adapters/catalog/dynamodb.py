"""DynamoDB catalog adapter (the ``Books`` table)."""

import asyncio
import logging
from functools import partial
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shelfmate.domain.errors import CatalogUnavailable
from shelfmate.ports.catalog import CatalogPort

logger = logging.getLogger(__name__)


class DynamoDBCatalogAdapter(CatalogPort):
    """Read catalog records with a single bounded ``Scan``."""

    def __init__(self, table_name: str, region: str, table: Any = None) -> None:
        if table is None:
            table = boto3.resource("dynamodb", region_name=region).Table(table_name)
        self._table = table
        self._table_name = table_name
        logger.info("DynamoDBCatalog initialized: table=%s, region=%s", table_name, region)

    async def scan(self, limit: int) -> list[dict[str, Any]]:
        """Scan at most ``limit`` items. Only the first page is read."""
        loop = asyncio.get_running_loop()
        try:
            resp = await loop.run_in_executor(
                None, partial(self._table.scan, Limit=limit)
            )
        except (ClientError, BotoCoreError) as e:
            raise CatalogUnavailable(
                f"Scan of table {self._table_name} failed: {e}"
            ) from e
        items = resp.get("Items", [])
        logger.debug("Scanned %s: %d items", self._table_name, len(items))
        return items
