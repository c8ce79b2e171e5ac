"""BigMap Content Fetcher backed by the TzKT indexer.

Big map content is not part of a contract's storage value; it is read from an
indexer instead. For every requested id a single bounded page is requested
(`limit` = page size, 10 by default, matching the indexer default). There is
no continuation: a map holding more entries than one page is copied
partially and a warning is logged.

Per-id requests run concurrently and are joined before returning. Failure of
any id aborts the whole batch with `BigMapFetchFailed`; no partial result is
returned because originating an incomplete multi-map clone silently is unsafe.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .config import DEFAULT_BIGMAP_PAGE_SIZE
from .errors import BigMapFetchFailed, ConfigurationError
from .models.contract import BigMapEntry, BigMapSnapshot
from .protocols import BigMapSource

logger = logging.getLogger(__name__)

__all__ = ["TzktIndexerClient", "BigMapFetcher"]


class TzktIndexerClient:
    """Async client for the TzKT `bigmaps/{id}/keys` endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ConfigurationError("Indexer URL is empty; set INDEXER_URL for CUSTOM networks")
        self.base = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def list_big_map_entries(self, big_map_id: int, limit: int) -> List[Dict[str, Any]]:
        url = f"{self.base}/bigmaps/{big_map_id}/keys"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.get(url, params={"limit": limit})
        resp.raise_for_status()
        rows = resp.json()
        if not isinstance(rows, list):
            raise ValueError(f"unexpected indexer payload for big map {big_map_id}: {type(rows).__name__}")
        return rows


class BigMapFetcher:
    def __init__(self, source: BigMapSource, page_size: int = DEFAULT_BIGMAP_PAGE_SIZE):
        self._source = source
        self.page_size = page_size

    async def _fetch_one(self, big_map_id: int) -> BigMapSnapshot:
        try:
            rows = await self._source.list_big_map_entries(big_map_id, self.page_size)
            # Tombstoned / overwritten keys are reported with active=false.
            entries = [
                BigMapEntry(key=row["key"], value=row.get("value"))
                for row in rows
                if row.get("active")
            ]
        except Exception as e:
            raise BigMapFetchFailed(big_map_id, str(e)) from e
        if len(rows) >= self.page_size:
            logger.warning(
                "Big map %s returned a full page (%d rows); entries beyond the first page are not copied",
                big_map_id,
                self.page_size,
            )
        logger.info(
            "Fetched big map %s: %d active of %d row(s)", big_map_id, len(entries), len(rows)
        )
        return BigMapSnapshot(id=big_map_id, entries=entries)

    async def fetch_entries(self, ids: Iterable[int]) -> List[BigMapSnapshot]:
        """Fetch one page of active entries for each id, concurrently.

        Duplicate ids are fetched once; results follow first-seen id order.

        Raises:
            BigMapFetchFailed: any single fetch failed; the cause is chained.
        """
        unique_ids = list(dict.fromkeys(int(i) for i in ids))
        tasks = [asyncio.ensure_future(self._fetch_one(i)) for i in unique_ids]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
