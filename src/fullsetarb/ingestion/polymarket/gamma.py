"""Polymarket Gamma API client - paginated market catalog -> TokenPair candidates."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from fullsetarb.errors import CatalogError
from fullsetarb.ingestion.polymarket.normalize import market_to_pairs
from fullsetarb.models import GammaMarket, TokenPair

log = structlog.get_logger(__name__)

GAMMA_API_BASE = "https://gamma-api.polymarket.com"
PAGE_LIMIT = 1000


class GammaCatalog:
    """Lists every open market, newest first, and derives scan candidates.

    Pages are requested one after another; each offset depends on the size of the
    previous page.
    """

    def __init__(
        self,
        base_url: str = GAMMA_API_BASE,
        page_size: int = PAGE_LIMIT,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        base = base_url.rstrip("/")
        self.markets_url = base if base.endswith("/markets") else base + "/markets"
        self.page_size = page_size
        self._client = client or httpx.AsyncClient(
            timeout=timeout, headers={"Accept": "application/json"}
        )
        self._owns_client = client is None

    async def fetch_page(self, offset: int) -> list[Any]:
        """Fetch one page of raw market records starting at offset."""
        params = {
            "closed": "false",
            "limit": self.page_size,
            "offset": offset,
            "order": "createdAt",
            "ascending": "false",
        }
        try:
            resp = await self._client.get(self.markets_url, params=params)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CatalogError(f"market listing failed at offset {offset}: {e}") from e
        if not isinstance(data, list):
            raise CatalogError("Invalid API response format: expected array")
        return data

    async def iter_pages(self) -> AsyncIterator[list[Any]]:
        """Yield pages until one comes back empty or shorter than the page size."""
        offset = 0
        while True:
            page = await self.fetch_page(offset)
            if not page:
                return
            yield page
            offset += len(page)
            if len(page) < self.page_size:
                return

    async def fetch_candidates(self) -> AsyncIterator[TokenPair]:
        """Yield buy and sell TokenPairs for every eligible binary market."""
        records = 0
        candidates = 0
        skipped = 0
        async for page in self.iter_pages():
            for row in page:
                records += 1
                pairs = self._pairs_from_row(row)
                if not pairs:
                    skipped += 1
                    continue
                for pair in pairs:
                    candidates += 1
                    yield pair
        log.info("catalog_fetched", records=records, candidates=candidates, skipped=skipped)

    @staticmethod
    def _pairs_from_row(row: Any) -> list[TokenPair]:
        if not isinstance(row, dict):
            return []
        try:
            return market_to_pairs(GammaMarket.model_validate(row))
        except (ValidationError, ValueError, TypeError) as e:
            log.debug("skip_market", condition_id=row.get("conditionId"), error=str(e))
            return []

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
