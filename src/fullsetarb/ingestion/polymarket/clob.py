"""Polymarket CLOB REST client - per-token order books and best prices."""

from __future__ import annotations

import httpx
import structlog

from fullsetarb.ingestion.polymarket.normalize import parse_book
from fullsetarb.ingestion.rate_limit import TokenBucket
from fullsetarb.models import OrderBook

log = structlog.get_logger(__name__)

CLOB_API_BASE = "https://clob.polymarket.com"


class ClobBookClient:
    """Fetches /book for a token. Any failure is reported as None, never raised."""

    def __init__(
        self,
        base_url: str = CLOB_API_BASE,
        timeout: float = 15.0,
        limiter: TokenBucket | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.book_url = base_url.rstrip("/") + "/book"
        self.limiter = limiter
        self._client = client or httpx.AsyncClient(
            timeout=timeout, headers={"Accept": "application/json"}
        )
        self._owns_client = client is None

    async def fetch_order_book(self, token_id: str) -> OrderBook | None:
        if self.limiter is not None:
            await self.limiter.acquire()
        try:
            resp = await self._client.get(self.book_url, params={"token_id": token_id})
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            log.debug("book_unavailable", token_id=token_id, error=str(e))
            return None
        book = parse_book(token_id, payload)
        if book is None:
            log.debug("book_malformed", token_id=token_id)
        return book

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
