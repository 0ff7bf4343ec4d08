"""Fullset arbitrage rule: Yes ask + No ask below payout, or Yes bid + No bid above it."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import structlog

from fullsetarb.ingestion.base import OrderBookSource
from fullsetarb.models import Direction, FullsetQuote, Opportunity, OrderBook, TokenPair
from fullsetarb.models.opportunity import quantize_price

log = structlog.get_logger(__name__)

WEB_BASE = "https://polymarket.com"


def market_link(market_id: str, slug: str | None = None, web_base: str = WEB_BASE) -> str:
    """Link to the market page: /event/<slug> when a slug is known, else /market/<id>."""
    base = web_base.rstrip("/")
    if slug:
        return f"{base}/event/{slug}"
    return f"{base}/market/{market_id}"


def fullset_price(yes: Decimal | None, no: Decimal | None, scale: Decimal) -> Decimal | None:
    """Scaled price of one Yes plus one No share at stored precision, or None if either
    leg is missing."""
    if yes is None or no is None:
        return None
    return quantize_price((yes + no) * scale)


class OpportunityDetector:
    """Evaluates TokenPairs against the order books of their two tokens.

    Book prices are probabilities in [0, 1]; they are multiplied by price_scale and
    compared with payout (both 100 by default). Thresholds are strict.
    """

    def __init__(
        self,
        books: OrderBookSource,
        payout: float | Decimal = 100,
        price_scale: float | Decimal = 100,
        web_base: str = WEB_BASE,
    ) -> None:
        self.books = books
        self.payout = Decimal(str(payout))
        self.price_scale = Decimal(str(price_scale))
        self.web_base = web_base

    async def fetch_books(
        self, yes_token: str, no_token: str
    ) -> tuple[OrderBook, OrderBook] | None:
        """Fetch both books concurrently. None unless both are available."""
        yes_book, no_book = await asyncio.gather(
            self.books.fetch_order_book(yes_token),
            self.books.fetch_order_book(no_token),
        )
        if yes_book is None or no_book is None:
            return None
        return yes_book, no_book

    async def evaluate(self, pair: TokenPair) -> Opportunity | None:
        books = await self.fetch_books(pair.yes_token, pair.no_token)
        if books is None:
            log.debug("pair_skipped_no_book", market_id=pair.market_id, direction=pair.direction.value)
            return None
        yes_book, no_book = books
        buy = fullset_price(yes_book.best_ask, no_book.best_ask, self.price_scale)
        sell = fullset_price(yes_book.best_bid, no_book.best_bid, self.price_scale)

        if pair.direction is Direction.BUY:
            if buy is None or not buy < self.payout:
                return None
        elif sell is None or not sell > self.payout:
            return None

        opp = Opportunity(
            market_id=pair.market_id,
            yes_token=pair.yes_token,
            no_token=pair.no_token,
            buy_price=buy if buy is not None else 0,
            sell_price=sell if sell is not None else 0,
            direction=pair.direction,
            link=market_link(pair.market_id, pair.slug, self.web_base),
            question=pair.question,
        )
        log.info(
            "opportunity_found",
            direction=opp.direction.value,
            market_id=opp.market_id,
            price=str(opp.price),
            link=opp.link,
        )
        return opp

    async def quote(self, yes_token: str, no_token: str) -> FullsetQuote | None:
        """All four best prices for a token pair, with scaled fullset aggregates."""
        books = await self.fetch_books(yes_token, no_token)
        if books is None:
            return None
        yes_book, no_book = books
        return FullsetQuote(
            yes_token=yes_token,
            no_token=no_token,
            yes_ask=yes_book.best_ask,
            yes_bid=yes_book.best_bid,
            no_ask=no_book.best_ask,
            no_bid=no_book.best_bid,
            buy_price=fullset_price(yes_book.best_ask, no_book.best_ask, self.price_scale),
            sell_price=fullset_price(yes_book.best_bid, no_book.best_bid, self.price_scale),
        )
