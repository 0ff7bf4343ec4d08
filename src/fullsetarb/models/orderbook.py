"""OrderBook and PriceLevel - one CLOB /book response."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class PriceLevel(BaseModel):
    """Single price level (price -> size). Prices are probabilities in [0, 1]."""

    price: Decimal = Field(..., ge=0, le=1)
    size: Decimal = Field(default=Decimal(0), ge=0)


class OrderBook(BaseModel):
    """Bid and ask levels for one outcome token. Levels are not assumed sorted."""

    token_id: str
    bids: list[PriceLevel] = Field(default_factory=list)
    asks: list[PriceLevel] = Field(default_factory=list)

    @property
    def best_bid(self) -> Decimal | None:
        """Highest bid: immediate proceeds from selling one share."""
        if not self.bids:
            return None
        return max(lev.price for lev in self.bids)

    @property
    def best_ask(self) -> Decimal | None:
        """Lowest ask: immediate cost of buying one share."""
        if not self.asks:
            return None
        return min(lev.price for lev in self.asks)
