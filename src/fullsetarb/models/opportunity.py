"""Opportunity (persisted detection) and FullsetQuote (all four best prices)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator

from fullsetarb.models.market import Direction

PRICE_QUANTUM = Decimal("0.0001")


def quantize_price(value: Decimal | float | int) -> Decimal:
    """Round an aggregate price to the 4 decimal places stored in the database."""
    return Decimal(str(value)).quantize(PRICE_QUANTUM)


class Opportunity(BaseModel):
    """A qualifying fullset mispricing. created_at is assigned by storage."""

    model_config = ConfigDict(frozen=True)

    market_id: str
    yes_token: str
    no_token: str
    buy_price: Decimal
    sell_price: Decimal
    direction: Direction
    link: str
    question: str = ""
    created_at: datetime | None = None

    @field_validator("buy_price", "sell_price", mode="before")
    @classmethod
    def _quantize(cls, v: Decimal | float | int) -> Decimal:
        return quantize_price(v)

    @property
    def price(self) -> Decimal:
        """The aggregate price that qualified this opportunity."""
        return self.buy_price if self.direction is Direction.BUY else self.sell_price


class FullsetQuote(BaseModel):
    """Best prices for both tokens of a pair plus fullset aggregates (scaled)."""

    yes_token: str
    no_token: str
    yes_ask: Decimal | None = None
    yes_bid: Decimal | None = None
    no_ask: Decimal | None = None
    no_bid: Decimal | None = None
    buy_price: Decimal | None = None
    sell_price: Decimal | None = None
