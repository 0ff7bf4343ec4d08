"""Typed records (Pydantic) - raw Gamma market, TokenPair, OrderBook, Opportunity."""

from fullsetarb.models.market import Direction, GammaMarket, TokenPair
from fullsetarb.models.opportunity import FullsetQuote, Opportunity
from fullsetarb.models.orderbook import OrderBook, PriceLevel

__all__ = [
    "Direction",
    "GammaMarket",
    "TokenPair",
    "OrderBook",
    "PriceLevel",
    "Opportunity",
    "FullsetQuote",
]
