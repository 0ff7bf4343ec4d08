"""Collaborator protocols so the scan pipeline can be wired with fakes in tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Protocol

from fullsetarb.models import Opportunity, OrderBook, TokenPair


class CandidateSource(Protocol):
    """Produces scan candidates from the venue catalog."""

    def fetch_candidates(self) -> AsyncIterator[TokenPair]: ...


class OrderBookSource(Protocol):
    """Returns a token's order book, or None when it cannot be read."""

    async def fetch_order_book(self, token_id: str) -> OrderBook | None: ...


class OpportunitySink(Protocol):
    """Persists opportunities, returning how many were newly stored."""

    def save(self, opportunities: Sequence[Opportunity]) -> int: ...
