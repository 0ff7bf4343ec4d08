"""Shared fixtures: Gamma records, CLOB book payloads, temp DuckDB repository."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from fullsetarb.models import OrderBook, PriceLevel
from fullsetarb.storage import open_repository

GAMMA = "https://gamma.test"
CLOB = "https://clob.test"


def gamma_market(**overrides: Any) -> dict[str, Any]:
    raw = {
        "id": "512",
        "question": "Will it rain in Lisbon tomorrow?",
        "conditionId": "0xcond1",
        "slug": "rain-in-lisbon",
        "clobTokenIds": '["T1","T2"]',
        "outcomes": "Yes,No",
        "active": True,
        "closed": False,
        "archived": False,
        "volume": "1234.5",
    }
    raw.update(overrides)
    return raw


def book_payload(bids: list[str], asks: list[str]) -> dict[str, Any]:
    return {
        "market": "0xcond1",
        "bids": [{"price": p, "size": "100"} for p in bids],
        "asks": [{"price": p, "size": "100"} for p in asks],
    }


def make_book(token_id: str, bids: list[str], asks: list[str]) -> OrderBook:
    return OrderBook(
        token_id=token_id,
        bids=[PriceLevel(price=Decimal(p), size=Decimal(10)) for p in bids],
        asks=[PriceLevel(price=Decimal(p), size=Decimal(10)) for p in asks],
    )


class FakeBooks:
    """In-memory order book source that records which tokens were requested."""

    def __init__(self, books: dict[str, OrderBook | None]) -> None:
        self.books = books
        self.calls: list[str] = []

    async def fetch_order_book(self, token_id: str) -> OrderBook | None:
        self.calls.append(token_id)
        return self.books.get(token_id)


async def wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def repo(tmp_path: Path):
    repository = open_repository(tmp_path / "test.duckdb")
    yield repository
    repository.close()
