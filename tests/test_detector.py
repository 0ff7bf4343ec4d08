"""Arbitrage rule: thresholds, partial failures, best-effort opposite price, links."""

from decimal import Decimal

import pytest

from conftest import FakeBooks, make_book
from fullsetarb.models import Direction, TokenPair
from fullsetarb.scanner.detector import OpportunityDetector, market_link


def _pair(direction: Direction, slug: str | None = "rain-in-lisbon") -> TokenPair:
    return TokenPair(
        market_id="0xcond1",
        condition_id="0xcond1",
        direction=direction,
        yes_token="YES",
        no_token="NO",
        question="Will it rain?",
        slug=slug,
    )


def _detector(yes_bids, yes_asks, no_bids, no_asks) -> tuple[OpportunityDetector, FakeBooks]:
    books = FakeBooks(
        {
            "YES": make_book("YES", yes_bids, yes_asks),
            "NO": make_book("NO", no_bids, no_asks),
        }
    )
    return OpportunityDetector(books), books


@pytest.mark.asyncio
async def test_buy_opportunity():
    det, books = _detector(["0.38"], ["0.40", "0.44"], ["0.50"], ["0.55", "0.60"])
    opp = await det.evaluate(_pair(Direction.BUY))
    assert opp is not None
    assert opp.direction is Direction.BUY
    assert opp.buy_price == Decimal("95.0000")
    assert opp.sell_price == Decimal("88.0000")
    assert opp.link == "https://polymarket.com/event/rain-in-lisbon"
    assert opp.question == "Will it rain?"
    assert sorted(books.calls) == ["NO", "YES"]


@pytest.mark.asyncio
async def test_sell_opportunity():
    det, _ = _detector(["0.52"], ["0.55"], ["0.53"], ["0.56"])
    opp = await det.evaluate(_pair(Direction.SELL))
    assert opp is not None
    assert opp.direction is Direction.SELL
    assert opp.sell_price == Decimal("105.0000")
    assert opp.buy_price == Decimal("111.0000")
    assert opp.price == opp.sell_price


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "yes_ask,no_ask,qualifies",
    [
        ("0.5", "0.5", False),
        ("0.499999", "0.5", True),
        ("0.6", "0.5", False),
    ],
)
async def test_buy_threshold_is_strict(yes_ask, no_ask, qualifies):
    det, _ = _detector([], [yes_ask], [], [no_ask])
    opp = await det.evaluate(_pair(Direction.BUY))
    assert (opp is not None) is qualifies
    if opp is not None:
        assert opp.buy_price == Decimal("99.9999")
        # no bids at all -> opposite price recorded as 0
        assert opp.sell_price == Decimal("0")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "yes_bid,no_bid,qualifies",
    [
        ("0.5", "0.5", False),
        ("0.500001", "0.5", True),
        ("0.4", "0.5", False),
    ],
)
async def test_sell_threshold_is_strict(yes_bid, no_bid, qualifies):
    det, _ = _detector([yes_bid], [], [no_bid], [])
    opp = await det.evaluate(_pair(Direction.SELL))
    assert (opp is not None) is qualifies
    if opp is not None:
        assert opp.sell_price == Decimal("100.0001")
        assert opp.buy_price == Decimal("0")


@pytest.mark.asyncio
async def test_sub_precision_buy_rounding_to_payout_does_not_qualify():
    # 99.99995 would be stored as 100.0000
    det, _ = _detector([], ["0.4999995"], [], ["0.5"])
    assert await det.evaluate(_pair(Direction.BUY)) is None


@pytest.mark.asyncio
async def test_sub_precision_sell_rounding_to_payout_does_not_qualify():
    det, _ = _detector(["0.5000005"], [], ["0.5"], [])
    assert await det.evaluate(_pair(Direction.SELL)) is None


@pytest.mark.asyncio
async def test_recorded_price_always_beats_payout():
    det, _ = _detector(["0.50000051"], ["0.49999949"], ["0.5"], ["0.5"])
    buy = await det.evaluate(_pair(Direction.BUY))
    sell = await det.evaluate(_pair(Direction.SELL))
    assert buy is not None and buy.buy_price == Decimal("99.9999")
    assert sell is not None and sell.sell_price == Decimal("100.0001")


@pytest.mark.asyncio
async def test_missing_no_book_yields_nothing():
    books = FakeBooks({"YES": make_book("YES", ["0.1"], ["0.1"]), "NO": None})
    det = OpportunityDetector(books)
    assert await det.evaluate(_pair(Direction.BUY)) is None
    assert await det.evaluate(_pair(Direction.SELL)) is None


@pytest.mark.asyncio
async def test_empty_ask_side_yields_no_buy():
    det, _ = _detector(["0.3"], [], ["0.3"], ["0.2"])
    assert await det.evaluate(_pair(Direction.BUY)) is None


@pytest.mark.asyncio
async def test_link_without_slug_uses_market_id():
    det, _ = _detector([], ["0.4"], [], ["0.4"])
    opp = await det.evaluate(_pair(Direction.BUY, slug=None))
    assert opp is not None
    assert opp.link == "https://polymarket.com/market/0xcond1"


@pytest.mark.asyncio
async def test_quote_reports_all_prices():
    det, _ = _detector(["0.52"], ["0.55"], ["0.53"], ["0.56"])
    q = await det.quote("YES", "NO")
    assert q is not None
    assert (q.yes_bid, q.yes_ask, q.no_bid, q.no_ask) == (
        Decimal("0.52"),
        Decimal("0.55"),
        Decimal("0.53"),
        Decimal("0.56"),
    )
    assert q.buy_price == Decimal("111")
    assert q.sell_price == Decimal("105")


@pytest.mark.asyncio
async def test_custom_scale_and_payout():
    books = FakeBooks({"YES": make_book("YES", [], ["0.40"]), "NO": make_book("NO", [], ["0.55"])})
    det = OpportunityDetector(books, payout=1, price_scale=1)
    opp = await det.evaluate(_pair(Direction.BUY))
    assert opp is not None
    assert opp.buy_price == Decimal("0.9500")


def test_market_link():
    assert market_link("0xabc", "some-event") == "https://polymarket.com/event/some-event"
    assert market_link("0xabc") == "https://polymarket.com/market/0xabc"
    assert market_link("0xabc", None, "https://example.test/") == "https://example.test/market/0xabc"
