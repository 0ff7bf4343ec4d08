"""Token id parsing, outcome mapping, eligibility and book parsing."""

from decimal import Decimal

import pytest

from conftest import gamma_market
from fullsetarb.ingestion.polymarket.normalize import (
    market_to_pairs,
    parse_book,
    parse_id_list,
    resolve_yes_no,
)
from fullsetarb.models import Direction, GammaMarket


def test_json_and_csv_token_ids_normalize_alike():
    as_json = parse_id_list('["1234", "5678"]')
    as_csv = parse_id_list(' [1234 , "5678"] ')
    assert as_json == ["1234", "5678"]
    assert as_csv == as_json


def test_bad_json_falls_back_to_comma_split():
    assert parse_id_list('["T1", "T2"') == ["T1", "T2"]


def test_empty_elements_dropped():
    assert parse_id_list("T1,, ,T2,") == ["T1", "T2"]
    assert parse_id_list("[]") == []
    assert parse_id_list(None) == []


def test_list_input_accepted():
    assert parse_id_list([" T1 ", '"T2"']) == ["T1", "T2"]


@pytest.mark.parametrize(
    "outcomes,expected",
    [
        (["Yes", "No"], ("T1", "T2")),
        (["No", "Yes"], ("T2", "T1")),
        (["yes", "NO"], ("T1", "T2")),
        (["0", "1"], ("T2", "T1")),
        (["Trump", "Harris"], ("T1", "T2")),
        ([], ("T1", "T2")),
        (["Yes"], ("T1", "T2")),
    ],
)
def test_resolve_yes_no(outcomes, expected):
    assert resolve_yes_no(outcomes, ["T1", "T2"]) == expected


def test_json_encoded_outcomes_are_understood():
    pairs = market_to_pairs(GammaMarket.model_validate(gamma_market(outcomes='["No", "Yes"]')))
    assert pairs[0].yes_token == "T2"
    assert pairs[0].no_token == "T1"


def test_eligible_market_yields_buy_and_sell_pairs():
    pairs = market_to_pairs(GammaMarket.model_validate(gamma_market()))
    assert [p.direction for p in pairs] == [Direction.BUY, Direction.SELL]
    for p in pairs:
        assert p.market_id == "0xcond1"
        assert p.condition_id == "0xcond1"
        assert (p.yes_token, p.no_token) == ("T1", "T2")
        assert p.slug == "rain-in-lisbon"
        assert p.question.startswith("Will it rain")


@pytest.mark.parametrize(
    "overrides",
    [
        {"active": False},
        {"archived": True},
        {"conditionId": ""},
        {"conditionId": None},
        {"clobTokenIds": None},
        {"clobTokenIds": '["T1"]'},
        {"clobTokenIds": '["T1","T1"]'},
    ],
)
def test_ineligible_markets_yield_nothing(overrides):
    assert market_to_pairs(GammaMarket.model_validate(gamma_market(**overrides))) == []


def test_missing_slug_is_none():
    pairs = market_to_pairs(GammaMarket.model_validate(gamma_market(slug="")))
    assert pairs[0].slug is None


def test_parse_book_extracts_levels():
    book = parse_book("T1", {"bids": [{"price": "0.4", "size": "10"}], "asks": [{"price": ".45", "size": "5"}]})
    assert book is not None
    assert book.best_bid == Decimal("0.4")
    assert book.best_ask == Decimal("0.45")


@pytest.mark.parametrize(
    "payload",
    [
        {"bids": []},
        {"asks": []},
        {"bids": None, "asks": []},
        [],
        "not a book",
    ],
)
def test_parse_book_missing_side_is_none(payload):
    assert parse_book("T1", payload) is None


def test_parse_book_drops_bad_levels():
    book = parse_book(
        "T1",
        {
            "bids": [{"price": "abc", "size": "1"}, {"price": "1.5", "size": "1"}, {"price": "0.3"}],
            "asks": ["0.2", {"price": "-0.1", "size": "1"}],
        },
    )
    assert book is not None
    assert [lev.price for lev in book.bids] == [Decimal("0.3")]
    assert book.asks == []
    assert book.best_ask is None
