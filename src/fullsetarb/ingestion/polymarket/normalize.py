"""Gamma market record -> TokenPair candidates; CLOB /book payload -> OrderBook."""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any

from fullsetarb.models import Direction, GammaMarket, OrderBook, PriceLevel, TokenPair

_STRIP_CHARS = "[]\"'"
_YES_LABELS = ("yes", "1")
_NO_LABELS = ("no", "0")


def _clean(item: Any) -> str:
    text = str(item).strip()
    for ch in _STRIP_CHARS:
        text = text.replace(ch, "")
    return text.strip()


def parse_id_list(raw: str | list[Any] | None) -> list[str]:
    """Parse a Gamma list field: JSON array string, comma-separated string, or list.

    Brackets, quotes and surrounding whitespace are stripped from each element and
    empty elements are dropped, so '["T1","T2"]' and ' [T1, "T2"] ' give the same result.
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        items: list[Any] = raw
    else:
        text = raw.strip()
        items = text.split(",")
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except (json.JSONDecodeError, TypeError):
                decoded = None
            if isinstance(decoded, list):
                items = decoded
    cleaned = (_clean(item) for item in items if item is not None)
    return [item for item in cleaned if item]


def _find_label(labels: list[str], accepted: tuple[str, ...]) -> int | None:
    for i, label in enumerate(labels):
        if label.lower() in accepted:
            return i
    return None


def resolve_yes_no(outcomes: list[str], token_ids: list[str]) -> tuple[str, str]:
    """Map Yes/No labels to token ids by position; fall back to first/second token."""
    if len(outcomes) >= 2:
        yes_idx = _find_label(outcomes, _YES_LABELS)
        no_idx = _find_label(outcomes, _NO_LABELS)
        if (
            yes_idx is not None
            and no_idx is not None
            and yes_idx < len(token_ids)
            and no_idx < len(token_ids)
        ):
            return token_ids[yes_idx], token_ids[no_idx]
    return token_ids[0], token_ids[1]


def is_eligible(market: GammaMarket) -> bool:
    """Active, not archived, has a condition id and a token id field."""
    return (
        market.active is True
        and market.archived is not True
        and bool(market.condition_id)
        and bool(market.clob_token_ids)
    )


def market_to_pairs(market: GammaMarket) -> list[TokenPair]:
    """Return the buy and sell candidates for an eligible binary market, else []."""
    if not is_eligible(market):
        return []
    token_ids = parse_id_list(market.clob_token_ids)
    if len(token_ids) < 2:
        return []
    yes_token, no_token = resolve_yes_no(parse_id_list(market.outcomes), token_ids)
    if yes_token == no_token:
        return []
    condition_id = market.condition_id or ""
    return [
        TokenPair(
            market_id=condition_id,
            condition_id=condition_id,
            direction=direction,
            yes_token=yes_token,
            no_token=no_token,
            question=market.question or "",
            slug=market.slug or None,
        )
        for direction in (Direction.BUY, Direction.SELL)
    ]


def _decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


def _parse_levels(raw_levels: list[Any]) -> list[PriceLevel]:
    levels = []
    for lev in raw_levels:
        if not isinstance(lev, dict):
            continue
        price = _decimal(lev.get("price"))
        size = _decimal(lev.get("size")) or Decimal(0)
        if price is None or not (0 <= price <= 1) or size < 0:
            continue
        levels.append(PriceLevel(price=price, size=size))
    return levels


def parse_book(token_id: str, payload: Any) -> OrderBook | None:
    """Convert a CLOB /book response. None when bids or asks are missing."""
    if not isinstance(payload, dict):
        return None
    bids_raw = payload.get("bids")
    asks_raw = payload.get("asks")
    if not isinstance(bids_raw, list) or not isinstance(asks_raw, list):
        return None
    return OrderBook(
        token_id=token_id,
        bids=_parse_levels(bids_raw),
        asks=_parse_levels(asks_raw),
    )
