"""GammaMarket (raw listing record) and TokenPair (scan candidate)."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Direction(str, Enum):
    """Which side of the fullset a candidate is checked for."""

    BUY = "buy"
    SELL = "sell"


class GammaMarket(BaseModel):
    """Gamma /markets record, limited to the fields the scanner reads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    question: str | None = None
    condition_id: str | None = Field(default=None, alias="conditionId")
    slug: str | None = None
    # Gamma sends these as JSON-encoded strings, occasionally as plain CSV or real lists
    clob_token_ids: str | list[Any] | None = Field(default=None, alias="clobTokenIds")
    outcomes: str | list[Any] | None = None
    active: bool | None = None
    closed: bool | None = None
    archived: bool | None = None


class TokenPair(BaseModel):
    """One scan candidate: a binary market's Yes/No tokens checked in one direction."""

    model_config = ConfigDict(frozen=True)

    market_id: str
    condition_id: str
    direction: Direction
    yes_token: str = Field(..., min_length=1)
    no_token: str = Field(..., min_length=1)
    question: str = ""
    slug: str | None = None

    @model_validator(mode="after")
    def _distinct_tokens(self) -> TokenPair:
        if self.yes_token == self.no_token:
            raise ValueError("yes_token and no_token must differ")
        return self
