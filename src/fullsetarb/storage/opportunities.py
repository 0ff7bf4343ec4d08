"""Opportunity persistence - atomic insert-if-absent keyed on (market_id, type)."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import duckdb
import structlog

from fullsetarb.errors import StorageError
from fullsetarb.models import Direction, Opportunity
from fullsetarb.storage.db import get_connection, init_schema

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

log = structlog.get_logger(__name__)

_INSERT_SQL = """
INSERT INTO arbitrage_opportunity
    (market_id, yes_token, no_token, buy_price, sell_price, "type", link, question, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT DO NOTHING
"""

_COLUMNS = [
    "market_id",
    "yes_token",
    "no_token",
    "buy_price",
    "sell_price",
    "type",
    "link",
    "question",
    "created_at",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SaveResult(str, Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class OpportunityRepository:
    """Writes and reads the arbitrage_opportunity table.

    Each row is written on its own, so one failed insert never blocks the rest of a
    batch. created_at is stamped here (UTC) at write time.
    """

    def __init__(
        self,
        conn: DuckDBPyConnection,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.conn = conn
        self._clock = clock

    def save_one(self, opp: Opportunity) -> SaveResult:
        try:
            row = self.conn.execute(
                _INSERT_SQL,
                [
                    opp.market_id,
                    opp.yes_token,
                    opp.no_token,
                    opp.buy_price,
                    opp.sell_price,
                    opp.direction.value,
                    opp.link,
                    opp.question,
                    self._clock(),
                ],
            ).fetchone()
        except duckdb.Error as e:
            log.error(
                "opportunity_save_failed",
                market_id=opp.market_id,
                direction=opp.direction.value,
                error=str(e),
            )
            return SaveResult.FAILED
        inserted = bool(row and row[0])
        return SaveResult.INSERTED if inserted else SaveResult.DUPLICATE

    def save(self, opportunities: Sequence[Opportunity]) -> int:
        """Persist each opportunity independently. Returns the number of new rows."""
        saved = 0
        for opp in opportunities:
            if self.save_one(opp) is SaveResult.INSERTED:
                saved += 1
        return saved

    def list_recent(
        self,
        limit: int = 50,
        direction: Direction | None = None,
        market_id: str | None = None,
    ) -> list[Opportunity]:
        """Most recent opportunities first, optionally filtered."""
        where = []
        params: list[object] = []
        if direction is not None:
            where.append('"type" = ?')
            params.append(direction.value)
        if market_id:
            where.append("market_id = ?")
            params.append(market_id)
        sql = (
            'SELECT market_id, yes_token, no_token, buy_price, sell_price, "type", link, question, created_at '
            "FROM arbitrage_opportunity"
        )
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)
        rows = self.conn.execute(sql, params).fetchall()
        out = []
        for r in rows:
            rec = dict(zip(_COLUMNS, r))
            rec["direction"] = rec.pop("type")
            rec["question"] = rec["question"] or ""
            rec["link"] = rec["link"] or ""
            out.append(Opportunity.model_validate(rec))
        return out

    def count(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM arbitrage_opportunity").fetchone()[0])

    def close(self) -> None:
        self.conn.close()


def open_repository(db_path: str | Path) -> OpportunityRepository:
    """Connect, create the schema and return a repository. Raises StorageError."""
    try:
        conn = get_connection(db_path)
    except (duckdb.Error, OSError) as e:
        raise StorageError(f"cannot open database {db_path}: {e}") from e
    try:
        init_schema(conn)
    except duckdb.Error as e:
        conn.close()
        raise StorageError(f"cannot initialize schema in {db_path}: {e}") from e
    return OpportunityRepository(conn)
