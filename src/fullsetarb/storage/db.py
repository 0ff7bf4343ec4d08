"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS opportunity_seq START 1;

-- One row per (market_id, type), re-detections are ignored at insert time
CREATE TABLE IF NOT EXISTS arbitrage_opportunity (
    id              BIGINT PRIMARY KEY DEFAULT nextval('opportunity_seq'),
    market_id       VARCHAR NOT NULL,
    yes_token       VARCHAR NOT NULL,
    no_token        VARCHAR NOT NULL,
    buy_price       DECIMAL(10, 4) NOT NULL,
    sell_price      DECIMAL(10, 4) NOT NULL,
    "type"          VARCHAR NOT NULL CHECK ("type" IN ('buy', 'sell')),
    link            VARCHAR,
    question        VARCHAR,
    created_at      TIMESTAMP NOT NULL,
    UNIQUE (market_id, "type")
);

CREATE INDEX IF NOT EXISTS idx_opportunity_market_id ON arbitrage_opportunity (market_id);
CREATE INDEX IF NOT EXISTS idx_opportunity_created_at ON arbitrage_opportunity (created_at);
"""


def get_connection(db_path: str | Path) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager.
    Pass ':memory:' for a throwaway database."""
    if str(db_path) == ":memory:":
        return duckdb.connect(":memory:")
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path))


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables, sequences and indexes if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
