"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
-- Catalog snapshot (last sync from Gamma)
CREATE TABLE IF NOT EXISTS events (
    event_id        VARCHAR PRIMARY KEY,
    position        INTEGER NOT NULL,
    title           VARCHAR NOT NULL,
    slug            VARCHAR,
    end_date        VARCHAR,
    category_id     VARCHAR,
    volume          DOUBLE,
    synced_at       BIGINT NOT NULL
);

CREATE TABLE IF NOT EXISTS markets (
    market_id       VARCHAR PRIMARY KEY,
    event_id        VARCHAR,
    position        INTEGER NOT NULL,
    question        VARCHAR,
    slug            VARCHAR,
    volume          DOUBLE,
    volume_24h      DOUBLE,
    liquidity       DOUBLE,
    outcome_prob    DOUBLE,
    end_date        VARCHAR,
    tokens          JSON,
    category_id     VARCHAR
);

-- Price-history cache per (token, time window), entries expire by fetched_at
CREATE TABLE IF NOT EXISTS price_history (
    token_id        VARCHAR NOT NULL,
    time_window     VARCHAR NOT NULL,
    fetched_at      BIGINT NOT NULL,
    points          JSON NOT NULL,
    PRIMARY KEY (token_id, time_window)
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager."""
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
