"""Catalog snapshot persistence (events + markets)."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING

from depmap.models import EventRecord, MarketRecord

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_MARKET_COLUMNS = [
    "market_id",
    "event_id",
    "question",
    "slug",
    "volume",
    "volume_24h",
    "liquidity",
    "outcome_prob",
    "end_date",
    "tokens",
    "category_id",
]


def save_catalog(conn: DuckDBPyConnection, events: list[EventRecord]) -> int:
    """Replace the stored snapshot with events. Returns the number of markets written."""
    now_ms = int(time.time() * 1000)
    written = 0
    seen_markets: set[str] = set()
    conn.execute("BEGIN TRANSACTION")
    try:
        conn.execute("DELETE FROM markets")
        conn.execute("DELETE FROM events")
        for position, event in enumerate(events):
            conn.execute(
                """
                INSERT INTO events (event_id, position, title, slug, end_date, category_id, volume, synced_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (event_id) DO NOTHING
                """,
                [event.id, position, event.title, event.slug, event.end_date, event.category_id, event.volume, now_ms],
            )
            for market_pos, market in enumerate(event.markets):
                if market.id in seen_markets:
                    continue
                seen_markets.add(market.id)
                conn.execute(
                    """
                    INSERT INTO markets (market_id, event_id, position, question, slug, volume, volume_24h,
                                         liquidity, outcome_prob, end_date, tokens, category_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        market.id,
                        event.id,
                        market_pos,
                        market.question,
                        market.slug,
                        market.volume,
                        market.volume_24h,
                        market.liquidity,
                        market.outcome_prob,
                        market.end_date,
                        json.dumps(market.tokens),
                        market.category_id,
                    ],
                )
                written += 1
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
    return written


def _market_from_row(row: tuple) -> MarketRecord:
    d = dict(zip(_MARKET_COLUMNS, row))
    tokens = d["tokens"]
    if isinstance(tokens, str):
        tokens = json.loads(tokens) if tokens else []
    return MarketRecord(
        id=d["market_id"],
        event_id=d["event_id"],
        question=d["question"] or "",
        slug=d["slug"],
        volume=d["volume"] or 0.0,
        volume_24h=d["volume_24h"] or 0.0,
        liquidity=d["liquidity"] or 0.0,
        outcome_prob=d["outcome_prob"] or 0.0,
        end_date=d["end_date"],
        tokens=list(tokens or []),
        category_id=d["category_id"] or "other",
    )


def load_catalog(conn: DuckDBPyConnection) -> list[EventRecord]:
    """Load the stored snapshot in its original event/market order."""
    market_rows = conn.execute(
        f"SELECT {', '.join(_MARKET_COLUMNS)} FROM markets ORDER BY event_id, position"
    ).fetchall()
    by_event: dict[str, list[MarketRecord]] = {}
    for row in market_rows:
        market = _market_from_row(row)
        by_event.setdefault(market.event_id or "", []).append(market)
    event_rows = conn.execute(
        "SELECT event_id, title, slug, end_date, category_id, volume FROM events ORDER BY position"
    ).fetchall()
    return [
        EventRecord(
            id=event_id,
            title=title or "",
            slug=slug,
            end_date=end_date,
            category_id=category_id or "other",
            volume=volume or 0.0,
            markets=by_event.get(event_id, []),
        )
        for event_id, title, slug, end_date, category_id, volume in event_rows
    ]


def list_markets(conn: DuckDBPyConnection, query: str | None = None) -> list[dict]:
    """Markets as dicts, highest volume first, optionally filtered by question substring."""
    sql = """
        SELECT m.market_id, m.event_id, e.title, m.question, m.volume, m.volume_24h, m.outcome_prob, m.end_date
        FROM markets m LEFT JOIN events e ON m.event_id = e.event_id
    """
    params: list = []
    if query:
        sql += " WHERE m.question ILIKE ?"
        params.append(f"%{query}%")
    sql += " ORDER BY m.volume DESC, m.market_id"
    rows = conn.execute(sql, params).fetchall()
    columns = ["market_id", "event_id", "event_title", "question", "volume", "volume_24h", "outcome_prob", "end_date"]
    return [dict(zip(columns, r)) for r in rows]


def last_synced_at(conn: DuckDBPyConnection) -> int | None:
    row = conn.execute("SELECT MAX(synced_at) FROM events").fetchone()
    return row[0] if row else None
