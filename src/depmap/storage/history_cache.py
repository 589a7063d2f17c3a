"""TTL cache for price histories, and a HistoryProvider that reads through it."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Iterable

import structlog

from depmap.ingestion.base import HistoryProvider
from depmap.models import PricePoint, PriceSeries
from depmap.models.graph import TimeWindow

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

log = structlog.get_logger(__name__)


class HistoryCache:
    """price_history rows keyed by (token_id, time_window), fresh for ttl_sec."""

    def __init__(self, conn: DuckDBPyConnection, ttl_sec: int = 60) -> None:
        self.conn = conn
        self.ttl_sec = ttl_sec

    def get(self, token_id: str, time_window: str, now: float | None = None) -> PriceSeries | None:
        now_ms = int((now if now is not None else time.time()) * 1000)
        row = self.conn.execute(
            "SELECT fetched_at, points FROM price_history WHERE token_id = ? AND time_window = ?",
            [token_id, time_window],
        ).fetchone()
        if row is None:
            return None
        fetched_at, points = row
        if now_ms - fetched_at > self.ttl_sec * 1000:
            return None
        raw = json.loads(points) if isinstance(points, str) else points
        return [PricePoint(timestamp=t, price=p) for t, p in raw]

    def put(self, token_id: str, time_window: str, series: PriceSeries, now: float | None = None) -> None:
        now_ms = int((now if now is not None else time.time()) * 1000)
        points = json.dumps([[p.timestamp, p.price] for p in series])
        self.conn.execute(
            """
            INSERT INTO price_history (token_id, time_window, fetched_at, points) VALUES (?, ?, ?, ?)
            ON CONFLICT (token_id, time_window) DO UPDATE SET
                fetched_at = excluded.fetched_at,
                points = excluded.points
            """,
            [token_id, time_window, now_ms, points],
        )

    def purge_expired(self, now: float | None = None) -> int:
        now_ms = int((now if now is not None else time.time()) * 1000)
        cutoff = now_ms - self.ttl_sec * 1000
        count = self.conn.execute(
            "SELECT COUNT(*) FROM price_history WHERE fetched_at < ?", [cutoff]
        ).fetchone()[0]
        self.conn.execute("DELETE FROM price_history WHERE fetched_at < ?", [cutoff])
        return int(count)


class CachedHistoryProvider:
    """Serves fresh cached series and fetches only the missing keys from the inner provider."""

    def __init__(self, inner: HistoryProvider, cache: HistoryCache) -> None:
        self.inner = inner
        self.cache = cache

    async def fetch_histories(
        self,
        keys: Iterable[str],
        time_window: TimeWindow,
    ) -> dict[str, PriceSeries]:
        result: dict[str, PriceSeries] = {}
        missing: list[str] = []
        for key in dict.fromkeys(keys):
            cached = self.cache.get(key, time_window)
            if cached:
                result[key] = cached
            else:
                missing.append(key)
        hits = len(result)
        if missing:
            fetched = await self.inner.fetch_histories(missing, time_window)
            for key, series in fetched.items():
                self.cache.put(key, time_window, series)
                result[key] = series
        log.debug("history_cache", hits=hits, misses=len(missing))
        return result
