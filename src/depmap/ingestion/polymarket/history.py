"""Polymarket CLOB price-history client (async, batched)."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import httpx
import structlog

from depmap.ingestion.batching import DEFAULT_BATCH_SIZE, gather_in_batches
from depmap.ingestion.rate_limit import AsyncTokenBucket, backoff_on_429
from depmap.models import PricePoint, PriceSeries
from depmap.models.graph import TimeWindow

log = structlog.get_logger(__name__)

CLOB_API_BASE = "https://clob.polymarket.com"

# time window -> (CLOB interval, fidelity in minutes)
TIME_WINDOW_PARAMS: dict[str, tuple[str, int]] = {
    "1h": ("1h", 1),
    "24h": ("1d", 5),
    "7d": ("1w", 60),
}


def parse_history(payload: Any) -> PriceSeries:
    """Parse {"history": [{"t": ts, "p": price}, ...]}; malformed points are dropped."""
    rows = payload.get("history") if isinstance(payload, dict) else payload
    if not isinstance(rows, list):
        return []
    series: PriceSeries = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            ts = int(row["t"])
            price = float(row["p"])
        except (KeyError, TypeError, ValueError):
            continue
        if not 0 <= price <= 1:
            continue
        series.append(PricePoint(timestamp=ts, price=price))
    return series


class PriceHistoryClient:
    """HistoryProvider backed by CLOB /prices-history, keyed by token id."""

    def __init__(
        self,
        base_url: str = CLOB_API_BASE,
        timeout: float = 10.0,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_retries: int = 3,
        backoff_base_sec: float = 1.0,
        limiter: AsyncTokenBucket | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.backoff_base_sec = backoff_base_sec
        self.limiter = limiter
        self._transport = transport

    async def fetch_series(
        self,
        client: httpx.AsyncClient,
        token_id: str,
        time_window: TimeWindow,
    ) -> PriceSeries:
        interval, fidelity = TIME_WINDOW_PARAMS[time_window]
        params = {"market": token_id, "interval": interval, "fidelity": fidelity}
        attempt = 0
        while True:
            if self.limiter is not None:
                await self.limiter.acquire()
            resp = await client.get(f"{self.base_url}/prices-history", params=params)
            if resp.status_code == 429 and attempt < self.max_retries:
                delay = backoff_on_429(attempt, base_delay=self.backoff_base_sec)
                log.info("history_rate_limited", token_id=token_id, retry_in=delay)
                await asyncio.sleep(delay)
                attempt += 1
                continue
            resp.raise_for_status()
            return parse_history(resp.json())

    async def fetch_histories(
        self,
        keys: Iterable[str],
        time_window: TimeWindow,
    ) -> dict[str, PriceSeries]:
        """Fetch series for all keys in fixed-size batches. Failed keys are absent."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await gather_in_batches(
                keys,
                lambda key: self.fetch_series(client, key, time_window),
                batch_size=self.batch_size,
            )
