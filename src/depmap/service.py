"""Recompute-on-change driver: pick history keys, fetch, assemble."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import structlog

from depmap.catalog import Catalog
from depmap.config.settings import Settings
from depmap.graph import assemble_graph, compute_stats
from depmap.ingestion.base import HistoryProvider
from depmap.ingestion.polymarket.history import PriceHistoryClient
from depmap.ingestion.rate_limit import AsyncTokenBucket
from depmap.models import DependencyFilters, DependencyGraph, EventRecord, GraphStats, PriceSeries
from depmap.storage.history_cache import CachedHistoryProvider, HistoryCache

log = structlog.get_logger(__name__)


@dataclass
class GraphResult:
    graph: DependencyGraph | None
    stats: GraphStats
    histories_requested: int = 0
    histories_received: int = 0


class DependencyService:
    """Builds a fresh graph per request from a catalog and a history provider."""

    def __init__(
        self,
        events: Iterable[EventRecord] | Catalog,
        history_provider: HistoryProvider | None = None,
        cross_event_market_count: int = 20,
    ):
        self.catalog = events if isinstance(events, Catalog) else Catalog(events)
        self.history_provider = history_provider
        self.cross_event_market_count = cross_event_market_count

    def history_market_ids(self, center_id: str, filters: DependencyFilters) -> list[str]:
        """Center, its event siblings and, with cross-event on, the top markets by volume."""
        if center_id not in self.catalog:
            return []
        ids = [center_id]
        event = self.catalog.event_for(center_id)
        if event is not None:
            ids.extend(m.id for m in event.markets)
        if filters.show_cross_event:
            ids.extend(m.id for m in self.catalog.top_by_volume(self.cross_event_market_count))
        return list(dict.fromkeys(ids))

    async def fetch_histories(self, center_id: str, filters: DependencyFilters) -> tuple[dict[str, PriceSeries], int]:
        """Histories keyed by market id, plus the number of series requested."""
        if self.history_provider is None:
            return {}, 0
        key_to_market: dict[str, str] = {}
        for market_id in self.history_market_ids(center_id, filters):
            market = self.catalog.market(market_id)
            key = market.history_key if market is not None else None
            if key and key not in key_to_market:
                key_to_market[key] = market_id
        if not key_to_market:
            return {}, 0
        by_key = await self.history_provider.fetch_histories(list(key_to_market), filters.time_window)
        histories = {key_to_market[k]: series for k, series in by_key.items() if k in key_to_market}
        return histories, len(key_to_market)

    async def build(self, center_id: str, filters: DependencyFilters | None = None) -> GraphResult:
        filters = filters or DependencyFilters()
        histories, requested = await self.fetch_histories(center_id, filters)
        graph = assemble_graph(center_id, self.catalog, histories, filters)
        stats = compute_stats(graph)
        log.debug(
            "graph_built",
            center=center_id,
            found=graph is not None,
            nodes=stats.total_nodes,
            edges=stats.total_edges,
            histories=f"{len(histories)}/{requested}",
        )
        return GraphResult(graph, stats, requested, len(histories))


def filters_from_settings(settings: Settings, **overrides: object) -> DependencyFilters:
    """DependencyFilters from the [graph] config section; non-None overrides win."""
    values = settings.graph_defaults
    values.update({k: v for k, v in overrides.items() if v is not None})
    return DependencyFilters(**values)


def build_history_provider(settings: Settings, conn=None) -> HistoryProvider:
    """CLOB client per settings, read through the DuckDB cache when conn is given."""
    client = PriceHistoryClient(
        base_url=settings.clob_api_base,
        timeout=settings.request_timeout_sec,
        batch_size=settings.history_batch_size,
        max_retries=settings.history_max_retries,
        limiter=AsyncTokenBucket(rate=settings.history_rate_per_sec),
    )
    if conn is None:
        return client
    return CachedHistoryProvider(client, HistoryCache(conn, ttl_sec=settings.history_cache_ttl_sec))
