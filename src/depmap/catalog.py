"""In-memory catalog view over events and their markets."""

from __future__ import annotations

from typing import Iterable

from depmap.models import EventRecord, MarketRecord


class Catalog:
    """Id lookups over a fully materialized list of events.

    Markets are re-stamped with the id of the event that contains them, so
    ``market.event_id`` is always the containing event. A market listed under
    more than one event keeps the first one.
    """

    def __init__(self, events: Iterable[EventRecord]) -> None:
        self.events: list[EventRecord] = list(events)
        self._markets: dict[str, MarketRecord] = {}
        self._event_of_market: dict[str, EventRecord] = {}
        for event in self.events:
            for market in event.markets:
                if market.id in self._markets:
                    continue
                if market.event_id != event.id:
                    market = market.model_copy(update={"event_id": event.id})
                self._markets[market.id] = market
                self._event_of_market[market.id] = event

    def __len__(self) -> int:
        return len(self._markets)

    def __contains__(self, market_id: object) -> bool:
        return market_id in self._markets

    def market(self, market_id: str) -> MarketRecord | None:
        return self._markets.get(market_id)

    def event_for(self, market_id: str) -> EventRecord | None:
        """Event containing the market, if any."""
        return self._event_of_market.get(market_id)

    def all_markets(self) -> list[MarketRecord]:
        return list(self._markets.values())

    def top_by_volume(self, n: int) -> list[MarketRecord]:
        markets = sorted(self._markets.values(), key=lambda m: (-m.volume, m.id))
        return markets[: max(0, n)]
