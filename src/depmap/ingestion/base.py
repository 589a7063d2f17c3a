"""Provider protocols the service layer depends on."""

from __future__ import annotations

from typing import Any, Iterable, Protocol

from depmap.models import EventRecord, PriceSeries
from depmap.models.graph import TimeWindow


class CatalogSource(Protocol):
    """Supplies the fully materialized event/market catalog."""

    def fetch_events(self, limit: int = 200, **kwargs: Any) -> list[EventRecord]: ...


class HistoryProvider(Protocol):
    """Supplies price series per key. Failed or empty keys are absent from the result."""

    async def fetch_histories(
        self,
        keys: Iterable[str],
        time_window: TimeWindow,
    ) -> dict[str, PriceSeries]: ...
