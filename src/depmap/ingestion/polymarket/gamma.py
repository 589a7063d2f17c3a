"""Polymarket Gamma API client - event catalog discovery."""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from depmap.models import EventRecord, MarketRecord

log = structlog.get_logger(__name__)

GAMMA_API_BASE = "https://gamma-api.polymarket.com"


def _json_list(value: str | list[Any] | None) -> list[Any]:
    """Gamma encodes list fields as JSON strings; accept both forms."""
    if isinstance(value, list):
        return value
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return []
    return parsed if isinstance(parsed, list) else []


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def category_slug(value: str | None) -> str:
    """'US Politics' -> 'us-politics'; empty -> 'other'."""
    text = (value or "").strip().lower()
    return "-".join(text.split()) or "other"


def parse_market(
    raw: dict[str, Any],
    event_id: str | None = None,
    category_id: str = "other",
) -> MarketRecord | None:
    """Convert a Gamma market object to MarketRecord. None for non-binary markets."""
    outcomes = _json_list(raw.get("outcomes"))
    if len(outcomes) != 2:
        return None
    prices = _json_list(raw.get("outcomePrices"))
    yes_prob = _to_float(prices[0]) if prices else 0.0
    market_id = str(raw.get("id") or "").strip()
    if not market_id:
        return None
    return MarketRecord(
        id=market_id,
        event_id=event_id,
        question=raw.get("question") or "",
        slug=raw.get("slug"),
        volume=_to_float(raw.get("volume") or raw.get("volumeNum")),
        volume_24h=_to_float(raw.get("volume24hr")),
        liquidity=_to_float(raw.get("liquidity") or raw.get("liquidityNum")),
        outcome_prob=min(1.0, max(0.0, yes_prob)),
        end_date=raw.get("endDate") or None,
        tokens=[str(t) for t in _json_list(raw.get("clobTokenIds")) if t],
        category_id=category_id,
    )


def parse_event(raw: dict[str, Any]) -> EventRecord | None:
    """Convert a Gamma event (with embedded markets) to EventRecord.

    Only binary markets with positive volume are kept; an event without any is
    dropped.
    """
    event_id = str(raw.get("id") or "").strip()
    if not event_id:
        return None
    category_id = category_slug(raw.get("category"))
    markets: list[MarketRecord] = []
    for row in raw.get("markets") or []:
        if not isinstance(row, dict):
            continue
        try:
            market = parse_market(row, event_id=event_id, category_id=category_id)
        except ValueError as e:
            log.warning("skip_market", market_id=row.get("id"), error=str(e))
            continue
        if market is not None and market.volume > 0:
            markets.append(market)
    if not markets:
        return None
    return EventRecord(
        id=event_id,
        title=raw.get("title") or "",
        slug=raw.get("slug"),
        end_date=raw.get("endDate") or None,
        category_id=category_id,
        volume=_to_float(raw.get("volume")),
        markets=markets,
    )


def fetch_events(
    base_url: str | None = None,
    limit: int = 200,
    timeout: float = 30.0,
) -> list[EventRecord]:
    """Fetch active events (highest volume first) and return the parsed catalog."""
    base = (base_url or GAMMA_API_BASE).rstrip("/")
    url = base if base.endswith("/events") else base + "/events"
    params = {
        "active": "true",
        "closed": "false",
        "order": "volume",
        "ascending": "false",
        "limit": limit,
    }
    with httpx.Client(timeout=timeout) as client:
        resp = client.get(url, params=params)
        resp.raise_for_status()
        data = resp.json()
    if not isinstance(data, list):
        data = data.get("data", []) if isinstance(data, dict) else []
    events: list[EventRecord] = []
    for row in data:
        if not isinstance(row, dict):
            continue
        try:
            event = parse_event(row)
        except ValueError as e:
            log.warning("skip_event", event_id=row.get("id"), error=str(e))
            continue
        if event is not None:
            events.append(event)
    log.info("events_fetched", raw=len(data), kept=len(events))
    return events


class GammaCatalogSource:
    """CatalogSource backed by the Gamma REST API."""

    def __init__(self, base_url: str = GAMMA_API_BASE, timeout: float = 30.0) -> None:
        self.base_url = base_url
        self.timeout = timeout

    def fetch_events(self, limit: int = 200, **kwargs: Any) -> list[EventRecord]:
        return fetch_events(self.base_url, limit=limit, timeout=kwargs.get("timeout", self.timeout))
