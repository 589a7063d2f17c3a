"""Gamma catalog parsing and fetch."""

import httpx

from depmap.ingestion.polymarket import gamma
from depmap.ingestion.polymarket.gamma import category_slug, fetch_events, parse_event, parse_market


def _raw_market(market_id="101", volume="1500.5", outcomes='["Yes", "No"]'):
    return {
        "id": market_id,
        "question": "Will the Fed cut rates in March?",
        "slug": "fed-cut-march",
        "outcomes": outcomes,
        "outcomePrices": '["0.65", "0.35"]',
        "clobTokenIds": '["tok-yes", "tok-no"]',
        "volume": volume,
        "volume24hr": 20,
        "liquidity": "300",
        "endDate": "2025-03-19T12:00:00Z",
    }


def _raw_event(*markets):
    return {
        "id": "9",
        "title": "Fed decision in March",
        "slug": "fed-march",
        "category": "US Politics",
        "endDate": "2025-03-19T12:00:00Z",
        "volume": 5000,
        "markets": list(markets),
    }


def test_parse_market_binary():
    m = parse_market(_raw_market(), event_id="9", category_id="economy")
    assert m.id == "101"
    assert m.event_id == "9"
    assert m.outcome_prob == 0.65
    assert m.tokens == ["tok-yes", "tok-no"]
    assert m.history_key == "tok-yes"
    assert m.volume == 1500.5
    assert m.volume_24h == 20
    assert m.liquidity == 300
    assert m.category_id == "economy"


def test_parse_market_accepts_decoded_lists():
    raw = _raw_market()
    raw["outcomes"] = ["Yes", "No"]
    raw["clobTokenIds"] = ["a", "b"]
    assert parse_market(raw).tokens == ["a", "b"]


def test_parse_market_rejects_non_binary_and_missing_id():
    assert parse_market(_raw_market(outcomes='["A", "B", "C"]')) is None
    assert parse_market(_raw_market(market_id="")) is None
    assert parse_market(_raw_market(outcomes="not json")) is None


def test_parse_event_keeps_traded_binary_markets():
    event = parse_event(
        _raw_event(_raw_market("1"), _raw_market("2", volume="0"), _raw_market("3", outcomes='["A","B","C"]'))
    )
    assert [m.id for m in event.markets] == ["1"]
    assert event.category_id == "us-politics"
    assert event.markets[0].category_id == "us-politics"
    assert event.markets[0].event_id == "9"


def test_parse_event_without_usable_markets():
    assert parse_event(_raw_event(_raw_market("2", volume="0"))) is None
    assert parse_event({"title": "no id"}) is None


def test_category_slug():
    assert category_slug("US Politics") == "us-politics"
    assert category_slug(None) == "other"
    assert category_slug("  ") == "other"


def test_fetch_events(monkeypatch):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_raw_event(_raw_market("1")), {"id": "10", "markets": []}, "junk"])

    real_client = httpx.Client
    monkeypatch.setattr(
        gamma.httpx, "Client", lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs)
    )
    events = fetch_events("https://gamma.test", limit=5)
    assert [e.id for e in events] == ["9"]
    params = seen[0].url.params
    assert seen[0].url.path == "/events"
    assert params["limit"] == "5"
    assert params["order"] == "volume"
    assert params["closed"] == "false"
