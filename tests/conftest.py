"""Shared fixtures: a small three-event catalog and a throwaway DuckDB file."""

import tempfile
from pathlib import Path

import pytest

from depmap.models import EventRecord, MarketRecord, PricePoint
from depmap.storage.db import get_connection, init_schema

FED_DATE = "2025-03-19T12:00:00Z"


@pytest.fixture
def sample_events():
    """Fed event (m1-m3), a Bitcoin event two days later (m4), a Trump event months later (m5)."""
    fed = EventRecord(
        id="e1",
        title="Fed decision in March",
        end_date=FED_DATE,
        category_id="economy",
        volume=1800,
        markets=[
            MarketRecord(id="m1", question="Will the Fed cut rates in March?", volume=1000,
                         end_date=FED_DATE, tokens=["t1", "t1-no"], outcome_prob=0.3),
            MarketRecord(id="m2", question="Will the Fed hike rates in March?", volume=500, tokens=["t2"]),
            MarketRecord(id="m3", question="Will the Fed hold rates in March?", volume=300, tokens=["t3"]),
        ],
    )
    btc = EventRecord(
        id="e2",
        title="Bitcoin price end of March",
        end_date="2025-03-21T12:00:00Z",
        category_id="crypto",
        volume=800,
        markets=[
            MarketRecord(id="m4", question="Will Bitcoin reach 100k by March 21?", volume=800, tokens=["t4"]),
        ],
    )
    trump = EventRecord(
        id="e3",
        title="Trump tariffs",
        end_date="2025-06-30T00:00:00Z",
        category_id="politics",
        volume=200,
        markets=[
            MarketRecord(id="m5", question="Will Trump announce a new Fed chair?", volume=200, tokens=["t5"]),
        ],
    )
    return [fed, btc, trump]


@pytest.fixture
def wavy_prices():
    return [0.50, 0.52, 0.49, 0.55, 0.53, 0.60, 0.58]


@pytest.fixture
def make_series():
    def _make(prices, start=1_700_000_000, step=60):
        return [PricePoint(timestamp=start + i * step, price=p) for i, p in enumerate(prices)]

    return _make


@pytest.fixture
def temp_db():
    tmp = tempfile.mkdtemp()
    path = Path(tmp) / "test.duckdb"
    conn = get_connection(path)
    init_schema(conn)
    yield conn
    conn.close()
    path.unlink(missing_ok=True)
    Path(tmp).rmdir()
