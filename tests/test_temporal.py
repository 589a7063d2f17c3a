"""Resolution-date proximity, leading indicators and date clusters."""

from datetime import date, timedelta, timezone

import pytest

from depmap.analysis.temporal import (
    cluster_by_resolution_date,
    compute_temporal_proximity,
    find_leading_indicators,
    find_temporal_dependencies,
    format_temporal_explanation,
    parse_iso_date,
    round_half_up,
    temporal_weight,
)
from depmap.catalog import Catalog
from depmap.models import EventRecord, MarketRecord


def test_parse_iso_date_variants():
    assert parse_iso_date("2025-03-19").tzinfo == timezone.utc
    assert parse_iso_date("2025-03-19T12:00:00Z").hour == 12
    assert parse_iso_date("2025-03-19T12:00:00+02:00").utcoffset().total_seconds() == 7200
    assert parse_iso_date("not a date") is None
    assert parse_iso_date(None) is None
    assert parse_iso_date("") is None


def test_same_date():
    p = compute_temporal_proximity("2025-03-19T00:00:00Z", "2025-03-19T00:00:00Z")
    assert p.days_diff == 0
    assert p.precedence == "same"
    assert temporal_weight(p.days_diff, 7) == 1.0
    assert format_temporal_explanation(p) == "Resolves on same day"


def test_within_a_day_is_same():
    p = compute_temporal_proximity("2025-03-19T00:00:00Z", "2025-03-19T12:00:00Z")
    assert p.days_diff == pytest.approx(0.5)
    assert p.precedence == "same"


def test_precedence_is_relative_to_first_date():
    earlier = compute_temporal_proximity("2025-03-19", "2025-03-16")
    assert earlier.precedence == "before"
    assert earlier.days_diff == pytest.approx(3)
    assert format_temporal_explanation(earlier) == "Resolves 3 days earlier"
    later = compute_temporal_proximity("2025-03-19", "2025-03-20")
    assert later.precedence == "after"
    assert format_temporal_explanation(later) == "Resolves 1 day later"


def test_week_explanations():
    assert format_temporal_explanation(compute_temporal_proximity("2025-03-01", "2025-03-09")) == (
        "Resolves ~1 week later"
    )
    assert format_temporal_explanation(compute_temporal_proximity("2025-03-15", "2025-03-01")) == (
        "Resolves ~2 weeks earlier"
    )


def test_missing_or_invalid_dates():
    assert compute_temporal_proximity(None, "2025-03-19") is None
    assert compute_temporal_proximity("2025-03-19", "soon") is None


def test_linear_weight():
    assert temporal_weight(0, 7) == 1.0
    assert temporal_weight(3.5, 7) == pytest.approx(0.5)
    assert temporal_weight(7, 7) == 0.0
    assert temporal_weight(7.5, 7) is None
    assert temporal_weight(0, 0) == 1.0
    assert temporal_weight(1, 0) is None


def _catalog(*dates):
    markets = [MarketRecord(id=f"m{i}", question=f"Q{i}", end_date=d) for i, d in enumerate(dates)]
    return Catalog([EventRecord(id="e", title="E", markets=markets)])


def test_temporal_dependencies_sorted_by_weight():
    catalog = _catalog("2025-04-01", "2025-04-05", "2025-04-02", "2025-05-01", None)
    edges = find_temporal_dependencies("m0", "2025-04-01", catalog, max_days_diff=7)
    assert [e.target_id for e in edges] == ["m2", "m1"]
    assert edges[0].weight == pytest.approx(1 - 1 / 7)
    assert edges[0].precedence == "after"
    assert edges[0].id == "temporal:m0-m2"
    assert find_temporal_dependencies("m0", None, catalog, max_days_diff=7) == []


def test_market_falls_back_to_event_end_date():
    catalog = Catalog(
        [
            EventRecord(id="a", title="A", end_date="2025-04-01", markets=[MarketRecord(id="x")]),
            EventRecord(id="b", title="B", end_date="2025-04-03", markets=[MarketRecord(id="y")]),
        ]
    )
    (edge,) = find_temporal_dependencies("x", "2025-04-01", catalog, max_days_diff=7)
    assert edge.target_id == "y"
    assert edge.days_diff == pytest.approx(2)


def test_leading_indicators():
    catalog = _catalog("2025-04-01", "2025-03-25", "2025-03-31", "2025-04-10", "2025-02-01")
    edges = find_leading_indicators("m0", "2025-04-01", catalog, min_days_before=1, max_days_before=30)
    assert [e.target_id for e in edges] == ["m2", "m1"]
    assert edges[0].weight == pytest.approx(1.0)
    assert edges[1].weight == pytest.approx(1 - 6 / 29)
    assert edges[1].explanation == "Potential leading indicator - resolves 7 days earlier"
    assert all(e.precedence == "before" for e in edges)
    assert find_leading_indicators("m0", "2025-04-01", catalog, min_days_before=5, max_days_before=5) == []


def test_cluster_by_resolution_date():
    events = [
        EventRecord(
            id="e",
            title="E",
            markets=[
                MarketRecord(id="a", end_date="2025-03-19T01:00:00Z"),
                MarketRecord(id="b", end_date="2025-03-19T23:00:00Z"),
                MarketRecord(id="c", end_date="2025-03-20T10:00:00Z"),
                MarketRecord(id="d"),
            ],
        )
    ]
    clusters = cluster_by_resolution_date(events)
    assert list(clusters) == ["2025-03-19", "2025-03-20"]
    assert [m.id for m in clusters["2025-03-19"].markets] == ["a", "b"]
    wide = cluster_by_resolution_date(events, tolerance_days=30)
    assert sum(len(c.markets) for c in wide.values()) == 3


def test_half_days_round_up():
    p = compute_temporal_proximity("2025-03-19T00:00:00Z", "2025-03-21T12:00:00Z")
    assert p.days_diff == pytest.approx(2.5)
    assert format_temporal_explanation(p) == "Resolves 3 days later"
    assert round_half_up(0.5) == 1
    assert round_half_up(1.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_leading_indicator_half_day_rounds_up():
    catalog = _catalog("2025-04-01T00:00:00Z", "2025-03-29T12:00:00Z")
    (edge,) = find_leading_indicators("m0", "2025-04-01T00:00:00Z", catalog, min_days_before=1, max_days_before=30)
    assert edge.explanation == "Potential leading indicator - resolves 3 days earlier"


def test_cluster_buckets_form_regular_grid():
    # epoch days 20000..20005 (2024-10-04 .. 2024-10-09)
    first = date(1970, 1, 1) + timedelta(days=20000)
    markets = [
        MarketRecord(id=f"d{i}", end_date=(first + timedelta(days=i)).isoformat() + "T06:00:00Z") for i in range(6)
    ]
    clusters = cluster_by_resolution_date([EventRecord(id="e", title="E", markets=markets)], tolerance_days=2)
    expected_keys = [(date(1970, 1, 1) + timedelta(days=d)).isoformat() for d in (20000, 20002, 20004, 20006)]
    assert list(clusters) == expected_keys
    assert [[m.id for m in c.markets] for c in clusters.values()] == [["d0"], ["d1", "d2"], ["d3", "d4"], ["d5"]]
