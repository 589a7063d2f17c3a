"""Resolution-date proximity between markets."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

from depmap.catalog import Catalog
from depmap.models import DependencyEdge, EventRecord, MarketRecord, edge_id
from depmap.models.graph import Precedence

DAY = timedelta(days=1)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class TemporalProximity:
    days_diff: float  # absolute, fractional days
    precedence: Precedence  # of the other market relative to the reference


def parse_iso_date(value: str | None) -> datetime | None:
    """Parse an ISO date or datetime. Naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compute_temporal_proximity(
    end_date_a: str | None,
    end_date_b: str | None,
) -> TemporalProximity | None:
    """Distance of B's resolution from A's. None if either date is missing or invalid."""
    a = parse_iso_date(end_date_a)
    b = parse_iso_date(end_date_b)
    if a is None or b is None:
        return None
    diff = b - a
    days_diff = abs(diff / DAY)
    if abs(diff) < DAY:
        precedence: Precedence = "same"
    elif diff < timedelta(0):
        precedence = "before"
    else:
        precedence = "after"
    return TemporalProximity(days_diff, precedence)


def temporal_weight(days_diff: float, max_days_diff: float) -> float | None:
    """Linear decay from 1 at 0 days to 0 at max_days_diff; None beyond it."""
    if max_days_diff <= 0:
        return 1.0 if days_diff == 0 else None
    if days_diff > max_days_diff:
        return None
    return 1.0 - days_diff / max_days_diff


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (2.5 -> 3), unlike round()."""
    return math.floor(value + 0.5)


def format_temporal_explanation(proximity: TemporalProximity) -> str:
    days = round_half_up(proximity.days_diff)
    if days == 0 or proximity.precedence == "same":
        return "Resolves on same day"
    side = "earlier" if proximity.precedence == "before" else "later"
    if days == 1:
        return f"Resolves 1 day {side}"
    if days <= 7:
        return f"Resolves {days} days {side}"
    weeks = round_half_up(days / 7)
    if weeks == 1:
        return f"Resolves ~1 week {side}"
    return f"Resolves ~{weeks} weeks {side}"


def market_end_date(market: MarketRecord, event: EventRecord | None) -> str | None:
    """Market's own end date, falling back to its event's."""
    if market.end_date:
        return market.end_date
    return event.end_date if event is not None else None


def find_temporal_dependencies(
    center_id: str,
    center_end_date: str | None,
    catalog: Catalog,
    max_days_diff: float,
) -> list[DependencyEdge]:
    """Markets resolving within max_days_diff of the center, closest first."""
    if not center_end_date:
        return []
    edges: list[DependencyEdge] = []
    for market in catalog.all_markets():
        if market.id == center_id:
            continue
        proximity = compute_temporal_proximity(
            center_end_date, market_end_date(market, catalog.event_for(market.id))
        )
        if proximity is None:
            continue
        weight = temporal_weight(proximity.days_diff, max_days_diff)
        if weight is None:
            continue
        edges.append(
            DependencyEdge(
                id=edge_id("temporal", center_id, market.id),
                source_id=center_id,
                target_id=market.id,
                type="temporal",
                weight=weight,
                days_diff=proximity.days_diff,
                precedence=proximity.precedence,
                explanation=format_temporal_explanation(proximity),
            )
        )
    edges.sort(key=lambda e: -e.weight)
    return edges


def find_leading_indicators(
    center_id: str,
    center_end_date: str | None,
    catalog: Catalog,
    min_days_before: float,
    max_days_before: float,
) -> list[DependencyEdge]:
    """Markets resolving before the center within [min_days_before, max_days_before]."""
    if not center_end_date or max_days_before <= min_days_before:
        return []
    span = max_days_before - min_days_before
    edges: list[DependencyEdge] = []
    for market in catalog.all_markets():
        if market.id == center_id:
            continue
        proximity = compute_temporal_proximity(
            center_end_date, market_end_date(market, catalog.event_for(market.id))
        )
        if proximity is None or proximity.precedence != "before":
            continue
        if not min_days_before <= proximity.days_diff <= max_days_before:
            continue
        edges.append(
            DependencyEdge(
                id=edge_id("temporal", center_id, market.id),
                source_id=center_id,
                target_id=market.id,
                type="temporal",
                weight=1.0 - (proximity.days_diff - min_days_before) / span,
                days_diff=proximity.days_diff,
                precedence="before",
                explanation=(
                    f"Potential leading indicator - resolves {round_half_up(proximity.days_diff)} days earlier"
                ),
            )
        )
    edges.sort(key=lambda e: -e.weight)
    return edges


@dataclass
class ResolutionCluster:
    date_key: str  # YYYY-MM-DD
    markets: list[MarketRecord] = field(default_factory=list)


def cluster_by_resolution_date(
    events: Iterable[EventRecord],
    tolerance_days: int = 1,
) -> dict[str, ResolutionCluster]:
    """Group markets whose resolution dates round to the same epoch-day bucket."""
    tolerance_days = max(1, tolerance_days)
    clusters: dict[str, ResolutionCluster] = {}
    for event in events:
        for market in event.markets:
            end = parse_iso_date(market_end_date(market, event))
            if end is None:
                continue
            days_since_epoch = (end - _EPOCH) // DAY
            rounded = round_half_up(days_since_epoch / tolerance_days) * tolerance_days
            key = (date(1970, 1, 1) + timedelta(days=rounded)).isoformat()
            clusters.setdefault(key, ResolutionCluster(key)).markets.append(market)
    return dict(sorted(clusters.items()))
