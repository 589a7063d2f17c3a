"""Return correlation between price series: alignment, Pearson, confidence, volatility.

All functions are total over finite input: degenerate series (too few points,
zero variance, no time overlap) produce zero/empty results instead of raising.
"""

from __future__ import annotations

import math
from bisect import bisect_left
from dataclasses import dataclass
from typing import Mapping, Sequence

from depmap.models import DependencyEdge, PricePoint, edge_id
from depmap.models.graph import TimeWindow

MIN_POINTS = 5  # raw samples needed on each side before correlating
MIN_RETURNS = 3
MIN_CONFIDENCE = 0.3
CONFIDENCE_SATURATION = 50  # confidence reaches 1.0 at this many returns
VOLATILITY_SCALE = 0.1  # std of returns mapped to volatility 1.0


@dataclass(frozen=True)
class CorrelationResult:
    correlation: float  # [-1, 1]
    confidence: float  # [0, 1], sample-size based
    n: int  # number of returns (or aligned points when short-circuited)


@dataclass(frozen=True)
class CorrelationCandidate:
    target_id: str
    correlation: float
    confidence: float
    n: int


def _sorted(series: Sequence[PricePoint]) -> list[PricePoint]:
    return sorted(series, key=lambda p: p.timestamp)


def interpolate_at(timestamps: Sequence[int], prices: Sequence[float], ts: int) -> float:
    """Linear interpolation of a sorted series at ts, clamped to the end samples."""
    i = bisect_left(timestamps, ts)
    if i < len(timestamps) and timestamps[i] == ts:
        return prices[i]
    if i == 0:
        return prices[0]
    if i == len(timestamps):
        return prices[-1]
    t0, t1 = timestamps[i - 1], timestamps[i]
    p0, p1 = prices[i - 1], prices[i]
    ratio = (ts - t0) / (t1 - t0)
    return p0 + ratio * (p1 - p0)


def align_series(
    series_a: Sequence[PricePoint],
    series_b: Sequence[PricePoint],
) -> tuple[list[float], list[float]]:
    """Align B onto A's timestamps inside the overlapping time range."""
    if len(series_a) < 2 or len(series_b) < 2:
        return [], []
    sorted_a = _sorted(series_a)
    sorted_b = _sorted(series_b)
    start = max(sorted_a[0].timestamp, sorted_b[0].timestamp)
    end = min(sorted_a[-1].timestamp, sorted_b[-1].timestamp)
    if start >= end:
        return [], []
    b_ts = [p.timestamp for p in sorted_b]
    b_prices = [p.price for p in sorted_b]
    aligned_a: list[float] = []
    aligned_b: list[float] = []
    for point in sorted_a:
        if point.timestamp < start or point.timestamp > end:
            continue
        aligned_a.append(point.price)
        aligned_b.append(interpolate_at(b_ts, b_prices, point.timestamp))
    return aligned_a, aligned_b


def compute_returns(prices: Sequence[float]) -> list[float]:
    """Simple returns (p[i] - p[i-1]) / p[i-1]; 0 where the previous price is 0."""
    returns: list[float] = []
    for prev, cur in zip(prices, prices[1:]):
        returns.append((cur - prev) / prev if prev != 0 else 0.0)
    return returns


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    if len(x) != len(y) or len(x) < 2:
        return 0.0
    n = len(x)
    mean_x = sum(x) / n
    mean_y = sum(y) / n
    num = 0.0
    ss_x = 0.0
    ss_y = 0.0
    for xi, yi in zip(x, y):
        dx = xi - mean_x
        dy = yi - mean_y
        num += dx * dy
        ss_x += dx * dx
        ss_y += dy * dy
    denom = math.sqrt(ss_x * ss_y)
    if denom == 0 or not math.isfinite(denom):
        return 0.0
    r = num / denom
    return r if math.isfinite(r) else 0.0


def confidence_for(n: int) -> float:
    """Sample-size confidence: log10(n+1)/log10(51), capped at 1."""
    if n <= 0:
        return 0.0
    return min(1.0, math.log10(n + 1) / math.log10(CONFIDENCE_SATURATION + 1))


def compute_correlation(
    series_a: Sequence[PricePoint],
    series_b: Sequence[PricePoint],
) -> CorrelationResult:
    """Correlation of returns between two price series."""
    aligned_a, aligned_b = align_series(series_a, series_b)
    if len(aligned_a) < MIN_POINTS:
        return CorrelationResult(0.0, 0.0, len(aligned_a))
    returns_a = compute_returns(aligned_a)
    returns_b = compute_returns(aligned_b)
    n = len(returns_a)
    if n < MIN_RETURNS:
        return CorrelationResult(0.0, 0.0, n)
    r = pearson_correlation(returns_a, returns_b)
    return CorrelationResult(max(-1.0, min(1.0, r)), confidence_for(n), n)


def compute_volatility(series: Sequence[PricePoint]) -> float:
    """Std dev of returns scaled to [0, 1]. Node decoration only."""
    if len(series) < MIN_POINTS:
        return 0.0
    returns = compute_returns([p.price for p in _sorted(series)])
    if len(returns) < MIN_RETURNS:
        return 0.0
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    std = math.sqrt(variance)
    if not math.isfinite(std):
        return 0.0
    return min(1.0, std / VOLATILITY_SCALE)


def find_correlated_markets(
    center_id: str,
    histories: Mapping[str, Sequence[PricePoint]],
    threshold: float,
    max_results: int,
) -> list[CorrelationCandidate]:
    """Markets whose returns co-move with the center's, strongest first."""
    center_history = histories.get(center_id)
    if not center_history or len(center_history) < MIN_POINTS:
        return []
    found: list[CorrelationCandidate] = []
    for market_id, history in histories.items():
        if market_id == center_id or len(history) < MIN_POINTS:
            continue
        result = compute_correlation(center_history, history)
        if abs(result.correlation) >= threshold and result.confidence > MIN_CONFIDENCE:
            found.append(
                CorrelationCandidate(market_id, result.correlation, result.confidence, result.n)
            )
    found.sort(key=lambda c: (-abs(c.correlation), c.target_id))
    return found[: max(0, max_results)]


def build_correlation_edges(
    center_id: str,
    correlations: Sequence[CorrelationCandidate],
    time_window: TimeWindow,
) -> list[DependencyEdge]:
    edges = []
    for c in correlations:
        direction = "positive" if c.correlation > 0 else "negative"
        edges.append(
            DependencyEdge(
                id=edge_id("correlation", center_id, c.target_id),
                source_id=center_id,
                target_id=c.target_id,
                type="correlation",
                weight=abs(c.correlation),
                correlation=c.correlation,
                time_window=time_window,
                explanation=f"{c.correlation * 100:.0f}% {direction} correlation ({time_window}, n={c.n})",
            )
        )
    return edges
