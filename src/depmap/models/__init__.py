"""Canonical schema (Pydantic) - catalog records and dependency graph."""

from depmap.models.graph import (
    DEPENDENCY_TYPES,
    DependencyEdge,
    DependencyFilters,
    DependencyGraph,
    DependencyNode,
    ExtractedEntity,
    GraphStats,
    edge_id,
    pair_key,
)
from depmap.models.market import EventRecord, MarketRecord, PricePoint, PriceSeries

__all__ = [
    "MarketRecord",
    "EventRecord",
    "PricePoint",
    "PriceSeries",
    "ExtractedEntity",
    "DependencyEdge",
    "DependencyNode",
    "DependencyGraph",
    "DependencyFilters",
    "GraphStats",
    "DEPENDENCY_TYPES",
    "edge_id",
    "pair_key",
]
