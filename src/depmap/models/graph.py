"""DependencyEdge, DependencyNode, DependencyGraph, filters and stats."""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DependencyType = Literal["structural", "correlation", "entity", "temporal"]
DependencyTypeFilter = Literal["all", "structural", "correlation", "entity", "temporal"]
TimeWindow = Literal["1h", "24h", "7d"]
Precedence = Literal["before", "after", "same"]
EntityType = Literal["person", "company", "crypto", "country", "organization"]

DEPENDENCY_TYPES: tuple[str, ...] = ("structural", "correlation", "entity", "temporal")


def pair_key(a: str, b: str) -> str:
    """Unordered market pair key: min(id)-max(id)."""
    return f"{min(a, b)}-{max(a, b)}"


def edge_id(edge_type: str, a: str, b: str) -> str:
    return f"{edge_type}:{pair_key(a, b)}"


class ExtractedEntity(BaseModel):
    """Named entity found in market or event text."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: EntityType
    normalized: str  # lowercase key used for matching


class DependencyEdge(BaseModel):
    """Relationship between the center market and another market."""

    model_config = ConfigDict(frozen=True)

    id: str
    source_id: str
    target_id: str
    type: DependencyType
    weight: float
    explanation: str = ""
    # correlation
    correlation: float | None = None
    time_window: TimeWindow | None = None
    # structural
    shared_event_id: str | None = None
    shared_event_title: str | None = None
    # entity
    shared_entities: list[str] | None = None
    # temporal
    days_diff: float | None = None
    precedence: Precedence | None = None

    @field_validator("weight", mode="before")
    @classmethod
    def _clamp_weight(cls, v: float) -> float:
        v = float(v)
        if not math.isfinite(v):
            return 0.0
        return min(1.0, max(0.0, v))

    @property
    def pair(self) -> str:
        return pair_key(self.source_id, self.target_id)


class DependencyNode(BaseModel):
    """Graph view of a MarketRecord plus computed volatility."""

    id: str
    market_id: str
    event_id: str = ""
    event_title: str = ""
    question: str = ""
    volume: float = 0.0
    volume_24h: float = 0.0
    outcome_prob: float = 0.0
    category_id: str = "other"
    category_name: str = "Other"
    slug: str | None = None
    volatility: float = Field(0.0, ge=0, le=1)


class DependencyGraph(BaseModel):
    nodes: list[DependencyNode] = Field(default_factory=list)
    edges: list[DependencyEdge] = Field(default_factory=list)
    center_node_id: str


class GraphStats(BaseModel):
    """Counts for UI display."""

    total_nodes: int = 0
    total_edges: int = 0
    by_type: dict[str, int] = Field(default_factory=lambda: {t: 0 for t in DEPENDENCY_TYPES})

    @property
    def structural_edges(self) -> int:
        return self.by_type.get("structural", 0)

    @property
    def correlation_edges(self) -> int:
        return self.by_type.get("correlation", 0)

    @property
    def entity_edges(self) -> int:
        return self.by_type.get("entity", 0)

    @property
    def temporal_edges(self) -> int:
        return self.by_type.get("temporal", 0)


class DependencyFilters(BaseModel):
    """User-selected filters for one graph build."""

    correlation_threshold: float = Field(0.3, ge=0, le=1)
    time_window: TimeWindow = "24h"
    dependency_type: DependencyTypeFilter = "all"
    show_cross_event: bool = True
    max_edges: int = Field(30, ge=0)
    min_shared_entities: int = Field(1, ge=1)
    max_days_diff: float = Field(7.0, gt=0)

    def enabled(self, edge_type: str) -> bool:
        return self.dependency_type == "all" or self.dependency_type == edge_type
