"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from depmap.models import DependencyGraph, ExtractedEntity, GraphStats


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"
    markets: int = 0
    events: int = 0


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. not_found")


# --- Markets ---
class MarketListItem(BaseModel):
    market_id: str
    event_id: str | None = None
    event_title: str | None = None
    question: str | None = None
    volume: float | None = None
    volume_24h: float | None = None
    outcome_prob: float | None = None
    end_date: str | None = None


class MarketsListResponse(BaseModel):
    markets: list[MarketListItem]
    total: int


# --- Events ---
class EventListItem(BaseModel):
    event_id: str
    title: str
    category_id: str
    end_date: str | None = None
    market_count: int
    volume: float = 0.0


class EventsListResponse(BaseModel):
    events: list[EventListItem]
    total: int


# --- Graph ---
class GraphResponse(BaseModel):
    graph: DependencyGraph
    stats: GraphStats
    histories_requested: int = 0
    histories_received: int = 0


# --- Entities ---
class EntitiesResponse(BaseModel):
    market_id: str
    entities: list[ExtractedEntity]


# --- Resolution clusters ---
class ResolutionClusterItem(BaseModel):
    date_key: str
    market_ids: list[str]


class ResolutionClustersResponse(BaseModel):
    clusters: list[ResolutionClusterItem]
