"""FastAPI backend for the dependency map dashboard."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Iterator, Literal

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from depmap.analysis.temporal import cluster_by_resolution_date
from depmap.api.schemas import (
    EntitiesResponse,
    ErrorResponse,
    EventListItem,
    EventsListResponse,
    GraphResponse,
    HealthResponse,
    MarketListItem,
    MarketsListResponse,
    ResolutionClusterItem,
    ResolutionClustersResponse,
)
from depmap.config import Settings, configure_logging, get_settings
from depmap.entities.extractor import market_entities
from depmap.service import DependencyService, build_history_provider, filters_from_settings
from depmap.storage.catalog import load_catalog
from depmap.storage.db import get_connection, init_schema

# Set by run_api() so request handlers pick up the chosen profile.
_config_profile: str | None = None


def get_app_settings() -> Settings:
    return get_settings(_config_profile)


def get_service(settings: Settings = Depends(get_app_settings)) -> Iterator[DependencyService]:
    """Service over the stored catalog snapshot, with the history cache on the same connection."""
    conn = get_connection(settings.db_path)
    try:
        init_schema(conn)
        yield DependencyService(
            load_catalog(conn),
            build_history_provider(settings, conn),
            cross_event_market_count=settings.cross_event_history_count,
        )
    finally:
        conn.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure schema exists before the first request
    settings = get_app_settings()
    configure_logging(settings)
    conn = get_connection(settings.db_path, read_only=False)
    try:
        init_schema(conn)
    finally:
        conn.close()
    yield


app = FastAPI(title="depmap API", version="0.1.0", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


@app.get("/health", response_model=HealthResponse)
def health(service: DependencyService = Depends(get_service)) -> HealthResponse:
    return HealthResponse(status="ok", markets=len(service.catalog), events=len(service.catalog.events))


@app.get("/markets", response_model=MarketsListResponse)
def markets_list(
    q: str | None = Query(None, description="Case-insensitive substring of the question"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: DependencyService = Depends(get_service),
) -> MarketsListResponse:
    """Markets by volume, with optional question filter and limit/offset."""
    markets = service.catalog.top_by_volume(len(service.catalog))
    if q:
        needle = q.lower()
        markets = [m for m in markets if needle in m.question.lower()]
    page = markets[offset : offset + limit]
    items = []
    for m in page:
        event = service.catalog.event_for(m.id)
        items.append(
            MarketListItem(
                market_id=m.id,
                event_id=m.event_id,
                event_title=event.title if event is not None else None,
                question=m.question,
                volume=m.volume,
                volume_24h=m.volume_24h,
                outcome_prob=m.outcome_prob,
                end_date=m.end_date,
            )
        )
    return MarketsListResponse(markets=items, total=len(markets))


@app.get("/events", response_model=EventsListResponse)
def events_list(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: DependencyService = Depends(get_service),
) -> EventsListResponse:
    events = service.catalog.events
    items = [
        EventListItem(
            event_id=e.id,
            title=e.title,
            category_id=e.category_id,
            end_date=e.end_date,
            market_count=len(e.markets),
            volume=e.volume,
        )
        for e in events[offset : offset + limit]
    ]
    return EventsListResponse(events=items, total=len(events))


@app.get(
    "/graph/{market_id}",
    response_model=GraphResponse,
    responses={
        404: {"description": "Unknown center market", "model": ErrorResponse},
        422: {"description": "Invalid filters", "model": ErrorResponse},
    },
)
def dependency_graph(
    market_id: str,
    correlation_threshold: float | None = Query(None, ge=0, le=1),
    time_window: Literal["1h", "24h", "7d"] | None = Query(None),
    dependency_type: Literal["all", "structural", "correlation", "entity", "temporal"] | None = Query(None),
    show_cross_event: bool | None = Query(None),
    max_edges: int | None = Query(None, ge=0, le=500),
    min_shared_entities: int | None = Query(None, ge=1),
    max_days_diff: float | None = Query(None, gt=0),
    settings: Settings = Depends(get_app_settings),
    service: DependencyService = Depends(get_service),
):
    """Dependency graph around market_id. Filters default to the [graph] config section."""
    try:
        filters = filters_from_settings(
            settings,
            correlation_threshold=correlation_threshold,
            time_window=time_window,
            dependency_type=dependency_type,
            show_cross_event=show_cross_event,
            max_edges=max_edges,
            min_shared_entities=min_shared_entities,
            max_days_diff=max_days_diff,
        )
    except ValidationError as e:
        return _error_json("invalid_filters", str(e), status_code=422)
    # Threadpool endpoint: the history cache does blocking DuckDB I/O.
    result = asyncio.run(service.build(market_id.strip(), filters))
    if result.graph is None:
        return _error_json("not_found", f"Market not found: {market_id}")
    return GraphResponse(
        graph=result.graph,
        stats=result.stats,
        histories_requested=result.histories_requested,
        histories_received=result.histories_received,
    )


@app.get(
    "/entities/{market_id}",
    response_model=EntitiesResponse,
    responses={404: {"description": "Unknown market", "model": ErrorResponse}},
)
def entities_for_market(market_id: str, service: DependencyService = Depends(get_service)):
    """Entities in the market question and its event title."""
    market = service.catalog.market(market_id)
    if market is None:
        return _error_json("not_found", f"Market not found: {market_id}")
    entities = market_entities(market, service.catalog.event_for(market_id))
    return EntitiesResponse(market_id=market_id, entities=entities)


@app.get("/resolution-clusters", response_model=ResolutionClustersResponse)
def resolution_clusters(
    tolerance_days: int = Query(1, ge=1, le=30),
    min_size: int = Query(2, ge=1),
    service: DependencyService = Depends(get_service),
) -> ResolutionClustersResponse:
    """Markets grouped by (rounded) resolution date."""
    clusters = cluster_by_resolution_date(service.catalog.events, tolerance_days=tolerance_days)
    return ResolutionClustersResponse(
        clusters=[
            ResolutionClusterItem(date_key=c.date_key, market_ids=[m.id for m in c.markets])
            for c in clusters.values()
            if len(c.markets) >= min_size
        ]
    )


def run_api(host: str = "127.0.0.1", port: int = 8000, profile: str | None = None) -> None:
    global _config_profile
    _config_profile = profile
    import uvicorn

    uvicorn.run("depmap.api.main:app", host=host, port=port, reload=False)
