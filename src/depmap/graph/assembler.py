"""Graph assembly: run signal producers, merge edges, rank, truncate, build nodes."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

import structlog

from depmap.analysis.correlation import (
    build_correlation_edges,
    compute_volatility,
    find_correlated_markets,
)
from depmap.analysis.structural import find_structural_dependencies
from depmap.analysis.temporal import find_temporal_dependencies, market_end_date
from depmap.catalog import Catalog
from depmap.entities.extractor import EntitySource, market_entities
from depmap.entities.linker import find_entity_dependencies
from depmap.graph.merge import EdgeMerger
from depmap.models import (
    DEPENDENCY_TYPES,
    DependencyEdge,
    DependencyFilters,
    DependencyGraph,
    DependencyNode,
    EventRecord,
    GraphStats,
    MarketRecord,
    PricePoint,
)

log = structlog.get_logger(__name__)

CATEGORY_NAMES: tuple[str, ...] = (
    "Politics",
    "Sports",
    "Crypto",
    "Entertainment",
    "Science",
    "Business",
    "Other",
)

Histories = Mapping[str, Sequence[PricePoint]]


def category_name(category_id: str | None) -> str:
    """Display name for a category slug (e.g. 'politics' -> 'Politics')."""
    for name in CATEGORY_NAMES:
        if name.lower().replace(" ", "-") == category_id:
            return name
    return "Other"


def market_to_node(
    market: MarketRecord,
    event: EventRecord | None,
    histories: Histories,
) -> DependencyNode:
    history = histories.get(market.id)
    category_id = event.category_id if event is not None else market.category_id
    return DependencyNode(
        id=market.id,
        market_id=market.id,
        event_id=market.event_id or (event.id if event is not None else ""),
        event_title=event.title if event is not None else "",
        question=market.question,
        volume=market.volume,
        volume_24h=market.volume_24h,
        outcome_prob=market.outcome_prob,
        category_id=category_id,
        category_name=category_name(category_id),
        slug=market.slug,
        volatility=compute_volatility(history) if history else 0.0,
    )


def passes_cross_event_rule(
    edge: DependencyEdge,
    target: MarketRecord,
    center_event_id: str | None,
    show_cross_event: bool,
) -> bool:
    """Whether a candidate survives when cross-event links are switched off.

    Correlation keeps only same-event targets; entity and temporal keep only
    targets outside the center's event. Structural edges always come from the
    center's own event.
    """
    if show_cross_event:
        return True
    same_event = center_event_id is not None and target.event_id == center_event_id
    if edge.type == "structural":
        return edge.shared_event_id == center_event_id
    if edge.type == "correlation":
        return same_event
    return not same_event


def _candidate_edges(
    center: MarketRecord,
    center_event: EventRecord | None,
    catalog: Catalog,
    histories: Histories,
    filters: DependencyFilters,
    entity_source: EntitySource | None,
) -> list[DependencyEdge]:
    candidates: list[DependencyEdge] = []
    if filters.enabled("structural"):
        candidates.extend(find_structural_dependencies(center.id, catalog.events))
    if filters.enabled("correlation") and len(histories) > 1:
        correlations = find_correlated_markets(
            center.id,
            histories,
            threshold=filters.correlation_threshold,
            max_results=filters.max_edges,
        )
        candidates.extend(build_correlation_edges(center.id, correlations, filters.time_window))
    if filters.enabled("entity"):
        center_entities = market_entities(center, center_event, entity_source)
        candidates.extend(
            find_entity_dependencies(
                center.id,
                center_entities,
                catalog,
                min_shared_entities=filters.min_shared_entities,
                source=entity_source,
            )
        )
    if filters.enabled("temporal"):
        candidates.extend(
            find_temporal_dependencies(
                center.id,
                market_end_date(center, center_event),
                catalog,
                max_days_diff=filters.max_days_diff,
            )
        )
    return candidates


def assemble_graph(
    center_id: str,
    events: Catalog | Iterable[EventRecord],
    histories: Histories | None = None,
    filters: DependencyFilters | None = None,
    entity_source: EntitySource | None = None,
) -> DependencyGraph | None:
    """Build the dependency graph around center_id. None if the market is unknown.

    histories maps market id -> price series for the markets the caller chose
    to fetch; absent markets simply produce no correlation or volatility.
    """
    filters = filters or DependencyFilters()
    histories = histories or {}
    catalog = events if isinstance(events, Catalog) else Catalog(events)

    center = catalog.market(center_id)
    if center is None:
        log.debug("center_market_not_found", market_id=center_id)
        return None
    center_event = catalog.event_for(center_id)
    center_event_id = center_event.id if center_event is not None else None

    eligible: list[DependencyEdge] = []
    for edge in _candidate_edges(center, center_event, catalog, histories, filters, entity_source):
        target = catalog.market(edge.target_id)
        if target is None:
            continue
        if not passes_cross_event_rule(edge, target, center_event_id, filters.show_cross_event):
            continue
        eligible.append(edge)
    merger = EdgeMerger()
    merger.offer_all(eligible)

    nodes: dict[str, DependencyNode] = {
        center_id: market_to_node(center, center_event, histories),
    }
    merged = merger.edges()
    for edge in merged:
        for endpoint in (edge.source_id, edge.target_id):
            if endpoint not in nodes:
                market = catalog.market(endpoint)
                if market is not None:
                    nodes[endpoint] = market_to_node(market, catalog.event_for(endpoint), histories)

    ranked = sorted(merged, key=lambda e: (-e.weight, e.id))[: filters.max_edges]
    connected = {center_id}
    for edge in ranked:
        connected.add(edge.source_id)
        connected.add(edge.target_id)

    log.debug(
        "graph_assembled",
        center=center_id,
        candidates=len(merged),
        edges=len(ranked),
        nodes=len(connected),
    )
    return DependencyGraph(
        nodes=[node for node_id, node in nodes.items() if node_id in connected],
        edges=ranked,
        center_node_id=center_id,
    )


def compute_stats(graph: DependencyGraph | None) -> GraphStats:
    if graph is None:
        return GraphStats()
    by_type = {t: 0 for t in DEPENDENCY_TYPES}
    for edge in graph.edges:
        by_type[edge.type] += 1
    return GraphStats(total_nodes=len(graph.nodes), total_edges=len(graph.edges), by_type=by_type)
