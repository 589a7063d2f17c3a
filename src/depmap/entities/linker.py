"""Entity edges: markets that mention the same named entities."""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field

from depmap.catalog import Catalog
from depmap.entities.extractor import EntitySource, market_entities
from depmap.models import DependencyEdge, EventRecord, ExtractedEntity, edge_id
from depmap.models.graph import EntityType

WEIGHT_PER_SHARED_ENTITY = 0.3


def find_entity_dependencies(
    center_id: str,
    center_entities: list[ExtractedEntity],
    catalog: Catalog,
    min_shared_entities: int = 1,
    source: EntitySource | None = None,
) -> list[DependencyEdge]:
    """Edges from the center to every market sharing at least min_shared_entities entities."""
    if not center_entities:
        return []
    center_keys = [e.normalized for e in center_entities]
    names = {e.normalized: e.name for e in center_entities}
    edges: list[DependencyEdge] = []
    for market in catalog.all_markets():
        if market.id == center_id:
            continue
        candidate_keys = {
            e.normalized for e in market_entities(market, catalog.event_for(market.id), source)
        }
        shared = [k for k in center_keys if k in candidate_keys]
        if not shared or len(shared) < min_shared_entities:
            continue
        shared_names = [names[k] for k in shared]
        edges.append(
            DependencyEdge(
                id=edge_id("entity", center_id, market.id),
                source_id=center_id,
                target_id=market.id,
                type="entity",
                weight=min(1.0, len(shared) * WEIGHT_PER_SHARED_ENTITY),
                shared_entities=shared_names,
                explanation=f"Both mention: {', '.join(shared_names)}",
            )
        )
    edges.sort(key=lambda e: -e.weight)
    return edges


class EntityStats(BaseModel):
    type: EntityType
    count: int = 0
    markets: list[str] = Field(default_factory=list)


def entity_index(
    events: Iterable[EventRecord],
    source: EntitySource | None = None,
) -> dict[str, EntityStats]:
    """Mention counts and market ids per normalized entity across the catalog."""
    stats: dict[str, EntityStats] = {}
    for event in events:
        for market in event.markets:
            for entity in market_entities(market, event, source):
                entry = stats.get(entity.normalized)
                if entry is None:
                    entry = stats[entity.normalized] = EntityStats(type=entity.type)
                entry.count += 1
                if market.id not in entry.markets:
                    entry.markets.append(market.id)
    return stats
