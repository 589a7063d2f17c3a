"""Structural edges: sibling markets of the same event."""

from __future__ import annotations

from typing import Iterable

from depmap.models import DependencyEdge, EventRecord, edge_id

STRUCTURAL_WEIGHT = 0.5


def find_structural_dependencies(center_id: str, events: Iterable[EventRecord]) -> list[DependencyEdge]:
    """One edge per other market in the first event that contains the center."""
    for event in events:
        if not any(m.id == center_id for m in event.markets):
            continue
        return [
            DependencyEdge(
                id=edge_id("structural", center_id, market.id),
                source_id=center_id,
                target_id=market.id,
                type="structural",
                weight=STRUCTURAL_WEIGHT,
                shared_event_id=event.id,
                shared_event_title=event.title,
                explanation=f'Both markets are part of "{event.title}"',
            )
            for market in event.markets
            if market.id != center_id
        ]
    return []
