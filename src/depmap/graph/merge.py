"""Pair-keyed edge merge with a declared priority table."""

from __future__ import annotations

from typing import Iterable

from depmap.models import DependencyEdge

# Higher wins. Equal priority: the first edge stored for a pair is kept.
EDGE_PRIORITY: dict[str, int] = {
    "correlation": 3,
    "structural": 2,
    "entity": 1,
    "temporal": 1,
}


class EdgeMerger:
    """Keeps at most one edge per unordered market pair."""

    def __init__(self, priority: dict[str, int] | None = None) -> None:
        self.priority = priority if priority is not None else EDGE_PRIORITY
        self._edges: dict[str, DependencyEdge] = {}

    def __len__(self) -> int:
        return len(self._edges)

    def offer(self, edge: DependencyEdge) -> bool:
        """Store edge unless an equal-or-higher priority edge holds its pair. Returns True if stored."""
        key = edge.pair
        current = self._edges.get(key)
        if current is not None and self.priority[edge.type] <= self.priority[current.type]:
            return False
        self._edges[key] = edge
        return True

    def offer_all(self, edges: Iterable[DependencyEdge]) -> int:
        return sum(1 for e in edges if self.offer(e))

    def edges(self) -> list[DependencyEdge]:
        return list(self._edges.values())
