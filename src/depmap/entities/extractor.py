"""Dictionary-based named-entity extraction."""

from __future__ import annotations

from typing import Protocol

from depmap.entities.dictionaries import ENTITY_TABLE, EntityPattern
from depmap.models import EventRecord, ExtractedEntity, MarketRecord


class EntitySource(Protocol):
    """Anything that turns free text into entities."""

    def extract(self, text: str | None) -> list[ExtractedEntity]: ...


class DictionaryEntitySource:
    """Linear scan over a compiled pattern table. Result order is table order."""

    def __init__(self, table: tuple[EntityPattern, ...] = ENTITY_TABLE) -> None:
        self.table = table

    def extract(self, text: str | None) -> list[ExtractedEntity]:
        if not text:
            return []
        entities: list[ExtractedEntity] = []
        seen: set[str] = set()
        for entry in self.table:
            if entry.normalized in seen:
                continue
            if entry.pattern.search(text):
                seen.add(entry.normalized)
                entities.append(
                    ExtractedEntity(name=entry.name, type=entry.type, normalized=entry.normalized)
                )
        return entities


_default_source = DictionaryEntitySource()


def extract_entities(text: str | None) -> list[ExtractedEntity]:
    """Extract entities from text with the default dictionaries."""
    return _default_source.extract(text)


def merge_entities(*groups: list[ExtractedEntity]) -> list[ExtractedEntity]:
    """Concatenate entity lists, keeping the first entity per normalized key."""
    out: list[ExtractedEntity] = []
    seen: set[str] = set()
    for group in groups:
        for entity in group:
            if entity.normalized not in seen:
                seen.add(entity.normalized)
                out.append(entity)
    return out


def market_entities(
    market: MarketRecord,
    event: EventRecord | None,
    source: EntitySource | None = None,
) -> list[ExtractedEntity]:
    """Entities mentioned in the market question or its event title."""
    source = source or _default_source
    question_entities = source.extract(market.question)
    if event is None:
        return question_entities
    return merge_entities(question_entities, source.extract(event.title))
