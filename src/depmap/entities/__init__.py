"""Named-entity extraction over market text."""

from depmap.entities.extractor import (
    DictionaryEntitySource,
    EntitySource,
    extract_entities,
    market_entities,
)

__all__ = [
    "DictionaryEntitySource",
    "EntitySource",
    "extract_entities",
    "market_entities",
]
