"""Structural (same-event) edges."""

from depmap.analysis.structural import STRUCTURAL_WEIGHT, find_structural_dependencies
from depmap.models import EventRecord, MarketRecord


def _event(event_id, *market_ids, title="Who wins the election?"):
    return EventRecord(id=event_id, title=title, markets=[MarketRecord(id=m) for m in market_ids])


def test_sibling_markets_linked():
    edges = find_structural_dependencies("a", [_event("e1", "a", "b", "c")])
    assert [e.target_id for e in edges] == ["b", "c"]
    assert all(e.weight == STRUCTURAL_WEIGHT == 0.5 for e in edges)
    assert edges[0].shared_event_id == "e1"
    assert edges[0].explanation == 'Both markets are part of "Who wins the election?"'
    assert edges[0].id == "structural:a-b"


def test_unknown_market_has_no_structure():
    assert find_structural_dependencies("zz", [_event("e1", "a", "b")]) == []


def test_single_market_event():
    assert find_structural_dependencies("a", [_event("e1", "a")]) == []


def test_first_containing_event_wins():
    edges = find_structural_dependencies("a", [_event("e1", "a", "b"), _event("e2", "a", "c")])
    assert [e.target_id for e in edges] == ["b"]
