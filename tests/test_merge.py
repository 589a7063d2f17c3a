"""Edge merge priority table."""

from depmap.graph.merge import EDGE_PRIORITY, EdgeMerger
from depmap.models import DependencyEdge, edge_id


def _edge(edge_type, a="a", b="b", weight=0.5):
    return DependencyEdge(id=edge_id(edge_type, a, b), source_id=a, target_id=b, type=edge_type, weight=weight)


def test_priority_order():
    assert EDGE_PRIORITY["correlation"] > EDGE_PRIORITY["structural"] > EDGE_PRIORITY["entity"]
    assert EDGE_PRIORITY["entity"] == EDGE_PRIORITY["temporal"]


def test_higher_priority_replaces():
    merger = EdgeMerger()
    assert merger.offer(_edge("entity"))
    assert merger.offer(_edge("structural"))
    assert merger.offer(_edge("correlation", weight=0.9))
    (kept,) = merger.edges()
    assert kept.type == "correlation"


def test_lower_or_equal_priority_ignored():
    merger = EdgeMerger()
    merger.offer(_edge("entity", weight=0.3))
    assert not merger.offer(_edge("temporal", weight=1.0))
    assert not merger.offer(_edge("entity", weight=0.9))
    (kept,) = merger.edges()
    assert kept.type == "entity"
    assert kept.weight == 0.3


def test_pair_is_unordered():
    merger = EdgeMerger()
    merger.offer(_edge("structural", "a", "b"))
    assert not merger.offer(_edge("entity", "b", "a"))
    assert len(merger) == 1


def test_offer_all_counts_stored():
    merger = EdgeMerger()
    stored = merger.offer_all([_edge("temporal"), _edge("structural"), _edge("entity", "a", "c")])
    assert stored == 3
    assert len(merger) == 2


def test_weight_clamped():
    assert _edge("entity", weight=1.7).weight == 1.0
    assert _edge("entity", weight=float("nan")).weight == 0.0


def test_custom_priority_table():
    merger = EdgeMerger({"entity": 5, "correlation": 1})
    merger.offer(_edge("correlation"))
    assert merger.offer(_edge("entity"))
    assert merger.edges()[0].type == "entity"


def test_empty_priority_table_is_kept():
    assert EdgeMerger({}).priority == {}
    assert EdgeMerger().priority is EDGE_PRIORITY
