"""Dependency graph assembly."""

from depmap.graph.assembler import assemble_graph, compute_stats
from depmap.graph.merge import EDGE_PRIORITY, EdgeMerger

__all__ = ["assemble_graph", "compute_stats", "EdgeMerger", "EDGE_PRIORITY"]
