"""Graph module for artifact dependency tracking.

This module provides an immutable directed graph together with the
algorithms the build pipeline relies on: reversal, transitive reachability
and cycle detection, plus validation and visualization helpers.
"""

from src.graph.algorithms import find_cycle, reachable_nodes, reverse
from src.graph.directed_graph import DirectedGraph, Node
from src.graph.validator import GraphValidator, ValidationReport, format_cycle

__all__ = [
    "DirectedGraph",
    "GraphValidator",
    "Node",
    "ValidationReport",
    "find_cycle",
    "format_cycle",
    "reachable_nodes",
    "reverse",
]
