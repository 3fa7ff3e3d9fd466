"""Algorithms over DirectedGraph: reversal, reachability and cycle search.

All functions are pure. They never modify the input graph and never raise
because of the shape of a graph: a missing cycle is reported as None, and
unknown nodes simply have no neighbours.
"""

from collections.abc import Iterable, Iterator

import structlog

from src.graph.directed_graph import DirectedGraph, T

logger = structlog.get_logger(__name__)

_EXHAUSTED = object()


def reverse(graph: DirectedGraph[T]) -> DirectedGraph[T]:
    """Flip every edge of a directed graph.

    Each edge u -> v becomes v -> u. Nodes without incoming edges in the
    original graph have no outgoing edges after reversal and are not recorded
    as keys, so the node set is not preserved; only the edges are.

    Args:
        graph: Graph to reverse

    Returns:
        The reversed graph

    Example:
        >>> reverse(DirectedGraph.from_list([("a", {"b"})])).to_list()
        [('b', frozenset({'a'}))]
    """
    single_edges = (
        DirectedGraph.from_list([(target, {source})])
        for source, targets in graph.to_list()
        for target in targets
    )
    return DirectedGraph.unions(single_edges)


def _set_neighbours(nodes: Iterable[T], graph: DirectedGraph[T]) -> set[T]:
    result: set[T] = set()
    for node in nodes:
        result.update(graph.neighbours(node))
    return result


def reachable_nodes(seeds: Iterable[T], graph: DirectedGraph[T]) -> frozenset[T]:
    """Find all nodes reachable from the seeds through one or more edges.

    The seeds themselves are only part of the result when they can be reached
    through an edge, i.e. when another seed points to them or when they lie on
    a cycle reachable from the seeds.

    Args:
        seeds: Nodes to start from
        graph: Graph to search in

    Returns:
        Set of reachable nodes

    Example:
        >>> g = DirectedGraph.from_list([("a", {"b"}), ("b", {"c"}), ("c", set())])
        >>> sorted(reachable_nodes({"a"}, g))
        ['b', 'c']
    """
    visited: set[T] = set()
    frontier = _set_neighbours(seeds, graph)

    while frontier:
        visited |= frontier
        frontier = _set_neighbours(frontier, graph) - visited

    return frozenset(visited)


def _sorted_neighbours(node: T, graph: DirectedGraph[T]) -> Iterator[T]:
    return iter(sorted(graph.neighbours(node)))


def _find_cycle_from(
    start: T,
    graph: DirectedGraph[T],
    cleared: set[T],
) -> list[T] | None:
    """Depth-first search for a cycle reachable from start.

    Uses an explicit stack of neighbour iterators so that deep dependency
    chains cannot exhaust the interpreter's recursion limit.

    Args:
        start: Node to start the search from
        graph: Graph to search in
        cleared: Nodes known to reach no cycle; extended in place

    Returns:
        The first cycle found, or None
    """
    path: list[T] = [start]
    on_path: set[T] = {start}
    pending: list[Iterator[T]] = [_sorted_neighbours(start, graph)]

    while pending:
        successor = next(pending[-1], _EXHAUSTED)

        if successor is _EXHAUSTED:
            # Every successor of the top node was explored: backtrack
            pending.pop()
            finished = path.pop()
            on_path.discard(finished)
            cleared.add(finished)
            continue

        if successor in on_path:
            return path[path.index(successor):]

        if successor in cleared:
            continue

        path.append(successor)
        on_path.add(successor)
        pending.append(_sorted_neighbours(successor, graph))

    return None


def find_cycle(graph: DirectedGraph[T]) -> list[T] | None:
    """Find a cycle in the graph, if there is one.

    A search is started from every node of the graph in sorted order, and
    neighbours are explored in sorted order, so the reported cycle is
    deterministic. The first cycle found is returned.

    Args:
        graph: Graph to search in

    Returns:
        Cycle as a path [n1, ..., nk] where every ni -> n(i+1) is an edge and
        nk -> n1 closes the cycle, or None if the graph is acyclic

    Example:
        >>> find_cycle(DirectedGraph.from_list([("a", {"b"}), ("b", {"a"})]))
        ['a', 'b']
    """
    cleared: set[T] = set()

    for start in graph:
        if start in cleared:
            continue

        cycle = _find_cycle_from(start, graph, cleared)
        if cycle is not None:
            logger.debug("cycle_found", start=start, cycle=cycle, cycle_length=len(cycle))
            return cycle

    logger.debug("graph_is_acyclic", node_count=len(graph))
    return None
