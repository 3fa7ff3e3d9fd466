"""Immutable directed graph used for artifact dependency tracking.

This module provides the DirectedGraph value type: a mapping from node
identity to the set of nodes it points to. Graphs are never mutated after
construction; operations that derive a new graph (such as union) return a
fresh instance.

Example:
    >>> graph = DirectedGraph.from_list([("a", {"b"}), ("b", {"c"}), ("c", set())])
    >>> graph.neighbours("a")
    frozenset({'b'})
    >>> graph.neighbours("missing")
    frozenset()
"""

from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass
from types import MappingProxyType
from typing import Generic, TypeVar

T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True)
class Node(Generic[T]):
    """A node record inside a DirectedGraph.

    Attributes:
        identity: The node's own identity (same as its key in the graph)
        neighbours: Nodes this node points to
    """

    identity: T
    neighbours: frozenset[T]

    def merge(self, other: "Node[T]") -> "Node[T]":
        """Combine two records for the same node by unioning their neighbours."""
        return Node(self.identity, self.neighbours | other.neighbours)


class DirectedGraph(Generic[T]):
    """Set-based directed graph with value semantics.

    Node identities must be hashable and totally ordered: ordering is used to
    iterate the graph deterministically.

    A successor does not have to be a key of the graph. Looking up the
    neighbours of such a node yields an empty set, so every node is treated as
    implicitly present with no outgoing edges.

    Thread-safety:
        Instances are immutable and may be shared between threads freely.
    """

    __slots__ = ("_nodes",)

    def __init__(self, nodes: dict[T, Node[T]] | None = None):
        """Initialize a graph from a node mapping.

        Prefer from_list(); the mapping passed here is copied.

        Args:
            nodes: Mapping from node identity to its Node record
        """
        self._nodes = MappingProxyType(dict(nodes or {}))

    @classmethod
    def empty(cls) -> "DirectedGraph[T]":
        """Return a graph without nodes."""
        return cls()

    @classmethod
    def from_list(cls, pairs: Iterable[tuple[T, Iterable[T]]]) -> "DirectedGraph[T]":
        """Construct a graph from (node, neighbours) pairs.

        No acyclicity check is done. When a node occurs more than once, the
        last occurrence wins.

        Args:
            pairs: Iterable of (node, reachable neighbours) pairs

        Returns:
            The resulting directed graph
        """
        return cls({tag: Node(tag, frozenset(neighbours)) for tag, neighbours in pairs})

    def to_list(self) -> list[tuple[T, frozenset[T]]]:
        """Deconstruct the graph into (node, neighbours) pairs sorted by node."""
        return [(tag, self._nodes[tag].neighbours) for tag in self]

    def member(self, node: T) -> bool:
        """Check whether node is a key of this graph."""
        return node in self._nodes

    def nodes(self) -> frozenset[T]:
        """Get all nodes recorded as keys in the graph."""
        return frozenset(self._nodes)

    def neighbours(self, node: T) -> frozenset[T]:
        """Get the direct successors of node.

        Args:
            node: Node to get the neighbours of

        Returns:
            Set of neighbours, empty if the node is not in the graph
        """
        record = self._nodes.get(node)
        if record is None:
            return frozenset()
        return record.neighbours

    @classmethod
    def unions(cls, graphs: Iterable["DirectedGraph[T]"]) -> "DirectedGraph[T]":
        """Merge any number of graphs, unioning neighbour sets per node."""
        merged: dict[T, Node[T]] = {}
        for graph in graphs:
            for tag, record in graph._nodes.items():
                existing = merged.get(tag)
                merged[tag] = record if existing is None else existing.merge(record)
        return cls(merged)

    def union(self, other: "DirectedGraph[T]") -> "DirectedGraph[T]":
        """Merge two graphs, unioning the neighbour sets of shared nodes.

        Args:
            other: Graph to merge with this one

        Returns:
            New graph containing the nodes and edges of both graphs
        """
        return DirectedGraph.unions([self, other])

    def edge_count(self) -> int:
        """Count the edges in the graph."""
        return sum(len(record.neighbours) for record in self._nodes.values())

    def __or__(self, other: "DirectedGraph[T]") -> "DirectedGraph[T]":
        if not isinstance(other, DirectedGraph):
            return NotImplemented
        return self.union(other)

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __iter__(self) -> Iterator[T]:
        return iter(sorted(self._nodes))

    def __len__(self) -> int:
        return len(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirectedGraph):
            return NotImplemented
        return dict(self._nodes) == dict(other._nodes)

    def __hash__(self) -> int:
        return hash(frozenset(self._nodes.values()))

    def __repr__(self) -> str:
        return f"DirectedGraph.from_list({self.to_list()!r})"
