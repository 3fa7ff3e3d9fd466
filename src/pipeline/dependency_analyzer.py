"""Dependency analysis for incremental builds.

This module answers the questions the build pipeline asks of the artifact
graph: is the configuration free of cycles, what does an artifact depend on,
and which artifacts must be rebuilt after a set of artifacts changed.

The graph maps every artifact to the artifacts it depends on.
"""

from collections.abc import Iterable

from src.graph.algorithms import find_cycle, reachable_nodes, reverse
from src.graph.directed_graph import DirectedGraph
from src.graph.validator import format_cycle
from src.log_config import get_logger

# Initialize logger
logger = get_logger(__name__)


class CycleDetectedError(Exception):
    """Exception raised when a cycle is detected in the dependency graph.

    A cycle means that artifacts have circular dependencies, making it
    impossible to determine a valid build order.
    """

    def __init__(self, message: str, cycle: list[str] | None = None):
        """Initialize the exception with a descriptive message.

        Args:
            message: Description of the cycle detection error
            cycle: The cycle path, if known
        """
        super().__init__(message)
        self.message = message
        self.cycle = cycle


class DependencyAnalyzer:
    """Query helper over an artifact dependency graph.

    The reversed graph (artifact -> artifacts depending on it) is computed on
    first use and cached; the underlying graph is immutable.

    Example:
        >>> graph = DirectedGraph.from_list([("site", {"page"}), ("page", {"template"})])
        >>> analyzer = DependencyAnalyzer(graph)
        >>> sorted(analyzer.out_of_date({"template"}))
        ['page', 'site', 'template']
    """

    def __init__(self, graph: DirectedGraph[str]):
        """Initialize the analyzer.

        Args:
            graph: Graph mapping each artifact to its direct dependencies
        """
        self.graph = graph
        self._dependents: DirectedGraph[str] | None = None

        logger.debug(
            "dependency_analyzer_initialized",
            artifact_count=len(graph),
            dependency_count=graph.edge_count(),
        )

    @classmethod
    def from_dependencies(cls, dependencies: dict[str, set[str]]) -> "DependencyAnalyzer":
        """Create an analyzer from a mapping of artifact to dependencies."""
        return cls(DirectedGraph.from_list(dependencies.items()))

    @property
    def dependents(self) -> DirectedGraph[str]:
        """Graph mapping each artifact to the artifacts that depend on it."""
        if self._dependents is None:
            self._dependents = reverse(self.graph)
        return self._dependents

    def find_cycle(self) -> list[str] | None:
        """Return a dependency cycle, or None if the graph is acyclic."""
        return find_cycle(self.graph)

    def check(self) -> None:
        """Validate that the dependency configuration has no cycle.

        Raises:
            CycleDetectedError: If a cycle is found
        """
        cycle = self.find_cycle()
        if cycle is None:
            logger.info("dependency_check_passed", artifact_count=len(self.graph))
            return

        error_msg = f"Cycle detected in dependency graph: {format_cycle(cycle)}"
        logger.error("cycle_detected_in_graph", cycle=cycle, cycle_length=len(cycle))
        raise CycleDetectedError(error_msg, cycle=cycle)

    def dependencies_of(self, artifact: str) -> frozenset[str]:
        """Get every artifact the given artifact depends on, transitively."""
        return reachable_nodes({artifact}, self.graph)

    def dependents_of(self, artifact: str) -> frozenset[str]:
        """Get every artifact that depends on the given artifact, transitively."""
        return reachable_nodes({artifact}, self.dependents)

    def out_of_date(self, modified: Iterable[str]) -> frozenset[str]:
        """Compute the artifacts to rebuild after the given artifacts changed.

        The modified artifacts are always part of the result, together with
        everything that depends on them directly or indirectly.

        Args:
            modified: Artifacts whose sources changed

        Returns:
            Set of artifacts that are out of date
        """
        modified = frozenset(modified)
        stale = modified | reachable_nodes(modified, self.dependents)

        logger.info(
            "out_of_date_artifacts_computed",
            modified_count=len(modified),
            out_of_date_count=len(stale),
        )

        return stale
