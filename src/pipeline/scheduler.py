"""Build scheduling using Python's graphlib for topological ordering.

This module provides the BuildScheduler class which wraps
graphlib.TopologicalSorter to hand out artifacts in dependency order, so
that every artifact is built only after the artifacts it depends on.
"""

from collections.abc import Iterable
from graphlib import CycleError, TopologicalSorter

from src.graph.algorithms import find_cycle
from src.graph.directed_graph import DirectedGraph
from src.graph.validator import format_cycle
from src.log_config import get_logger
from src.pipeline.dependency_analyzer import CycleDetectedError

logger = get_logger(__name__)


class BuildScheduler:
    """Build scheduler using topological sorting.

    Artifacts are registered with their direct dependencies. Calling build()
    prepares a schedule for all of them, or for a subset such as the
    out-of-date artifacts of an incremental build. Dependencies outside the
    scheduled set are treated as already built.

    Thread-safety:
        This class is NOT thread-safe. Access it from a single thread or
        protect every call with external synchronization.

    Example:
        >>> scheduler = BuildScheduler()
        >>> scheduler.add_artifact("template", set())
        >>> scheduler.add_artifact("page", {"template"})
        >>> scheduler.build()
        >>> scheduler.get_ready_artifacts()
        ('template',)
        >>> scheduler.mark_completed("template")
        >>> scheduler.get_ready_artifacts()
        ('page',)
    """

    def __init__(self):
        """Initialize an empty scheduler."""
        self.graph: dict[str, set[str]] = {}
        self.sorter: TopologicalSorter | None = None
        self.scheduled: frozenset[str] = frozenset()
        self._is_built = False

        logger.debug("build_scheduler_initialized")

    @classmethod
    def from_graph(cls, graph: DirectedGraph[str]) -> "BuildScheduler":
        """Create a scheduler from an artifact -> dependencies graph."""
        scheduler = cls()
        for artifact, dependencies in graph.to_list():
            scheduler.add_artifact(artifact, dependencies)
        return scheduler

    def add_artifact(self, artifact_id: str, dependencies: Iterable[str]) -> None:
        """Add an artifact with its direct dependencies.

        Args:
            artifact_id: Unique identifier for the artifact
            dependencies: Artifact IDs that this artifact depends on

        Note:
            Adding artifacts after build() invalidates the built state; call
            build() again before requesting ready artifacts.
        """
        if self._is_built:
            logger.warning(
                "adding_artifact_to_built_schedule",
                artifact_id=artifact_id,
                message="Schedule already built. Invalidating state - call build() again.",
            )
            self._is_built = False
            self.sorter = None

        self.graph[artifact_id] = set(dependencies)

        logger.debug(
            "artifact_added_to_schedule",
            artifact_id=artifact_id,
            dependencies=sorted(self.graph[artifact_id]),
        )

    def to_directed_graph(self) -> DirectedGraph[str]:
        """Snapshot the registered artifacts as an immutable DirectedGraph."""
        return DirectedGraph.from_list(self.graph.items())

    def build(self, only: Iterable[str] | None = None) -> None:
        """Prepare the topological schedule.

        Args:
            only: Restrict the schedule to these artifacts (default: all)

        Raises:
            CycleDetectedError: If the scheduled artifacts contain a cycle
        """
        scheduled = frozenset(self.graph if only is None else only)
        restricted = {
            artifact: self.graph.get(artifact, set()) & scheduled for artifact in scheduled
        }

        logger.info(
            "building_schedule",
            artifact_count=len(restricted),
            total_dependencies=sum(len(deps) for deps in restricted.values()),
        )

        sorter = TopologicalSorter(restricted)
        try:
            sorter.prepare()
        except CycleError as e:
            cycle = find_cycle(DirectedGraph.from_list(restricted.items()))
            error_msg = f"Cycle detected in dependency graph: {format_cycle(cycle)}"
            logger.exception("cycle_detected_in_schedule", cycle=cycle)
            raise CycleDetectedError(error_msg, cycle=cycle) from e

        self.sorter = sorter
        self.scheduled = scheduled
        self._is_built = True

        logger.info("schedule_built_successfully", artifact_count=len(restricted))

    def get_ready_artifacts(self) -> tuple[str, ...]:
        """Get artifacts whose dependencies have all been built.

        Returns:
            Tuple of artifact IDs ready to build, sorted; empty if the
            schedule has not been built or is finished
        """
        if not self._is_built or self.sorter is None:
            logger.warning(
                "get_ready_artifacts_called_before_build",
                message="Schedule not built. Call build() first.",
            )
            return ()

        if not self.sorter.is_active():
            logger.debug("no_active_artifacts_remaining")
            return ()

        ready = tuple(sorted(self.sorter.get_ready()))

        logger.debug("ready_artifacts_retrieved", count=len(ready), artifacts=list(ready))

        return ready

    def mark_completed(self, *artifact_ids: str) -> None:
        """Mark one or more artifacts as built.

        Args:
            *artifact_ids: One or more artifact IDs to mark as completed

        Raises:
            ValueError: If the schedule hasn't been built or an ID is invalid
        """
        if not self._is_built or self.sorter is None:
            error_msg = "Cannot mark artifacts completed before building schedule"
            logger.error("mark_completed_before_build", artifact_ids=artifact_ids)
            raise ValueError(error_msg)

        if not artifact_ids:
            logger.warning("mark_completed_called_with_no_artifacts")
            return

        try:
            self.sorter.done(*artifact_ids)
            logger.info(
                "artifacts_marked_completed",
                count=len(artifact_ids),
                artifacts=list(artifact_ids),
            )
        except ValueError as e:
            logger.exception(
                "error_marking_artifacts_completed",
                artifact_ids=artifact_ids,
                error=str(e),
            )
            raise

    def is_active(self) -> bool:
        """Check whether scheduled artifacts remain to be built."""
        if not self._is_built or self.sorter is None:
            return False

        return self.sorter.is_active()

    def build_order(self) -> list[tuple[str, ...]]:
        """Drain the schedule into batches of artifacts that can build together.

        Every returned batch is marked completed, so the schedule is finished
        afterwards.
        """
        batches = []
        while self.is_active():
            ready = self.get_ready_artifacts()
            if not ready:
                # Remaining artifacts were handed out earlier and never completed
                break
            batches.append(ready)
            self.mark_completed(*ready)
        return batches

    def get_stats(self) -> dict[str, int | bool]:
        """Get statistics about the current schedule.

        Returns:
            Dictionary with total_artifacts, total_dependencies,
            scheduled_artifacts, is_built and is_active
        """
        stats = {
            "total_artifacts": len(self.graph),
            "total_dependencies": sum(len(deps) for deps in self.graph.values()),
            "scheduled_artifacts": len(self.scheduled) if self._is_built else 0,
            "is_built": self._is_built,
            "is_active": self.is_active(),
        }

        logger.debug("schedule_stats_retrieved", **stats)

        return stats

    @property
    def is_built(self) -> bool:
        """Check if the schedule has been built."""
        return self._is_built
