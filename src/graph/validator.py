"""Graph validation with cycle path reporting and visualization.

This module validates artifact dependency graphs: it reports a dependency
cycle with its complete path, lists dangling references (artifacts depended
upon but never declared), and renders graphs as Mermaid or Graphviz text.

Both renderers draw edges from a dependency to the artifact built from it,
which is the direction a build flows in.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from src.graph.algorithms import find_cycle
from src.graph.directed_graph import DirectedGraph

logger = structlog.get_logger(__name__)

_MERMAID_UNSAFE = re.compile(r"[-./]")


def format_cycle(cycle: list) -> str:
    """Render a cycle path as 'a -> b -> a'."""
    return " -> ".join(str(node) for node in [*cycle, cycle[0]])


def _edges(graph: DirectedGraph) -> list[tuple[object, object]]:
    """List (dependency, dependent) pairs in a stable order."""
    return [
        (dependency, artifact)
        for artifact, dependencies in graph.to_list()
        for dependency in sorted(dependencies)
    ]


def render_mermaid(graph: DirectedGraph) -> str:
    """Render the graph as a Mermaid flowchart."""
    if not graph:
        return "graph TD\n    Empty[Empty Graph]"

    def node_id(node: object) -> str:
        return _MERMAID_UNSAFE.sub("_", str(node))

    body = [f"    {node_id(node)}[{node}]" for node in graph]
    body += [f"    {node_id(dep)} --> {node_id(artifact)}" for dep, artifact in _edges(graph)]
    return "\n".join(["graph TD", *body])


def render_dot(graph: DirectedGraph) -> str:
    """Render the graph in Graphviz DOT syntax."""

    def quoted(node: object) -> str:
        return '"' + str(node).replace('"', '\\"') + '"'

    if not graph:
        body = ['    Empty [label="Empty Graph"];']
    else:
        body = [f"    {quoted(node)};" for node in graph]
        body += [f"    {quoted(dep)} -> {quoted(artifact)};" for dep, artifact in _edges(graph)]

    header = [
        "digraph DependencyGraph {",
        "    rankdir=LR;",
        "    node [shape=box, style=rounded];",
    ]
    return "\n".join([*header, *body, "}"])


RENDERERS: dict[str, Callable[[DirectedGraph], str]] = {
    "mermaid": render_mermaid,
    "dot": render_dot,
}


@dataclass
class ValidationReport:
    """Outcome of validating an artifact graph.

    Attributes:
        errors: Problems that make the graph unusable for a build
        warnings: Problems reported without failing validation
        cycle: The detected cycle as a list of nodes, if any
        dangling_refs: Nodes referenced as dependencies but not declared
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cycle: list | None = None
    dangling_refs: set = field(default_factory=set)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        logger.error("validation_error", message=message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning("validation_warning", message=message)

    def summary(self) -> str:
        """Generate a human-readable summary of the validation report."""
        counts = [
            f"Validation Status: {'PASS' if self.is_valid else 'FAIL'}",
            f"Errors: {len(self.errors)}",
            f"Warnings: {len(self.warnings)}",
            f"Dangling References: {len(self.dangling_refs)}",
        ]

        sections = []
        for title, messages in (("Errors", self.errors), ("Warnings", self.warnings)):
            if messages:
                sections.append("\n".join([f"{title}:", *(f"  - {m}" for m in messages)]))
        if self.cycle:
            sections.append(f"Cycle Detected: {format_cycle(self.cycle)}")
        if self.dangling_refs:
            refs = ", ".join(str(ref) for ref in sorted(self.dangling_refs))
            sections.append(f"Dangling References: {refs}")

        return "\n\n".join(["\n".join(counts), *sections])


class GraphValidator:
    """Checks an artifact graph before it is used to plan a build.

    Args:
        fail_on_cycle: Report a cycle as an error instead of a warning
        fail_on_dangling: Report dangling references as errors instead of warnings
    """

    def __init__(self, fail_on_cycle: bool = True, fail_on_dangling: bool = False):
        self.fail_on_cycle = fail_on_cycle
        self.fail_on_dangling = fail_on_dangling

    def validate(self, graph: DirectedGraph) -> ValidationReport:
        """Run the cycle and dangling reference checks.

        Args:
            graph: Graph mapping artifacts to their dependencies

        Returns:
            ValidationReport with every problem found
        """
        logger.info(
            "starting_graph_validation",
            node_count=len(graph),
            edge_count=graph.edge_count(),
        )

        report = ValidationReport(cycle=find_cycle(graph))
        if report.cycle is not None:
            message = f"Cycle detected: {format_cycle(report.cycle)}"
            if self.fail_on_cycle:
                report.add_error(message)
            else:
                report.add_warning(message)

        report.dangling_refs = self.find_dangling_refs(graph)
        if report.dangling_refs:
            refs = ", ".join(str(ref) for ref in sorted(report.dangling_refs))
            message = f"Artifacts referenced as dependencies but not declared: {refs}"
            if self.fail_on_dangling:
                report.add_error(message)
            else:
                report.add_warning(message)

        logger.info(
            "graph_validation_complete",
            is_valid=report.is_valid,
            has_cycle=report.cycle is not None,
            dangling_count=len(report.dangling_refs),
        )

        return report

    @staticmethod
    def find_dangling_refs(graph: DirectedGraph) -> set:
        """Find nodes that appear as neighbours but are not keys of the graph."""
        referenced = set()
        for _, neighbours in graph.to_list():
            referenced.update(neighbours)

        dangling = referenced - graph.nodes()
        if dangling:
            logger.debug("dangling_references_found", count=len(dangling), nodes=sorted(dangling))

        return dangling

    def generate_visualization(
        self,
        graph: DirectedGraph,
        output_format: str = "mermaid",
    ) -> str:
        """Render the graph as text.

        Args:
            graph: Graph mapping artifacts to their dependencies
            output_format: 'mermaid' or 'dot', case-insensitive

        Returns:
            The rendered graph

        Raises:
            ValueError: If the format is not supported
        """
        renderer = RENDERERS.get(output_format.strip().lower())
        if renderer is None:
            msg = f"Unsupported format: {output_format}. Use one of: {', '.join(RENDERERS)}."
            raise ValueError(msg)
        return renderer(graph)
