#!/usr/bin/env python3
"""Main Entry Point and CLI Integration.

This module provides the command line interface of the artifact dependency
tracker. It loads configuration and a build manifest, builds the dependency
graph and runs one of the commands:

- check: validate the graph (cycles, undeclared dependencies)
- outdated: list the artifacts to rebuild after some artifacts changed,
  in build order
- visualize: render the graph as Mermaid or Graphviz text
"""

import argparse
import sys
from pathlib import Path

from src.config import TrackerConfig, get_config
from src.graph.directed_graph import DirectedGraph
from src.graph.validator import GraphValidator
from src.log_config import (
    bind_context,
    bind_run_id,
    configure_logging,
    get_logger,
    unbind_context,
    unbind_run_id,
)
from src.pipeline.dependency_analyzer import CycleDetectedError, DependencyAnalyzer
from src.pipeline.manifest import BuildManifest
from src.pipeline.scheduler import BuildScheduler

logger = get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def run_check(graph: DirectedGraph[str], config: TrackerConfig) -> int:
    """Validate the dependency graph and print the report.

    Args:
        graph: Artifact dependency graph
        config: Tracker configuration

    Returns:
        Exit code
    """
    validator = GraphValidator(
        fail_on_cycle=config.graph.fail_on_cycle,
        fail_on_dangling=config.graph.fail_on_dangling,
    )
    report = validator.validate(graph)
    print(report.summary())

    return EXIT_SUCCESS if report.is_valid else EXIT_FAILURE


def run_outdated(graph: DirectedGraph[str], changed: list[str], config: TrackerConfig) -> int:
    """Print the artifacts to rebuild, one batch of parallel builds per line.

    Args:
        graph: Artifact dependency graph
        changed: Artifacts whose sources changed
        config: Tracker configuration

    Returns:
        Exit code
    """
    analyzer = DependencyAnalyzer(graph)

    if config.graph.fail_on_cycle:
        analyzer.check()

    stale = analyzer.out_of_date(changed)

    scheduler = BuildScheduler.from_graph(graph)
    scheduler.build(only=stale)
    logger.info("rebuild_planned", **scheduler.get_stats())
    for batch in scheduler.build_order():
        print(" ".join(batch))

    return EXIT_SUCCESS


def run_visualize(
    graph: DirectedGraph[str],
    output_format: str | None,
    config: TrackerConfig,
) -> int:
    """Print a Mermaid or Graphviz rendering of the graph."""
    validator = GraphValidator()
    output_format = output_format or config.graph.visualization_format
    print(validator.generate_visualization(graph, output_format))
    return EXIT_SUCCESS


def main_with_args(args: argparse.Namespace) -> int:
    """Run the selected command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    exit_code = EXIT_SUCCESS
    bind_run_id()
    bind_context(command=args.command, manifest=str(args.manifest))
    configure_logging(args.log_level or "INFO")

    try:
        config = get_config(args.config, reload=True)
        level = args.log_level or config.logging_level
        configure_logging(level, json_logs=config.json_logs)

        for warning in config.validate_config():
            logger.warning("configuration_warning", message=warning)

        manifest = BuildManifest.from_yaml(args.manifest)
        graph = manifest.to_graph()
        logger.info(
            "dependency_graph_loaded",
            artifact_count=len(graph),
            dependency_count=graph.edge_count(),
        )

        if args.command == "check":
            exit_code = run_check(graph, config)
        elif args.command == "outdated":
            exit_code = run_outdated(graph, args.changed, config)
        else:
            exit_code = run_visualize(graph, args.format, config)

    except CycleDetectedError as e:
        logger.error("dependency_cycle", error=e.message, cycle=e.cycle)
        print(e.message, file=sys.stderr)
        exit_code = EXIT_FAILURE

    except FileNotFoundError as e:
        logger.exception("file_not_found", error=str(e))
        print(str(e), file=sys.stderr)
        exit_code = EXIT_FAILURE

    except ValueError as e:
        logger.exception("configuration_validation_error", error=str(e))
        print(str(e), file=sys.stderr)
        exit_code = EXIT_FAILURE

    finally:
        unbind_context("command", "manifest")
        unbind_run_id()

    return exit_code


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse (default: sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Artifact dependency tracker - cycle checks and incremental rebuild planning",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate the dependency configuration
  python main.py --manifest build.yaml check

  # Artifacts to rebuild after a template changed
  python main.py --manifest build.yaml outdated --changed templates/default.html

  # Graphviz rendering with debug logging
  python main.py --manifest build.yaml --debug visualize --format dot
        """,
    )

    parser.add_argument(
        "-m",
        "--manifest",
        type=Path,
        default=Path("build.yaml"),
        help="Path to the build manifest (default: build.yaml)",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to configuration YAML file (default: depgraph.yaml if present)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug output (DEBUG level)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (default: from configuration)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check", help="Validate the dependency graph")

    outdated = subparsers.add_parser("outdated", help="List artifacts to rebuild")
    outdated.add_argument(
        "--changed",
        nargs="+",
        required=True,
        metavar="ARTIFACT",
        help="Artifacts whose sources changed",
    )

    visualize = subparsers.add_parser("visualize", help="Render the dependency graph")
    visualize.add_argument(
        "--format",
        type=str.lower,
        choices=["mermaid", "dot"],
        default=None,
        help="Output format (default: from configuration)",
    )

    args = parser.parse_args(argv)

    if args.debug:
        args.log_level = "DEBUG"

    return args


def main() -> None:
    """Main entry point for the dependency tracker.

    This function parses arguments, runs the selected command and exits
    with the appropriate code.
    """
    args = parse_args()

    try:
        sys.exit(main_with_args(args))
    except KeyboardInterrupt:
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
